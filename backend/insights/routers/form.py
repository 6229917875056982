# insights/routers/form.py
"""Field collection: one draft per signed-in station, then submit."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from insights.constants import AGE_OPTIONS, GENDER_OPTIONS
from insights.deps import app_store, current_session, current_user
from insights.errors import NotFound
from insights.logic import submissions as subs
from insights.logic.state import SUBMISSIONS, AppState
from insights.logic.visibility import visible_questions
from insights.models import AnswerValue, CamelModel, User
from insights.services.app_store import AppStore
from insights.services.auth import Session

router = APIRouter(prefix="/api/form", tags=["form"])
logger = logging.getLogger(__name__)


# ---------- Models ----------

class FormUpdateIn(CamelModel):
    customer_name: Optional[str] = None
    gender: Optional[str] = None
    age_range: Optional[str] = None
    store_id: Optional[str] = None
    nps_score: Optional[int] = None


class AnswerIn(BaseModel):
    value: AnswerValue = None


class SubmitIn(CamelModel):
    survey_id: Optional[str] = None


# ---------- Helpers ----------

def _pick_survey(state: AppState, survey_id: Optional[str]) -> str:
    if survey_id:
        return state.survey(survey_id).id
    candidates = state.active_surveys() or state.surveys
    if not candidates:
        raise NotFound("No survey configured")
    return candidates[0].id


def _form_view(state: AppState, session_id: str, survey_id: str) -> dict:
    survey = state.survey(survey_id)
    form = subs.get_form(state, session_id)
    return {
        "surveyId": survey.id,
        "form": form.to_record(),
        "visibleQuestionIds": [q.id for q in visible_questions(survey, form.answers)],
    }


# ---------- Routes ----------

@router.get("/surveys")
def list_collecting_surveys(_: User = Depends(current_user), store: AppStore = Depends(app_store)):
    """Surveys open for collection, plus the identification option lists."""
    return {
        "surveys": [s.to_record() for s in store.state.active_surveys()],
        "genderOptions": GENDER_OPTIONS,
        "ageOptions": AGE_OPTIONS,
    }


@router.get("")
def get_form(survey_id: Optional[str] = None,
             session: Session = Depends(current_session),
             store: AppStore = Depends(app_store)):
    state = store.state
    return _form_view(state, session.token, _pick_survey(state, survey_id))


@router.patch("")
def update_form(payload: FormUpdateIn,
                survey_id: Optional[str] = None,
                session: Session = Depends(current_session),
                store: AppStore = Depends(app_store)):
    fields = payload.model_dump(exclude_unset=True)
    store.run(lambda s: (subs.update_form(s, session.token, **fields), None))
    state = store.state
    return _form_view(state, session.token, _pick_survey(state, survey_id))


@router.put("/answers/{question_id}")
def set_answer(question_id: str,
               payload: AnswerIn,
               survey_id: Optional[str] = None,
               session: Session = Depends(current_session),
               store: AppStore = Depends(app_store)):
    """Record an answer and return the visibility that follows from it."""
    sid = _pick_survey(store.state, survey_id)
    store.run(subs.set_answer, session.token, sid, question_id, payload.value)
    return _form_view(store.state, session.token, sid)


@router.post("/submit", status_code=201)
def submit(payload: SubmitIn,
           session: Session = Depends(current_session),
           user: User = Depends(current_user),
           store: AppStore = Depends(app_store)):
    sid = _pick_survey(store.state, payload.survey_id)
    submission = store.run(subs.record_submission, session.token, sid, user, persist=[SUBMISSIONS])
    logger.info("Recorded submission %s (survey %s, store %s)", submission.id, sid, submission.store_id)
    return {
        "submission": submission.to_record(),
        **_form_view(store.state, session.token, sid),
    }
