# insights/routers/surveys.py
"""Admin editor for survey configurations."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from insights.deps import app_store, require_admin
from insights.logic import editor
from insights.logic.state import SURVEYS
from insights.models import AnswerValue, CamelModel, QuestionType
from insights.services.app_store import AppStore

router = APIRouter(prefix="/api/surveys", tags=["surveys"], dependencies=[Depends(require_admin)])


# ---------- Models ----------

class SurveyIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ActiveIn(BaseModel):
    active: bool


class QuestionIn(BaseModel):
    label: Optional[str] = None
    type: QuestionType = "text"
    required: bool = True


class QuestionPatchIn(BaseModel):
    label: Optional[str] = None
    type: Optional[QuestionType] = None


class PositionIn(BaseModel):
    index: int


class RequiredIn(BaseModel):
    required: bool


class DependsOnIn(CamelModel):
    question_id: str
    value: AnswerValue


# ---------- Helpers ----------

def _survey(store: AppStore, survey_id: str) -> dict:
    return store.state.survey(survey_id).to_record()


# ---------- Routes ----------

@router.get("")
def list_surveys(store: AppStore = Depends(app_store)):
    return [s.to_record() for s in store.state.surveys]


@router.post("", status_code=201)
def create_survey(payload: SurveyIn, store: AppStore = Depends(app_store)):
    survey = store.run(editor.create_survey, payload.name, payload.description, persist=[SURVEYS])
    return survey.to_record()


@router.get("/{survey_id}")
def get_survey(survey_id: str, store: AppStore = Depends(app_store)):
    return _survey(store, survey_id)


@router.patch("/{survey_id}")
def update_survey(survey_id: str, payload: SurveyIn, store: AppStore = Depends(app_store)):
    store.run(editor.update_survey, survey_id, payload.name, payload.description, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.put("/{survey_id}/active")
def set_active(survey_id: str, payload: ActiveIn, store: AppStore = Depends(app_store)):
    store.run(editor.set_survey_active, survey_id, payload.active, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.post("/{survey_id}/questions", status_code=201)
def add_question(survey_id: str, payload: QuestionIn, store: AppStore = Depends(app_store)):
    store.run(editor.add_question, survey_id, payload.label, payload.type, payload.required, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.patch("/{survey_id}/questions/{question_id}")
def update_question(survey_id: str, question_id: str, payload: QuestionPatchIn,
                    store: AppStore = Depends(app_store)):
    store.run(editor.update_question, survey_id, question_id, payload.label, payload.type, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.delete("/{survey_id}/questions/{question_id}")
def remove_question(survey_id: str, question_id: str, store: AppStore = Depends(app_store)):
    store.run(editor.remove_question, survey_id, question_id, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.put("/{survey_id}/questions/{question_id}/position")
def move_question(survey_id: str, question_id: str, payload: PositionIn,
                  store: AppStore = Depends(app_store)):
    store.run(editor.move_question, survey_id, question_id, payload.index, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.put("/{survey_id}/questions/{question_id}/required")
def set_required(survey_id: str, question_id: str, payload: RequiredIn,
                 store: AppStore = Depends(app_store)):
    store.run(editor.set_required, survey_id, question_id, payload.required, persist=[SURVEYS])
    return _survey(store, survey_id)


@router.put("/{survey_id}/questions/{question_id}/depends-on")
def set_depends_on(survey_id: str, question_id: str, payload: DependsOnIn,
                   store: AppStore = Depends(app_store)):
    store.run(editor.set_depends_on, survey_id, question_id, payload.question_id, payload.value,
              persist=[SURVEYS])
    return _survey(store, survey_id)


@router.delete("/{survey_id}/questions/{question_id}/depends-on")
def clear_depends_on(survey_id: str, question_id: str, store: AppStore = Depends(app_store)):
    store.run(editor.clear_depends_on, survey_id, question_id, persist=[SURVEYS])
    return _survey(store, survey_id)
