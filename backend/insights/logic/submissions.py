"""Collection-station drafts and submission recording."""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from insights.constants import AGE_OPTIONS, BOOLEAN_OPTIONS, DEFAULT_NPS_SCORE, GENDER_OPTIONS
from insights.errors import ValidationFailed
from insights.logic.state import AppState, new_id, utc_now_iso
from insights.logic.visibility import is_blank, missing_required, visible_questions
from insights.models import Answer, AnswerValue, FormState, SurveyQuestion, SurveySubmission, User

_answer_adapter: TypeAdapter = TypeAdapter(Answer)


# ---------- Answer coercion ----------

def _boolean_token(raw: AnswerValue) -> AnswerValue:
    if isinstance(raw, bool):
        return BOOLEAN_OPTIONS[0] if raw else BOOLEAN_OPTIONS[1]
    if isinstance(raw, str):
        for opt in BOOLEAN_OPTIONS:
            if raw.strip().lower() == opt.lower():
                return opt
    return raw


def coerce_answer(question: SurveyQuestion, raw: AnswerValue) -> Answer:
    """Validate a raw form value against the question type.

    Raises ValidationFailed naming the question when the value does not fit.
    """
    value = raw
    if question.type == "boolean":
        value = _boolean_token(raw)
    elif question.type == "text" and isinstance(raw, str):
        value = raw.strip()
    elif question.type == "rating" and isinstance(raw, bool):
        # bool is an int subclass; never accept it as a score
        value = str(raw)
    try:
        return _answer_adapter.validate_python({"kind": question.type, "value": value})
    except ValidationError as exc:
        raise ValidationFailed(
            f"Invalid answer for '{question.label}' ({question.id}): {exc.errors()[0]['msg']}"
        ) from exc


# ---------- Drafts ----------

def get_form(state: AppState, session_id: str) -> FormState:
    return state.forms.get(session_id) or FormState()


def _put_form(state: AppState, session_id: str, form: FormState) -> AppState:
    forms = dict(state.forms)
    forms[session_id] = form
    return state.evolve(forms=forms)


def update_form(state: AppState, session_id: str, **fields) -> AppState:
    """Replace identification fields, store or NPS score on the draft."""
    changes = {k: v for k, v in fields.items() if v is not None}
    if "nps_score" in changes and not 0 <= changes["nps_score"] <= 10:
        raise ValidationFailed("NPS score must be between 0 and 10")
    form = get_form(state, session_id).model_copy(update=changes)
    return _put_form(state, session_id, form)


def set_answer(state: AppState, session_id: str, survey_id: str, question_id: str,
               value: AnswerValue) -> Tuple[AppState, list[str]]:
    """Record one answer on the draft and re-evaluate visibility.

    Returns the new state and the ids of questions visible afterwards. Answers
    of questions that become hidden stay on the draft.
    """
    survey = state.survey(survey_id)
    question = survey.question(question_id)
    if question is None:
        raise ValidationFailed(f"Question {question_id} is not part of survey {survey_id}")
    if question.type == "boolean":
        value = _boolean_token(value)
    form = get_form(state, session_id)
    answers = dict(form.answers)
    answers[question_id] = value
    state = _put_form(state, session_id, form.model_copy(update={"answers": answers}))
    return state, [q.id for q in visible_questions(survey, answers)]


def clear_form(state: AppState, session_id: str) -> AppState:
    if session_id not in state.forms:
        return state
    forms = {k: v for k, v in state.forms.items() if k != session_id}
    return state.evolve(forms=forms)


# ---------- Recording ----------

def resolve_store(user: Optional[User], form: FormState) -> str:
    store_id = (user.assigned_store_id if user else None) or form.store_id
    if not store_id:
        raise ValidationFailed("Identify the store before submitting")
    return store_id


def _check_identity(form: FormState) -> None:
    if not form.customer_name.strip():
        raise ValidationFailed("Customer name is required")
    if form.gender not in GENDER_OPTIONS:
        raise ValidationFailed(f"Gender must be one of {GENDER_OPTIONS}")
    if form.age_range not in AGE_OPTIONS:
        raise ValidationFailed(f"Age range must be one of {AGE_OPTIONS}")
    if not 0 <= form.nps_score <= 10:
        raise ValidationFailed("NPS score must be between 0 and 10")


def record_submission(state: AppState, session_id: str, survey_id: str,
                      user: Optional[User] = None) -> Tuple[AppState, SurveySubmission]:
    """Turn the session's draft into a stored submission.

    The new record is prepended (most recent first). The draft keeps gender,
    age range and store so the next respondent at the same station starts
    from them; customer name, answers and NPS score are reset.
    """
    form = get_form(state, session_id)
    store_id = resolve_store(user, form)
    if not any(s.id == store_id for s in state.stores):
        raise ValidationFailed(f"Unknown store {store_id}")

    survey = state.survey(survey_id)
    if not survey.is_active:
        raise ValidationFailed(f"Survey {survey_id} is not collecting responses")
    _check_identity(form)

    missing = missing_required(survey, form.answers)
    if missing:
        raise ValidationFailed(f"Required questions unanswered: {', '.join(missing)}")

    answers: dict[str, str | int] = {}
    for q in visible_questions(survey, form.answers):
        raw = form.answers.get(q.id)
        if is_blank(raw):
            continue
        answers[q.id] = coerce_answer(q, raw).value

    submission = SurveySubmission(
        id=new_id(),
        survey_id=survey.id,
        store_id=store_id,
        timestamp=utc_now_iso(),
        customer_name=form.customer_name.strip(),
        gender=form.gender,
        age_range=form.age_range,
        nps_score=form.nps_score,
        answers=answers,
    )

    reset = form.model_copy(update={
        "customer_name": "",
        "answers": {},
        "nps_score": DEFAULT_NPS_SCORE,
    })
    state = state.evolve(submissions=[submission, *state.submissions])
    return _put_form(state, session_id, reset), submission
