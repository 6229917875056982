"""Admin reducers for survey configurations, stores and users.

Every operation returns a new `AppState` plus the name of the collection it
changed, so the caller knows what to re-persist. Dependency edits are checked
here: a `depends_on` must point at an existing, strictly earlier question in
the same survey, and moves or removals that would break that are refused.
"""

from __future__ import annotations

from typing import Optional, Tuple

from insights.errors import NotFound, ValidationFailed
from insights.logic.state import STORES, SURVEYS, USERS, AppState, new_id, utc_now_iso
from insights.models import AnswerValue, DependsOn, QuestionType, Store, SurveyConfig, SurveyQuestion, User

Transition = Tuple[AppState, str]

DEFAULT_SURVEY_NAME = "Nova Auditoria de PDV"
DEFAULT_SURVEY_DESCRIPTION = "Objetivo estratégico da coleta..."
DEFAULT_QUESTION_LABEL = "Nova Pergunta Analítica"


# ---------- helpers ----------

def _replace_survey(state: AppState, survey: SurveyConfig) -> AppState:
    return state.evolve(surveys=[survey if s.id == survey.id else s for s in state.surveys])


def _with_questions(state: AppState, survey: SurveyConfig, questions: list[SurveyQuestion]) -> Transition:
    updated = survey.model_copy(update={"questions": questions})
    return _replace_survey(state, updated), SURVEYS


def _index_of(survey: SurveyConfig, question_id: str) -> int:
    for idx, q in enumerate(survey.questions):
        if q.id == question_id:
            return idx
    raise NotFound(f"Question {question_id} not found in survey {survey.id}")


def _replace_question(state: AppState, survey_id: str, question_id: str, **changes) -> Transition:
    survey = state.survey(survey_id)
    idx = _index_of(survey, question_id)
    questions = list(survey.questions)
    questions[idx] = questions[idx].model_copy(update=changes)
    return _with_questions(state, survey, questions)


def dependency_errors(questions: list[SurveyQuestion]) -> list[str]:
    """Describe every dependency that does not point at an earlier question."""
    seen: set[str] = set()
    errors = []
    for q in questions:
        dep = q.depends_on
        if dep is not None and dep.question_id not in seen:
            errors.append(f"{q.id} depends on {dep.question_id}, which is not an earlier question")
        seen.add(q.id)
    return errors


# ---------- surveys ----------

def create_survey(state: AppState, name: Optional[str] = None,
                  description: Optional[str] = None) -> Tuple[AppState, SurveyConfig]:
    survey = SurveyConfig(
        id=new_id(),
        name=name or DEFAULT_SURVEY_NAME,
        description=description or DEFAULT_SURVEY_DESCRIPTION,
        is_active=False,
        questions=[],
        created_at=utc_now_iso(),
    )
    return state.evolve(surveys=[*state.surveys, survey]), survey


def update_survey(state: AppState, survey_id: str, name: Optional[str] = None,
                  description: Optional[str] = None) -> Transition:
    survey = state.survey(survey_id)
    changes = {}
    if name is not None:
        if not name.strip():
            raise ValidationFailed("Survey name cannot be empty")
        changes["name"] = name
    if description is not None:
        changes["description"] = description
    return _replace_survey(state, survey.model_copy(update=changes)), SURVEYS


def set_survey_active(state: AppState, survey_id: str, active: bool) -> Transition:
    survey = state.survey(survey_id)
    return _replace_survey(state, survey.model_copy(update={"is_active": active})), SURVEYS


# ---------- questions ----------

def add_question(state: AppState, survey_id: str, label: Optional[str] = None,
                 type: QuestionType = "text", required: bool = True) -> Tuple[AppState, SurveyQuestion]:
    survey = state.survey(survey_id)
    question = SurveyQuestion(id=new_id(), label=label or DEFAULT_QUESTION_LABEL, type=type, required=required)
    state, _ = _with_questions(state, survey, [*survey.questions, question])
    return state, question


def update_question(state: AppState, survey_id: str, question_id: str,
                    label: Optional[str] = None, type: Optional[QuestionType] = None) -> Transition:
    changes = {}
    if label is not None:
        changes["label"] = label
    if type is not None:
        changes["type"] = type
    return _replace_question(state, survey_id, question_id, **changes)


def set_required(state: AppState, survey_id: str, question_id: str, required: bool) -> Transition:
    return _replace_question(state, survey_id, question_id, required=required)


def remove_question(state: AppState, survey_id: str, question_id: str) -> Transition:
    survey = state.survey(survey_id)
    _index_of(survey, question_id)
    dependents = [
        q.id for q in survey.questions
        if q.depends_on is not None and q.depends_on.question_id == question_id and q.id != question_id
    ]
    if dependents:
        raise ValidationFailed(
            f"Question {question_id} controls {', '.join(dependents)}; remove those conditions first"
        )
    return _with_questions(state, survey, [q for q in survey.questions if q.id != question_id])


def move_question(state: AppState, survey_id: str, question_id: str, new_index: int) -> Transition:
    survey = state.survey(survey_id)
    idx = _index_of(survey, question_id)
    if not 0 <= new_index < len(survey.questions):
        raise ValidationFailed(f"Position {new_index} is out of range")
    questions = list(survey.questions)
    questions.insert(new_index, questions.pop(idx))
    errors = dependency_errors(questions)
    if errors:
        raise ValidationFailed("; ".join(errors))
    return _with_questions(state, survey, questions)


def set_depends_on(state: AppState, survey_id: str, question_id: str,
                   parent_id: str, value: AnswerValue) -> Transition:
    survey = state.survey(survey_id)
    idx = _index_of(survey, question_id)
    earlier = {q.id for q in survey.questions[:idx]}
    if parent_id not in earlier:
        raise ValidationFailed(
            f"{question_id} can only depend on a question that comes before it"
        )
    return _replace_question(
        state, survey_id, question_id, depends_on=DependsOn(question_id=parent_id, value=value)
    )


def clear_depends_on(state: AppState, survey_id: str, question_id: str) -> Transition:
    return _replace_question(state, survey_id, question_id, depends_on=None)


# ---------- stores ----------

def add_store(state: AppState, name: str, address: Optional[str] = None) -> Tuple[AppState, Store]:
    if not name or not name.strip():
        raise ValidationFailed("Store name is required")
    store = Store(id=new_id(), name=name.strip(), address=address)
    return state.evolve(stores=[*state.stores, store]), store


def remove_store(state: AppState, store_id: str) -> Transition:
    state.store(store_id)
    assigned = [u.username for u in state.users if u.assigned_store_id == store_id]
    if assigned:
        raise ValidationFailed(f"Store {store_id} still has managers assigned: {', '.join(assigned)}")
    return state.evolve(stores=[s for s in state.stores if s.id != store_id]), STORES


# ---------- users ----------

def add_manager(state: AppState, username: str, password_hash: str,
                assigned_store_id: str) -> Tuple[AppState, User]:
    """Register a MANAGER bound to one store. The password arrives hashed."""
    username = (username or "").strip()
    if not username or not password_hash or not assigned_store_id:
        raise ValidationFailed("Username, password and store are all required")
    state.store(assigned_store_id)
    if any(u.username.lower() == username.lower() for u in state.users):
        raise ValidationFailed(f"User {username} already exists")
    user = User(
        id=new_id(),
        username=username,
        role="MANAGER",
        assigned_store_id=assigned_store_id,
        password_hash=password_hash,
    )
    return state.evolve(users=[*state.users, user]), user


def add_admin(state: AppState, username: str, password_hash: str) -> Tuple[AppState, User]:
    user = User(id=new_id(), username=username, role="ADMIN", password_hash=password_hash)
    return state.evolve(users=[*state.users, user]), user


def remove_user(state: AppState, user_id: str) -> Transition:
    state.user(user_id)
    return state.evolve(users=[u for u in state.users if u.id != user_id]), USERS
