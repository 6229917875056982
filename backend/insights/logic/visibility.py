"""Conditional question visibility.

A question carrying `depends_on` is shown only while the referenced question's
current answer equals the configured value, compared as trimmed, lowercased
strings. References to later questions (or to the question itself) are not
special-cased: whatever the lookup yields decides, which in practice means the
question stays hidden.
"""

from __future__ import annotations

from typing import Mapping

from insights.models import AnswerValue, SurveyConfig, SurveyQuestion


def _canon(value: object) -> str:
    return str(value).lower().strip()


def is_visible(question: SurveyQuestion, answered_so_far: Mapping[str, AnswerValue]) -> bool:
    dep = question.depends_on
    if dep is None:
        return True
    current = answered_so_far.get(dep.question_id)
    if current is None:
        current = ""
    return _canon(current) == _canon(dep.value)


def visible_questions(survey: SurveyConfig, answers: Mapping[str, AnswerValue]) -> list[SurveyQuestion]:
    return [q for q in survey.questions if is_visible(q, answers)]


def is_blank(value: AnswerValue) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_required(survey: SurveyConfig, answers: Mapping[str, AnswerValue]) -> list[str]:
    """Ids of visible, required questions that have no answer yet.

    Hidden questions never count, even if they carry a stale answer.
    """
    return [
        q.id
        for q in visible_questions(survey, answers)
        if q.required and is_blank(answers.get(q.id))
    ]
