"""Application state as an explicit value.

Reducers elsewhere in `insights.logic` take an `AppState` and return a new one;
they never mutate the lists they are given. Persisting a transition is the job
of `insights.services.app_store`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List

from insights.errors import NotFound
from insights.models import FormState, Store, SurveyConfig, SurveySubmission, User

# Persisted collection names
STORES = "stores"
USERS = "users"
SURVEYS = "surveys"
SUBMISSIONS = "submissions"
COLLECTIONS = (STORES, USERS, SURVEYS, SUBMISSIONS)


@dataclass(frozen=True)
class AppState:
    stores: List[Store] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    surveys: List[SurveyConfig] = field(default_factory=list)
    submissions: List[SurveySubmission] = field(default_factory=list)
    # Per-session drafts; never persisted
    forms: Dict[str, FormState] = field(default_factory=dict)

    def evolve(self, **changes) -> "AppState":
        return replace(self, **changes)

    def survey(self, survey_id: str) -> SurveyConfig:
        for s in self.surveys:
            if s.id == survey_id:
                return s
        raise NotFound(f"Survey {survey_id} not found")

    def store(self, store_id: str) -> Store:
        for s in self.stores:
            if s.id == store_id:
                return s
        raise NotFound(f"Store {store_id} not found")

    def user(self, user_id: str) -> User:
        for u in self.users:
            if u.id == user_id:
                return u
        raise NotFound(f"User {user_id} not found")

    def active_surveys(self) -> List[SurveyConfig]:
        return [s for s in self.surveys if s.is_active]


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
