# insights/services/repository.py
"""Whole-collection persistence for stores, users, surveys and submissions.

Each collection is one JSON document under `collections/<name>.json`. Writes
replace the whole document.
"""
import logging
from typing import Callable, Dict, List, Type

from pydantic import BaseModel, ValidationError

from insights.constants import DEFAULT_STORES, default_survey
from insights.errors import PersistenceError
from insights.logic.state import COLLECTIONS, STORES, SUBMISSIONS, SURVEYS, USERS, AppState
from insights.models import Store, SurveyConfig, SurveySubmission, User
from insights.services.storage import StorageBackend, get_storage

logger = logging.getLogger(__name__)

MODELS: Dict[str, Type[BaseModel]] = {
    STORES: Store,
    USERS: User,
    SURVEYS: SurveyConfig,
    SUBMISSIONS: SurveySubmission,
}

DEFAULTS: Dict[str, Callable[[], list]] = {
    STORES: lambda: list(DEFAULT_STORES),
    USERS: list,
    SURVEYS: lambda: [default_survey()],
    SUBMISSIONS: list,
}


def collection_path(name: str) -> str:
    return f"collections/{name}.json"


class Repository:
    def __init__(self, storage: StorageBackend | None = None):
        self._storage = storage

    @property
    def storage(self) -> StorageBackend:
        return self._storage or get_storage()

    def get(self, name: str) -> List[BaseModel]:
        """Load one collection; missing or unreadable documents yield the defaults."""
        path = collection_path(name)
        try:
            if not self.storage.exists(path):
                return DEFAULTS[name]()
            records = self.storage.read_json(path)
        except Exception as e:
            logger.error("Could not read %s, using defaults: %s", path, e)
            return DEFAULTS[name]()

        model = MODELS[name]
        items = []
        for record in records if isinstance(records, list) else []:
            try:
                items.append(model.model_validate(record))
            except ValidationError as e:
                rid = record.get("id") if isinstance(record, dict) else record
                logger.warning("Skipping malformed %s record %r: %s", name, rid, e)
        return items

    def put(self, name: str, items: List[BaseModel]) -> None:
        path = collection_path(name)
        try:
            self.storage.write_json(path, [item.to_storage() for item in items])
        except Exception as e:
            logger.error("Persisting %s failed: %s", name, e)
            raise PersistenceError(f"Could not save {name}; nothing was changed") from e

    def load_state(self) -> AppState:
        state = AppState(**{name: self.get(name) for name in COLLECTIONS})
        logger.info(
            "Loaded state: %d stores, %d users, %d surveys, %d submissions",
            len(state.stores), len(state.users), len(state.surveys), len(state.submissions),
        )
        return state
