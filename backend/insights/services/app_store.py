# insights/services/app_store.py
"""Holds the live AppState and persists each transition.

Routers never touch the state directly: they hand a reducer to `run`, which
applies it under a lock, writes the collections the caller names, and only
then swaps the new state in. A failed write leaves the previous state live.
"""
import logging
import threading
from typing import Any, Callable, Iterable, Optional

from insights.logic.state import AppState
from insights.services.repository import Repository

logger = logging.getLogger(__name__)


class AppStore:
    def __init__(self, repository: Optional[Repository] = None):
        self.repository = repository or Repository()
        self._lock = threading.RLock()
        self._state: Optional[AppState] = None

    @property
    def state(self) -> AppState:
        with self._lock:
            if self._state is None:
                self._state = self.repository.load_state()
            return self._state

    def run(self, reducer: Callable[..., tuple], *args, persist: Iterable[str] = (), **kwargs) -> Any:
        """Apply `reducer(state, *args, **kwargs) -> (new_state, result)`.

        Collections listed in `persist` are written before the new state
        becomes visible. Returns the reducer's result.
        """
        with self._lock:
            new_state, result = reducer(self.state, *args, **kwargs)
            for name in persist:
                self.repository.put(name, getattr(new_state, name))
            self._state = new_state
            return result

    def reload(self) -> AppState:
        with self._lock:
            self._state = None
            return self.state


_store: Optional[AppStore] = None


def get_app_store() -> AppStore:
    global _store
    if _store is None:
        _store = AppStore()
    return _store


def set_app_store(store: Optional[AppStore]) -> None:
    global _store
    _store = store
