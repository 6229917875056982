# insights/services/auth.py
"""Credential check, sessions and profile lookup.

Sessions live in memory; a restart signs everyone out. Listeners registered
with `subscribe` are told about every SIGNED_IN / SIGNED_OUT transition.
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Literal, Optional

import bcrypt

from insights.config import ADMIN_EMAIL, ADMIN_PASSWORD
from insights.errors import AuthError, NotFound
from insights.logic import editor
from insights.logic.state import USERS
from insights.models import User
from insights.services.app_store import AppStore, get_app_store

logger = logging.getLogger(__name__)

AuthEvent = Literal["SIGNED_IN", "SIGNED_OUT"]


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Listener = Callable[[AuthEvent, Session], None]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash
        return False


class AuthService:
    def __init__(self, store: Optional[AppStore] = None):
        self._store = store
        self._sessions: Dict[str, Session] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def store(self) -> AppStore:
        return self._store or get_app_store()

    # ---------- subscription ----------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Session) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener failed on %s", event)

    # ---------- sessions ----------

    def login(self, email: str, password: str) -> Session:
        email = (email or "").strip().lower()
        user = next((u for u in self.store.state.users if u.username.lower() == email), None)
        if user is None or not check_password(password or "", user.password_hash):
            logger.info("Rejected login for %s", email or "<empty>")
            raise AuthError("Invalid login credentials")

        session = Session(token=secrets.token_urlsafe(32), user_id=user.id)
        with self._lock:
            self._sessions[session.token] = session
        logger.info("User %s signed in", user.username)
        self._emit("SIGNED_IN", session)
        return session

    def logout(self, token: str) -> None:
        with self._lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return
        logger.info("Session for user %s signed out", session.user_id)
        self._emit("SIGNED_OUT", session)

    def session(self, token: Optional[str]) -> Session:
        session = self._sessions.get(token or "")
        if session is None:
            raise AuthError("Not signed in")
        return session

    def get_current_profile(self, user_id: str) -> User:
        """Re-read the profile from live state; a removed user loses access."""
        try:
            return self.store.state.user(user_id)
        except NotFound as e:
            raise AuthError("Profile no longer exists") from e

    # ---------- bootstrap ----------

    def ensure_admin(self, email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD) -> Optional[User]:
        """Create the first ADMIN when there are no users at all."""
        if self.store.state.users:
            return None
        if not password:
            logger.warning("No users exist and ADMIN_PASSWORD is unset; nobody can sign in")
            return None
        user = self.store.run(editor.add_admin, email.strip().lower(), hash_password(password), persist=[USERS])
        logger.info("Created initial admin %s", user.username)
        return user


_auth: Optional[AuthService] = None


def get_auth() -> AuthService:
    global _auth
    if _auth is None:
        _auth = AuthService()
    return _auth


def set_auth(auth: Optional[AuthService]) -> None:
    global _auth
    _auth = auth
