# insights/deps.py
"""Request-scoped dependencies: the live store and the signed-in profile."""
from typing import Optional

from fastapi import Depends, Header

from insights.errors import Forbidden
from insights.models import User
from insights.services.app_store import AppStore, get_app_store
from insights.services.auth import AuthService, Session, get_auth


def app_store() -> AppStore:
    return get_app_store()


def auth_service() -> AuthService:
    return get_auth()


def bearer_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    return token.strip() if scheme.lower() == "bearer" else None


def current_session(token: Optional[str] = Depends(bearer_token),
                    auth: AuthService = Depends(auth_service)) -> Session:
    return auth.session(token)


def current_user(session: Session = Depends(current_session),
                 auth: AuthService = Depends(auth_service)) -> User:
    # Profile is re-read on every request so role or store changes apply at once
    return auth.get_current_profile(session.user_id)


def require_admin(user: User = Depends(current_user)) -> User:
    if user.role != "ADMIN":
        raise Forbidden("Administrator access required")
    return user
