# insights/routers/auth.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from insights.deps import auth_service, current_session, current_user
from insights.models import User
from insights.services.auth import AuthService, Session

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginIn(BaseModel):
    email: str
    password: str


@router.post("/login")
def login(payload: LoginIn, auth: AuthService = Depends(auth_service)):
    """Exchange credentials for a bearer token plus the caller's profile."""
    session = auth.login(payload.email, payload.password)
    profile = auth.get_current_profile(session.user_id)
    return {"token": session.token, "user": profile.to_record()}


@router.post("/logout")
def logout(session: Session = Depends(current_session), auth: AuthService = Depends(auth_service)):
    auth.logout(session.token)
    return {"status": "ok"}


@router.get("/me")
def me(user: User = Depends(current_user)):
    return user.to_record()
