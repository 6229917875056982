# insights/routers/users.py
from fastapi import APIRouter, Depends

from insights.deps import app_store, require_admin
from insights.errors import ValidationFailed
from insights.logic import editor
from insights.logic.state import USERS
from insights.models import CamelModel, User
from insights.services.app_store import AppStore
from insights.services.auth import hash_password

router = APIRouter(prefix="/api/users", tags=["users"], dependencies=[Depends(require_admin)])


class ManagerIn(CamelModel):
    username: str = ""
    password: str = ""
    assigned_store_id: str = ""


@router.get("")
def list_users(store: AppStore = Depends(app_store)):
    return [u.to_record() for u in store.state.users]


@router.post("", status_code=201)
def add_manager(payload: ManagerIn, store: AppStore = Depends(app_store)):
    """Enable a store manager account."""
    if not payload.password:
        raise ValidationFailed("Username, password and store are all required")
    user = store.run(
        editor.add_manager,
        payload.username,
        hash_password(payload.password),
        payload.assigned_store_id,
        persist=[USERS],
    )
    return user.to_record()


@router.delete("/{user_id}")
def remove_user(user_id: str, admin: User = Depends(require_admin), store: AppStore = Depends(app_store)):
    if user_id == admin.id:
        raise ValidationFailed("You cannot revoke your own account")
    store.run(editor.remove_user, user_id, persist=[USERS])
    return {"status": "ok"}
