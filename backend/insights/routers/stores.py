# insights/routers/stores.py
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from insights.deps import app_store, current_user, require_admin
from insights.logic import editor
from insights.logic.state import STORES
from insights.models import User
from insights.services.app_store import AppStore

router = APIRouter(prefix="/api/stores", tags=["stores"])


class StoreIn(BaseModel):
    name: str
    address: Optional[str] = None


@router.get("")
def list_stores(_: User = Depends(current_user), store: AppStore = Depends(app_store)):
    # Field staff without an assigned store pick one from this list
    return [s.to_record() for s in store.state.stores]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def add_store(payload: StoreIn, store: AppStore = Depends(app_store)):
    created = store.run(editor.add_store, payload.name, payload.address, persist=[STORES])
    return created.to_record()


@router.delete("/{store_id}", dependencies=[Depends(require_admin)])
def remove_store(store_id: str, store: AppStore = Depends(app_store)):
    store.run(editor.remove_store, store_id, persist=[STORES])
    return {"status": "ok"}
