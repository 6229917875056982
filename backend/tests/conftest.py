"""Shared fixtures: every test gets its own storage directory and fresh singletons."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from insights.logic.state import AppState
from insights.models import Store
from insights.services import app_store, auth, llm, storage

ADMIN_EMAIL = "admin@test.local"
ADMIN_PASSWORD = "admin-secret"


def _reset() -> None:
    storage.set_storage(None)
    app_store.set_app_store(None)
    auth.set_auth(None)
    llm.set_provider(None)


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path):
    _reset()
    storage.set_storage(storage.LocalStorage(base_dir=str(tmp_path)))
    yield tmp_path
    _reset()


@pytest.fixture
def client():
    from insights.main import create_app

    auth.get_auth().ensure_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    with TestClient(create_app()) as c:
        yield c


def login(client: TestClient, email: str, password: str) -> dict:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def manager_headers(client, admin_headers):
    resp = client.post(
        "/api/users",
        json={"username": "gerente@loja.com", "password": "pw-123", "assignedStoreId": "1"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return login(client, "gerente@loja.com", "pw-123")


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def stores() -> list[Store]:
    return [Store(id="1", name="Atacadão Luiz Raphael"), Store(id="2", name="Centro Ravilla"),
            Store(id="3", name="Loja Vazia")]


@pytest.fixture
def base_state() -> AppState:
    from insights.constants import DEFAULT_STORES, default_survey

    return AppState(stores=list(DEFAULT_STORES), surveys=[default_survey()])
