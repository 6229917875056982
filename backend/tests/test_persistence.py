"""Storage backends, collection repository and the state holder."""

import json

import pytest

from insights.errors import PersistenceError
from insights.logic import editor
from insights.logic.state import STORES, SURVEYS, USERS
from insights.models import User
from insights.services.app_store import AppStore
from insights.services.repository import Repository, collection_path
from insights.services.storage import CachedStorage, LocalStorage, StorageBackend


class BrokenStorage(StorageBackend):
    def write_file(self, path, content):
        raise OSError("disk full")

    def read_file(self, path):
        raise OSError("unreachable")

    def exists(self, path):
        raise OSError("unreachable")


def test_local_storage_roundtrip(tmp_path):
    store = LocalStorage(base_dir=str(tmp_path))
    store.write_json("collections/x.json", [{"a": "ç"}])
    assert store.exists("collections/x.json")
    assert store.read_json("collections/x.json") == [{"a": "ç"}]
    assert not (tmp_path / "collections" / "x.json.tmp").exists()


def test_repository_defaults_when_empty(tmp_path):
    state = Repository(LocalStorage(str(tmp_path))).load_state()
    assert [s.id for s in state.stores] == ["1", "2"]
    assert [s.id for s in state.surveys] == ["ci-001"]
    assert state.users == [] and state.submissions == []


def test_repository_writes_camel_case_and_keeps_password_hash(tmp_path):
    repo = Repository(LocalStorage(str(tmp_path)))
    repo.put(USERS, [User(id="u1", username="g", role="MANAGER", assigned_store_id="1", password_hash="h")])
    raw = json.loads((tmp_path / "collections" / "users.json").read_text(encoding="utf-8"))
    assert raw == [{"id": "u1", "username": "g", "role": "MANAGER", "assignedStoreId": "1", "passwordHash": "h"}]
    assert repo.get(USERS)[0].password_hash == "h"


def test_repository_skips_malformed_records(tmp_path):
    storage = LocalStorage(str(tmp_path))
    storage.write_json(collection_path(STORES), [{"id": "1", "name": "A"}, {"name": "no id"}, "junk"])
    assert [s.id for s in Repository(storage).get(STORES)] == ["1"]


def test_repository_write_failure_raises_persistence_error():
    with pytest.raises(PersistenceError):
        Repository(BrokenStorage()).put(STORES, [])


def test_failed_write_leaves_state_untouched(tmp_path):
    app = AppStore(Repository(LocalStorage(str(tmp_path))))
    before = app.state
    app.repository = Repository(BrokenStorage())
    with pytest.raises(PersistenceError):
        app.run(editor.add_store, "Nova", persist=[STORES])
    assert app.state is before


def test_successful_run_persists_named_collections(tmp_path):
    storage = LocalStorage(str(tmp_path))
    app = AppStore(Repository(storage))
    app.run(editor.set_survey_active, "ci-001", False, persist=[SURVEYS])
    assert storage.read_json(collection_path(SURVEYS))[0]["isActive"] is False
    assert not storage.exists(collection_path(STORES))
    assert AppStore(Repository(storage)).state.survey("ci-001").is_active is False


def test_cached_storage_falls_back_to_mirror(tmp_path):
    remote = LocalStorage(str(tmp_path / "remote"))
    cache = LocalStorage(str(tmp_path / "cache"))
    cached = CachedStorage(remote, cache)
    cached.write_json("collections/stores.json", [{"id": "1", "name": "A"}])
    assert cache.read_json("collections/stores.json") == [{"id": "1", "name": "A"}]

    offline = CachedStorage(BrokenStorage(), cache)
    assert offline.exists("collections/stores.json")
    assert offline.read_json("collections/stores.json") == [{"id": "1", "name": "A"}]
    with pytest.raises(OSError):
        offline.read_file("collections/missing.json")


def test_cached_storage_does_not_mirror_failed_writes(tmp_path):
    cache = LocalStorage(str(tmp_path / "cache"))
    with pytest.raises(OSError):
        CachedStorage(BrokenStorage(), cache).write_json("collections/stores.json", [])
    assert not cache.exists("collections/stores.json")
