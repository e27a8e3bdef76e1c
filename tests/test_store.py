# File: tests/test_store.py

import json

from portfolio_api.db.init_db import init_db
from portfolio_api.db.store import DEFAULT_SETTINGS, JsonRecordStore


def test_init_creates_file_with_defaults(tmp_path):
    path = tmp_path / "nested" / "db.json"
    store = JsonRecordStore(path).init()

    assert path.exists()
    data = json.loads(path.read_text())
    assert data["users"] == []
    assert data["projects"] == []
    assert data["files"] == {}
    assert data["settings"]["studio"] == DEFAULT_SETTINGS["studio"]
    assert store.get_projects() == []


def test_read_fills_missing_collections(tmp_path):
    path = tmp_path / "db.json"
    path.write_text(json.dumps({"projects": [{"id": 4, "title": "old"}]}))

    store = JsonRecordStore(path).init()
    assert store.get_project_by_id(4)["title"] == "old"
    assert store.get_users() == []
    assert store.get_settings()["contact"] == {"buttons": []}


def test_round_trip_survives_restart(tmp_path):
    path = tmp_path / "db.json"
    store = JsonRecordStore(path).init()
    created = store.add_project({"title": "Persisted", "status": "published"})
    store.update_settings({"siteTitle": "Changed"})
    store.close()

    reopened = JsonRecordStore(path).init()
    assert reopened.get_project_by_id(created["id"])["title"] == "Persisted"
    assert reopened.get_settings()["siteTitle"] == "Changed"


def test_add_project_allocates_ids_and_timestamps(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    first = store.add_project({"title": "a"})
    second = store.add_project({"title": "b"})

    assert first["id"] == 1
    assert second["id"] == 2
    assert first["createdAt"] == first["updatedAt"]
    assert first["createdAt"].endswith("Z")
    # missing release date defaults to creation time
    assert first["releaseDate"] == first["createdAt"]


def test_id_is_max_plus_one(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    store.add_project({"title": "a"})
    store.add_project({"title": "b"})
    store.add_project({"title": "c"})
    store.delete_project(2)

    assert store.add_project({"title": "d"})["id"] == 4


def test_update_project_keeps_identity(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    project = store.add_project({"title": "a", "category": "web"})

    updated = store.update_project(
        project["id"], {"title": "b", "id": 99, "createdAt": "1999-01-01T00:00:00.000Z"}
    )
    assert updated["id"] == project["id"]
    assert updated["title"] == "b"
    assert updated["category"] == "web"
    assert updated["createdAt"] == project["createdAt"]
    assert updated["updatedAt"] >= project["updatedAt"]


def test_missing_records_return_none(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    assert store.get_project_by_id(123) is None
    assert store.update_project(123, {"title": "x"}) is None
    assert store.delete_project(123) is None
    assert store.get_user_by_id("not-a-number") is None


def test_delete_project_returns_removed_record(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    project = store.add_project({"title": "gone"})
    removed = store.delete_project(project["id"])
    assert removed["title"] == "gone"
    assert store.get_projects() == []


def test_categories_are_distinct_sorted_and_published_only(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    store.add_project({"title": "1", "category": "web", "status": "published"})
    store.add_project({"title": "2", "category": "3d", "status": "published"})
    store.add_project({"title": "3", "category": "web", "status": "published"})
    store.add_project({"title": "4", "category": "secret", "status": "draft"})
    store.add_project({"title": "5", "category": "", "status": "published"})

    assert store.get_categories() == ["3d", "web"]


def test_settings_merge_is_shallow(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    merged = store.update_settings({"socialLinks": {"github": "me"}})
    assert merged["socialLinks"] == {"github": "me"}
    assert merged["siteTitle"] == DEFAULT_SETTINGS["siteTitle"]


def test_file_registry(tmp_path):
    store = JsonRecordStore(tmp_path / "db.json").init()
    store.register_file("abc.png", "images/abc.png")
    assert store.resolve_file_key("abc.png") == "images/abc.png"
    assert store.forget_file("abc.png") == "images/abc.png"
    assert store.resolve_file_key("abc.png") is None
    assert store.forget_file("abc.png") is None


def test_seed_creates_admin_once(config, store):
    init_db(store, config)
    init_db(store, config)

    admins = [u for u in store.get_users() if u["username"] == config.admin_username]
    assert len(admins) == 1
    assert admins[0]["role"] == "admin"
    assert admins[0]["password"] != config.admin_password
