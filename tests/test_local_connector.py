import json

import pytest

from connectors.base import BackendError
from connectors.factory import create_backend
from connectors.local_connector import HISTORY_RETENTION, LocalConnector, SEED_CATEGORIES


def test_seed_data(seeded_backend):
    assert sorted(c["name"] for c in seeded_backend.list_categories()) == sorted(SEED_CATEGORIES)
    assert [p["code"] for p in seeded_backend.list_products()] == ["LED-H4-01"]
    assert seeded_backend.get_admin_by_username("admin")["password_hash"] != "admin123"


def test_data_survives_new_instance(tmp_path):
    path = tmp_path / "catalog.json"
    LocalConnector(path, seed=False).insert_product({"code": "A", "name": "One", "price": 1})
    assert [p["code"] for p in LocalConnector(path).list_products()] == ["A"]


def test_file_is_plain_json(backend):
    backend.insert_categories([{"name": "Velg"}])
    with open(backend.path, encoding="utf-8") as f:
        data = json.load(f)
    assert set(data) == {"products", "categories", "admin_users", "history_logs"}


def test_product_code_is_unique(backend):
    first = backend.insert_product({"code": "A", "name": "One"})
    with pytest.raises(BackendError) as exc_info:
        backend.insert_product({"code": "A", "name": "Two"})
    assert exc_info.value.status_code == 409

    second = backend.insert_product({"code": "B", "name": "Two"})
    with pytest.raises(BackendError):
        backend.update_product(second["id"], {"code": "A"})
    assert backend.update_product(first["id"], {"code": "A", "name": "Renamed"})["name"] == "Renamed"


def test_missing_rows_raise_not_found(backend):
    for call in (lambda: backend.update_product("x", {}), lambda: backend.delete_product("x"),
                 lambda: backend.delete_category("x"), lambda: backend.delete_admin("x")):
        with pytest.raises(BackendError) as exc_info:
            call()
        assert exc_info.value.status_code == 404


def test_upsert_by_code_keeps_id(backend):
    created = backend.upsert_product_by_code({"code": "A", "name": "One", "price": 1})
    updated = backend.upsert_product_by_code({"code": "A", "name": "One v2"})
    assert updated["id"] == created["id"]
    assert updated["price"] == 1
    assert len(backend.list_products()) == 1


def test_category_names_unique_case_insensitive(backend):
    backend.insert_categories([{"name": "Velg"}])
    with pytest.raises(BackendError):
        backend.insert_categories([{"name": "VELG"}])


def test_list_admins_hides_password_hash(backend):
    backend.insert_admin({"username": "siti", "password_hash": "hash"})
    assert "password_hash" not in backend.list_admins()[0]
    with pytest.raises(BackendError):
        backend.insert_admin({"username": "siti", "password_hash": "other"})


def test_history_is_newest_first_and_retained(backend):
    for i in range(HISTORY_RETENTION + 5):
        backend.insert_history({"username": "a", "action": "edit", "product_name": str(i), "product_code": str(i),
                                "timestamp": f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}+00:00"})
    history = backend.list_history(limit=1000)
    assert len(history) == HISTORY_RETENTION
    assert history[0]["product_code"] == str(HISTORY_RETENTION + 4)
    assert len(backend.list_history(limit=10)) == 10


def test_object_storage(backend):
    backend.upload_object("a.jpg", b"bytes", "image/jpeg")
    assert backend.list_objects() == ["a.jpg"]
    with pytest.raises(BackendError):
        backend.upload_object("a.jpg", b"again", "image/jpeg")
    backend.delete_objects(["a.jpg", "missing.jpg"])
    assert backend.list_objects() == []


def test_object_keys_cannot_escape_bucket(backend):
    with pytest.raises(BackendError):
        backend.upload_object("../outside.jpg", b"bytes", "image/jpeg")


def test_factory_builds_local_backend(tmp_path):
    backend = create_backend({"backend": {"kind": "local"}, "local": {"path": str(tmp_path / "c.json")}})
    assert isinstance(backend, LocalConnector)


def test_factory_rejects_unknown_kind():
    with pytest.raises(ValueError):
        create_backend({"backend": {"kind": "sheets"}})
