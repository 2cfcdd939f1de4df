import json
from pathlib import Path

import pytest

from delivery_status_sync.store.json_file import JsonFileDocumentStore


def _write_store(tmp_path: Path) -> Path:
    p = tmp_path / "tenants.json"
    p.write_text(json.dumps({
        "tenants": [{"id": "t1", "isActive": True, "database": {"databaseName": "db_t1"}}],
        "databases": {"db_t1": {"orders": [{"id": "o1", "status": "shipped", "courier": {}}]}},
    }), encoding="utf-8")
    return p


def test_loads_and_persists_updates(tmp_path: Path):
    path = _write_store(tmp_path)
    store = JsonFileDocumentStore(path)

    assert [t.database for t in store.list_tenants()] == ["db_t1"]
    store.update_one("t1", "orders", {"id": "o1"}, {"courier.deliveryStatus": "in_transit"})

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["databases"]["db_t1"]["orders"][0]["courier"] == {"deliveryStatus": "in_transit"}
    assert not (tmp_path / "tenants.json.tmp").exists()

    reloaded = JsonFileDocumentStore(path)
    assert reloaded.find_one("t1", "orders", {"id": "o1"})["courier"]["deliveryStatus"] == "in_transit"


def test_missing_or_invalid_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        JsonFileDocumentStore(tmp_path / "nope.json")

    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        JsonFileDocumentStore(bad)
