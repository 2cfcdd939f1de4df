import pytest

from delivery_status_sync.errors import TenantStoreUnavailable
from delivery_status_sync.store.base import ASCENDING, DESCENDING, apply_set, matches
from delivery_status_sync.store.memory import InMemoryDocumentStore


def _store():
    s = InMemoryDocumentStore()
    s.add_tenant("t1", database="db1")
    s.add_tenant("t2", database="db2")
    s.insert("t1", "orders", {"id": "a", "status": "shipped", "courier": {"lastSyncedAt": "2026-01-02"}})
    s.insert("t1", "orders", {"id": "b", "status": "delivered", "courier": {"lastSyncedAt": None}})
    s.insert("t1", "orders", {"id": "c", "status": "pending", "courier": {}})
    s.insert("t2", "orders", {"id": "a", "status": "pending"})
    return s


def test_matches_operators():
    doc = {"id": "x", "status": "shipped", "courier": {"consignmentId": "C1"}, "isDeleted": False}
    assert matches(doc, {"courier.consignmentId": {"$exists": True}})
    assert not matches(doc, {"courier.providerId": {"$exists": True}})
    assert matches(doc, {"courier.providerId": {"$exists": False}})
    assert matches(doc, {"status": {"$nin": ["delivered", "cancelled"]}})
    assert matches(doc, {"status": {"$in": ["shipped"]}})
    assert matches(doc, {"isDeleted": {"$ne": True}})
    assert matches({"id": "y"}, {"isDeleted": {"$ne": True}})   # missing != True
    assert matches(doc, {"courier.consignmentId": "C1", "id": "x"})
    assert not matches(doc, {"courier.consignmentId": {"$nin": [None, "", "C1"]}})


def test_matches_rejects_unknown_operator():
    with pytest.raises(ValueError):
        matches({"a": 1}, {"a": {"$regex": "1"}})


def test_apply_set_creates_intermediate_objects():
    doc = {"id": "x", "courier": None}
    apply_set(doc, {"courier.deliveryStatus": "delivered", "status": "delivered"})
    assert doc == {"id": "x", "courier": {"deliveryStatus": "delivered"}, "status": "delivered"}


def test_find_is_partitioned_by_tenant():
    s = _store()
    assert [d["id"] for d in s.find("t2", "orders", {})] == ["a"]
    assert len(s.find("t1", "orders", {})) == 3


def test_find_sort_puts_missing_first_and_limits():
    s = _store()
    asc = s.find("t1", "orders", {}, sort=[("courier.lastSyncedAt", ASCENDING)])
    assert [d["id"] for d in asc][-1] == "a"
    desc = s.find("t1", "orders", {}, sort=[("courier.lastSyncedAt", DESCENDING)], limit=1)
    assert [d["id"] for d in desc] == ["a"]


def test_find_returns_copies():
    s = _store()
    doc = s.find_one("t1", "orders", {"id": "a"})
    doc["status"] = "mutated"
    assert s.find_one("t1", "orders", {"id": "a"})["status"] == "shipped"


def test_update_one_sets_dotted_paths_in_one_tenant_only():
    s = _store()
    assert s.update_one("t1", "orders", {"id": "a"}, {"courier.deliveryStatus": "delivered"}) is True
    assert s.find_one("t1", "orders", {"id": "a"})["courier"] == {
        "lastSyncedAt": "2026-01-02", "deliveryStatus": "delivered"}
    assert "courier" not in s.find_one("t2", "orders", {"id": "a"})
    assert s.update_one("t1", "orders", {"id": "zzz"}, {"status": "x"}) is False


def test_unknown_tenant_or_database_is_unavailable():
    s = _store()
    with pytest.raises(TenantStoreUnavailable):
        s.find("nope", "orders", {})

    s2 = InMemoryDocumentStore(tenants=[{"id": "t9", "isActive": True, "database": "gone"}])
    with pytest.raises(TenantStoreUnavailable) as e:
        s2.find("t9", "orders", {})
    assert e.value.tenant_id == "t9"
