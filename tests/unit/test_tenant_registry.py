import pytest

from delivery_status_sync.errors import TenantEnumerationFailure, TenantStoreUnavailable
from delivery_status_sync.models.domain import Tenant
from delivery_status_sync.registry import TenantCourierRegistry
from delivery_status_sync.store.memory import InMemoryDocumentStore


def _store():
    tenants = [
        {"id": "t1", "isActive": True, "database": "db1"},
        {"id": "t2", "isActive": True, "database": "db2"},
        {"id": "t3", "isActive": False, "database": "db3"},
        {"id": "t4", "isActive": True, "database": None},
    ]
    databases = {
        "db1": {"courier_services_config": [
            {"id": "Steadfast", "name": "Steadfast", "enabled": True, "credentials": {"apiKey": "k"}},
            {"id": "redx", "name": "RedX", "enabled": False},
        ]},
        "db2": {"courier_services_config": []},
        "db3": {"courier_services_config": [{"id": "redx", "enabled": True}]},
    }
    return InMemoryDocumentStore(tenants, databases)


def test_list_enabled_providers_all_active_tenants():
    out = TenantCourierRegistry(_store()).list_enabled_providers()

    assert sorted(out) == ["t1", "t2", "t4"]           # inactive t3 not enumerated
    assert [c.provider_id for c in out["t1"]] == ["steadfast"]
    assert out["t1"][0].credentials == {"apiKey": "k"}
    assert out["t2"] == []
    assert out["t4"] == []                             # no database reference


def test_list_enabled_providers_with_tenant_filter():
    out = TenantCourierRegistry(_store()).list_enabled_providers("t2")
    assert out == {"t2": []}


def test_enumeration_failure_is_fatal_type():
    class BrokenStore:
        def list_tenants(self):
            raise ConnectionError("platform db down")

    with pytest.raises(TenantEnumerationFailure):
        TenantCourierRegistry(BrokenStore()).list_tenants()


def test_enabled_providers_wraps_store_errors():
    class FlakyStore:
        def find(self, *a, **k):
            raise OSError("socket closed")

    with pytest.raises(TenantStoreUnavailable):
        TenantCourierRegistry(FlakyStore()).enabled_providers(Tenant("t1", True, "db1"))


def test_tenant_documents_without_id_are_not_enumerated():
    store = InMemoryDocumentStore(
        [{"_id": "legacy", "isActive": True, "database": "db1"},
         {"id": "t1", "isActive": True, "database": "db1"}],
        {"db1": {"courier_services_config": []}},
    )
    assert [t.id for t in TenantCourierRegistry(store).list_tenants()] == ["t1"]
    assert Tenant.from_document({"_id": "legacy"}).id == ""
