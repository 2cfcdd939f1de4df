import threading
from typing import Any, Dict, List, Optional

import pytest

from delivery_status_sync.api.normalize import humanize_status
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.normalized import NormalizedStatusResult
from delivery_status_sync.store.memory import InMemoryDocumentStore


class FakeAdapter:
    """Stands in for a courier adapter: canned statuses, records every call."""

    def __init__(
        self,
        provider_id: str,
        statuses: Optional[Dict[str, str]] = None,
        *,
        requires_composite_id: bool = False,
        fail: Optional[set] = None,
        default: str = "in_transit",
    ):
        self.provider_id = provider_id
        self.requires_composite_id = requires_composite_id
        self.statuses = dict(statuses or {})
        self.fail = set(fail or ())
        self.default = default
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def fetch_status(self, config, consignment_id):
        with self._lock:
            self.calls.append(consignment_id)
        if "*" in self.fail or consignment_id in self.fail:
            raise ProviderError(self.provider_id, f"HTTP 500 for {consignment_id}", status_code=500)
        status = self.statuses.get(consignment_id, self.default)
        return NormalizedStatusResult(
            provider_id=self.provider_id,
            consignment_id=consignment_id,
            normalized_status=status,
            provider_status=humanize_status(status),
            raw={"status": status},
        )


def order_doc(order_id: str, cid: Optional[str] = "C1", *, provider: str = "steadfast",
              status: str = "shipped", delivery_status: Optional[str] = None,
              phone: Optional[str] = "01711000000", **extra: Any) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "id": order_id,
        "status": status,
        "customer": {"phone": phone},
        "courier": {"providerId": provider, "consignmentId": cid, "deliveryStatus": delivery_status},
    }
    doc.update(extra)
    return doc


@pytest.fixture
def fake_adapter():
    return FakeAdapter


@pytest.fixture
def make_order():
    return order_doc


@pytest.fixture
def make_store():
    """
    make_store({"t1": [order docs]}, providers={"t1": ["steadfast"]})
    One database per tenant (db_<tenant>); providers default to steadfast enabled.
    """
    def _make(orders_by_tenant: Dict[str, List[Dict[str, Any]]], providers: Optional[Dict[str, List[str]]] = None):
        tenants = []
        databases = {}
        for tid, orders in orders_by_tenant.items():
            db = f"db_{tid}"
            tenants.append({"id": tid, "isActive": True, "database": db})
            pids = (providers or {}).get(tid, ["steadfast"])
            databases[db] = {
                "courier_services_config": [
                    {"id": p, "name": p.title(), "enabled": True, "credentials": {}} for p in pids
                ],
                "orders": list(orders),
            }
        return InMemoryDocumentStore(tenants, databases)

    return _make
