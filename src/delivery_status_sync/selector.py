from __future__ import annotations

from typing import Any, Dict, List, Optional

from delivery_status_sync.models.domain import TERMINAL_ORDER_STATUSES, Order
from delivery_status_sync.store.base import ASCENDING, ORDERS, DocumentStore

DEFAULT_BATCH_SIZE = 50

# Stored statuses aren't always lower-case and the store match is exact.
_TERMINAL_SPELLINGS = sorted({
    v for s in TERMINAL_ORDER_STATUSES for v in (s, s.upper(), s.capitalize())
})

# Orders with a consignment, not soft-deleted, not in an absorbing state.
ELIGIBLE_FILTER: Dict[str, Any] = {
    "id": {"$exists": True, "$nin": [None, ""]},
    "courier.consignmentId": {"$exists": True, "$nin": [None, ""]},
    "courier.providerId": {"$exists": True, "$nin": [None, ""]},
    "status": {"$nin": _TERMINAL_SPELLINGS},
    "isDeleted": {"$ne": True},
}

# Never-synced first, then stalest, so a capped batch rotates through the backlog.
STALEST_FIRST = [("courier.lastSyncedAt", ASCENDING)]


def _eligible(order: Order) -> bool:
    return not order.is_terminal and order.courier is not None and bool(order.courier.consignment_id)


def select_eligible_orders(
    store: DocumentStore,
    tenant_id: str,
    limit: Optional[int] = DEFAULT_BATCH_SIZE,
) -> List[Order]:
    if not limit or limit <= 0:
        docs = store.find(tenant_id, ORDERS, ELIGIBLE_FILTER, sort=STALEST_FIRST)
        return [o for o in map(Order.from_document, docs) if _eligible(o)]

    # Terminal records in odd casing can still slip past the store filter.
    # They are never written, so they would hold their slots on every run;
    # widen the page until `limit` eligible orders are found or the store runs dry.
    fetch = limit
    while True:
        docs = store.find(tenant_id, ORDERS, ELIGIBLE_FILTER, sort=STALEST_FIRST, limit=fetch)
        orders = [o for o in map(Order.from_document, docs) if _eligible(o)]
        if len(orders) >= limit or len(docs) < fetch:
            return orders[:limit]
        fetch *= 2
