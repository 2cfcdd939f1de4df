# src/delivery_status_sync/pipelines/worker.py
from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from delivery_status_sync.errors import MissingPhoneForProvider, ProviderError
from delivery_status_sync.models.domain import ORDER_DELIVERED, CourierServiceConfig, Order
from delivery_status_sync.models.results import OUTCOME_UNCHANGED, OUTCOME_UPDATED, WorkerResult
from delivery_status_sync.notifier import ChangeNotifier
from delivery_status_sync.store.base import ORDERS, DocumentStore, apply_set

log = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_consignment_id(adapter: Any, order: Order) -> str:
    """
    Consignment id to send to the adapter. Providers tracking by `orderId|phone`
    get the composite rebuilt from the order when the stored id is the bare one.
    """
    stored = (order.courier.consignment_id if order.courier else None) or ""
    if not getattr(adapter, "requires_composite_id", False) or "|" in stored:
        return stored
    if not order.customer_phone:
        raise MissingPhoneForProvider(adapter.provider_id, order.id)
    return f"{order.id}|{order.customer_phone}"


class ReconciliationWorker:
    """Reconciles one order: provider call, idempotent write, change event."""

    def __init__(
        self,
        store: DocumentStore,
        adapters: Mapping[str, Any],
        notifier: Optional[ChangeNotifier] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.adapters = adapters
        self.notifier = notifier
        self.clock = clock

    def reconcile(
        self,
        tenant_id: str,
        order: Order,
        providers: Sequence[CourierServiceConfig],
    ) -> WorkerResult:
        courier = order.courier
        if courier is None or not courier.consignment_id:
            return WorkerResult.skipped(order.id, "no courier consignment on order")

        pid = (courier.provider_id or "").lower()
        config = next((c for c in providers if c.provider_id == pid), None)
        if config is None:
            return WorkerResult.skipped(order.id, f"courier {pid or '?'} not enabled for tenant", provider_id=pid)

        adapter = self.adapters.get(pid)
        if adapter is None:
            return WorkerResult.failed(order.id, f"unsupported courier service: {pid}", provider_id=pid)

        try:
            consignment_id = resolve_consignment_id(adapter, order)
            result = adapter.fetch_status(config, consignment_id)
        except (ProviderError, MissingPhoneForProvider) as ex:
            log.debug("[%s] order %s: %s", tenant_id, order.id, ex)
            return WorkerResult.failed(order.id, str(ex), provider_id=pid)

        previous = courier.delivery_status
        now = self.clock().isoformat()
        selector = {"id": order.id}

        if (result.normalized_status or "").lower() == (previous or "").lower():
            self.store.update_one(tenant_id, ORDERS, selector, {"courier.lastSyncedAt": now})
            return WorkerResult(
                order_id=order.id,
                outcome=OUTCOME_UNCHANGED,
                provider_id=pid,
                previous_status=previous,
                delivery_status=previous,
            )

        # Composite ids are ours, not the courier's; keep what we sent.
        echoed = consignment_id if adapter.requires_composite_id else (result.consignment_id or consignment_id)
        changes: Dict[str, Any] = {
            "courier.deliveryStatus": result.normalized_status,
            "courier.providerStatus": result.provider_status,
            "courier.rawStatus": result.raw,
            "courier.lastSyncedAt": now,
            "courier.consignmentId": echoed,
        }
        delivered = result.is_delivered() and order.status != ORDER_DELIVERED
        if delivered:
            changes["status"] = ORDER_DELIVERED

        if not self.store.update_one(tenant_id, ORDERS, selector, changes):
            return WorkerResult.skipped(order.id, "order no longer exists", provider_id=pid)

        log.info("[%s] order %s: %s -> %s%s", tenant_id, order.id, previous or "-",
                 result.normalized_status, " (order delivered)" if delivered else "")

        if self.notifier is not None:
            projection = copy.deepcopy(dict(order.document))
            apply_set(projection, changes)
            self.notifier.order_updated(tenant_id, projection)

        return WorkerResult(
            order_id=order.id,
            outcome=OUTCOME_UPDATED,
            provider_id=pid,
            previous_status=previous,
            delivery_status=result.normalized_status,
            order_delivered=delivered,
        )
