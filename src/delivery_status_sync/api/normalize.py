# src/delivery_status_sync/api/normalize.py
from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Sequence, Tuple

from delivery_status_sync.models.domain import (
    STATUS_CANCELLED,
    STATUS_DELIVERED,
    STATUS_IN_TRANSIT,
    STATUS_OUT_FOR_DELIVERY,
    STATUS_PENDING,
    STATUS_RETURNED,
    STATUS_UNKNOWN,
)

# provider -> normalized status -> provider tokens (slugged, see `slug`)
PROVIDER_STATUS_MAP: Dict[str, Dict[str, Sequence[str]]] = {
    "pathao": {
        STATUS_PENDING: ["pending", "pickup_requested", "assigned_for_pickup", "on_hold", "pickup_failed"],
        STATUS_IN_TRANSIT: ["picked", "at_the_sorting_hub", "in_transit", "received_at_last_mile_hub"],
        STATUS_OUT_FOR_DELIVERY: ["assigned_for_delivery"],
        STATUS_DELIVERED: ["delivered"],
        STATUS_RETURNED: ["return", "returned", "paid_return", "delivery_failed", "partial_delivery", "exchange"],
        STATUS_CANCELLED: ["pickup_cancelled", "cancelled"],
    },
    "redx": {
        STATUS_PENDING: ["pickup_pending", "agent_hold"],
        STATUS_IN_TRANSIT: ["picked_up", "ready_for_delivery", "agent_area_change"],
        STATUS_OUT_FOR_DELIVERY: ["delivery_in_progress"],
        STATUS_DELIVERED: ["delivered"],
        STATUS_RETURNED: ["agent_returning", "returned", "delivery_failed"],
        STATUS_CANCELLED: ["cancelled", "rejected"],
    },
    "steadfast": {
        STATUS_PENDING: ["pending", "in_review", "hold"],
        STATUS_OUT_FOR_DELIVERY: ["delivered_approval_pending"],
        STATUS_DELIVERED: ["delivered"],
        STATUS_RETURNED: ["partial_delivered", "partial_delivered_approval_pending"],
        STATUS_CANCELLED: ["cancelled", "cancelled_approval_pending"],
        STATUS_UNKNOWN: ["unknown", "unknown_approval_pending"],
    },
    "paperfly": {
        STATUS_PENDING: ["pending", "pick_up", "pickup", "order_placed"],
        STATUS_IN_TRANSIT: ["in_transit", "received_at_hub", "on_the_way"],
        STATUS_OUT_FOR_DELIVERY: ["out_for_delivery", "assigned_to_deliveryman"],
        STATUS_DELIVERED: ["delivered"],
        STATUS_RETURNED: ["returned", "return_to_merchant", "partially_delivered"],
        STATUS_CANCELLED: ["cancelled", "canceled"],
    },
}

# Ordered keyword rules for vocabularies the tables don't cover. Order matters:
# "partial_delivered" must hit `return` before a bare "deliver" could match.
_KEYWORD_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (STATUS_RETURNED, ("return", "partial", "failed")),
    (STATUS_CANCELLED, ("cancel", "reject")),
    (STATUS_OUT_FOR_DELIVERY, ("out_for_delivery", "for_delivery", "delivery_in_progress")),
    (STATUS_IN_TRANSIT, ("transit", "hub", "sorting", "picked", "dispatch", "shipped")),
    (STATUS_PENDING, ("pending", "request", "review", "hold", "placed", "created")),
)


def slug(raw_status: object) -> str:
    """'Delivery-In Progress ' -> 'delivery_in_progress'."""
    s = str(raw_status or "").strip().lower()
    s = re.sub(r"[\s\-]+", "_", s)
    return re.sub(r"[^a-z0-9_]", "", s).strip("_")


def humanize_status(raw_status: object) -> str:
    """
    Display label for a provider status: underscores/hyphens become spaces and
    each word is capitalised ("in_review" -> "In Review"). Empty -> "Pending".
    """
    s = str(raw_status or "").strip()
    if not s:
        return "Pending"
    words = re.split(r"[\s_\-]+", s)
    return " ".join(w[:1].upper() + w[1:].lower() for w in words if w)


def normalize_status(
    provider_id: str,
    raw_status: object,
    *,
    status_map: Optional[Mapping[str, Mapping[str, Sequence[str]]]] = None,
) -> str:
    """
    Map a provider's raw status into the closed normalized vocabulary.

    1) exact token in the provider table
    2) exact "delivered" (every courier uses this token for completion)
    3) keyword rules
    4) "unknown"
    """
    token = slug(raw_status)
    if not token:
        return STATUS_UNKNOWN

    table = (status_map or PROVIDER_STATUS_MAP).get((provider_id or "").lower(), {})
    for normalized, candidates in table.items():
        if token in candidates:
            return normalized

    if token == STATUS_DELIVERED:
        return STATUS_DELIVERED

    for normalized, keywords in _KEYWORD_RULES:
        if any(k in token for k in keywords):
            return normalized

    return STATUS_UNKNOWN
