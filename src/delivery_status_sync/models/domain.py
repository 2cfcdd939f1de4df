from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Order lifecycle. The last three are absorbing.
ORDER_PENDING = "pending"
ORDER_PROCESSING = "processing"
ORDER_SHIPPED = "shipped"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"
ORDER_REFUNDED = "refunded"

TERMINAL_ORDER_STATUSES = (ORDER_DELIVERED, ORDER_CANCELLED, ORDER_REFUNDED)

# Normalized delivery vocabulary shared by every provider adapter.
STATUS_PENDING = "pending"
STATUS_IN_TRANSIT = "in_transit"
STATUS_OUT_FOR_DELIVERY = "out_for_delivery"
STATUS_DELIVERED = "delivered"
STATUS_RETURNED = "returned"
STATUS_CANCELLED = "cancelled"
STATUS_UNKNOWN = "unknown"

NORMALIZED_STATUSES = (
    STATUS_PENDING,
    STATUS_IN_TRANSIT,
    STATUS_OUT_FOR_DELIVERY,
    STATUS_DELIVERED,
    STATUS_RETURNED,
    STATUS_CANCELLED,
    STATUS_UNKNOWN,
)


def _str_or_none(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


@dataclass(frozen=True)
class Tenant:
    id: str
    is_active: bool = True
    database: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Tenant":
        db = doc.get("database")
        # Merchant records may nest the name: {"database": {"databaseName": ...}}
        if isinstance(db, Mapping):
            db = db.get("databaseName") or db.get("name")
        return cls(
            id=str(doc.get("id") or ""),
            is_active=bool(doc.get("isActive", True)),
            database=_str_or_none(db),
        )


@dataclass(frozen=True)
class CourierServiceConfig:
    provider_id: str
    name: str = ""
    enabled: bool = False
    # Opaque to the engine; handed to the matching adapter as-is.
    credentials: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "CourierServiceConfig":
        return cls(
            provider_id=str(doc.get("id") or doc.get("providerId") or "").lower(),
            name=str(doc.get("name") or ""),
            enabled=bool(doc.get("enabled", False)),
            credentials=dict(doc.get("credentials") or {}),
        )


@dataclass(frozen=True)
class CourierInfo:
    provider_id: Optional[str]
    consignment_id: Optional[str]
    delivery_status: Optional[str] = None
    provider_status: Optional[str] = None
    last_synced_at: Optional[str] = None
    raw_status: Any = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "CourierInfo":
        provider = _str_or_none(doc.get("providerId"))
        return cls(
            provider_id=provider.lower() if provider else None,
            consignment_id=_str_or_none(doc.get("consignmentId")),
            delivery_status=_str_or_none(doc.get("deliveryStatus")),
            provider_status=_str_or_none(doc.get("providerStatus")),
            last_synced_at=_str_or_none(doc.get("lastSyncedAt")),
            raw_status=doc.get("rawStatus"),
        )


@dataclass(frozen=True)
class Order:
    id: str
    status: str
    courier: Optional[CourierInfo] = None
    customer_phone: Optional[str] = None
    is_deleted: bool = False
    # The stored document, kept so the change notifier can project the full order.
    document: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.lower() in TERMINAL_ORDER_STATUSES

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Order":
        courier_doc = doc.get("courier")
        customer = doc.get("customer") or {}
        return cls(
            id=str(doc.get("id") or ""),
            status=str(doc.get("status") or ORDER_PENDING).lower(),
            courier=CourierInfo.from_document(courier_doc) if isinstance(courier_doc, Mapping) else None,
            customer_phone=_str_or_none(customer.get("phone")) if isinstance(customer, Mapping) else None,
            is_deleted=bool(doc.get("isDeleted", False)),
            document=dict(doc),
        )
