# src/delivery_status_sync/errors.py
from __future__ import annotations

from typing import Optional


class SyncError(RuntimeError):
    """Base class for reconciliation errors."""


class ProviderError(SyncError):
    """Transport, HTTP status or payload failure while calling a courier API."""

    def __init__(self, provider_id: str, message: str, *, status_code: Optional[int] = None) -> None:
        self.provider_id = provider_id
        self.status_code = status_code
        super().__init__(f"{provider_id}: {message}")


class MissingPhoneForProvider(SyncError):
    """A composite `orderId|phone` consignment could not be rebuilt."""

    def __init__(self, provider_id: str, order_id: str) -> None:
        self.provider_id = provider_id
        self.order_id = order_id
        super().__init__(
            f"{provider_id} tracking requires consignment in format 'orderId|phone' "
            f"and order {order_id} has no customer phone on file"
        )


class TenantStoreUnavailable(SyncError):
    """Persistence for a single tenant could not be reached."""

    def __init__(self, tenant_id: str, reason: str) -> None:
        self.tenant_id = tenant_id
        super().__init__(f"store unavailable for tenant {tenant_id}: {reason}")


class TenantEnumerationFailure(SyncError):
    """Tenants could not be listed at all. Fatal for the run."""


__all__ = [
    "SyncError",
    "ProviderError",
    "MissingPhoneForProvider",
    "TenantStoreUnavailable",
    "TenantEnumerationFailure",
]
