# src/delivery_status_sync/registry.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from delivery_status_sync.errors import SyncError, TenantEnumerationFailure, TenantStoreUnavailable
from delivery_status_sync.models.domain import CourierServiceConfig, Tenant
from delivery_status_sync.store.base import COURIER_SERVICES, DocumentStore

logger = logging.getLogger(__name__)


class TenantCourierRegistry:
    """Answers "which tenants exist, and which couriers has each one enabled"."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def list_tenants(self, tenant_id: Optional[str] = None) -> List[Tenant]:
        """Active tenants, optionally restricted to one id. Any store failure is fatal."""
        try:
            tenants = self.store.list_tenants()
        except Exception as ex:
            raise TenantEnumerationFailure(f"could not enumerate tenants: {ex}") from ex

        out = [t for t in tenants if t.is_active and t.id]
        if tenant_id is not None:
            out = [t for t in out if t.id == tenant_id]
        return out

    def enabled_providers(self, tenant: Tenant) -> List[CourierServiceConfig]:
        try:
            docs = self.store.find(tenant.id, COURIER_SERVICES, {"enabled": True})
        except SyncError:
            raise
        except Exception as ex:
            raise TenantStoreUnavailable(tenant.id, str(ex)) from ex

        configs = [CourierServiceConfig.from_document(d) for d in docs]
        return [c for c in configs if c.enabled and c.provider_id]

    def list_enabled_providers(self, tenant_id: Optional[str] = None) -> Dict[str, List[CourierServiceConfig]]:
        """
        {tenant_id: [enabled configs]} for every active tenant (or just `tenant_id`).
        Tenants without a database reference map to an empty list.
        """
        out: Dict[str, List[CourierServiceConfig]] = {}
        for tenant in self.list_tenants(tenant_id):
            out[tenant.id] = self.enabled_providers(tenant) if tenant.database else []
        return out
