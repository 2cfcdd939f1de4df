from __future__ import annotations

import copy
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional

from delivery_status_sync.errors import TenantStoreUnavailable
from delivery_status_sync.models.domain import Tenant
from delivery_status_sync.store.base import (
    SortSpec,
    apply_set,
    matches,
    sort_documents,
)


class InMemoryDocumentStore:
    """Dict-backed store, partitioned per tenant database.

    ``tenants`` are the platform-level tenant documents; ``databases`` maps a
    tenant's database reference to ``{collection: [documents]}``. A tenant whose
    database reference is unknown raises TenantStoreUnavailable on access, the
    same way an unreachable tenant database would.
    """

    def __init__(
        self,
        tenants: Optional[Iterable[Mapping[str, Any]]] = None,
        databases: Optional[Mapping[str, Mapping[str, List[Dict[str, Any]]]]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._tenants: List[Dict[str, Any]] = [dict(t) for t in (tenants or [])]
        self._databases: Dict[str, Dict[str, List[Dict[str, Any]]]] = {
            db: {name: [dict(d) for d in docs] for name, docs in collections.items()}
            for db, collections in (databases or {}).items()
        }

    # --- setup helpers (tests / fixtures) --------------------------------------

    def add_tenant(self, tenant_id: str, *, database: Optional[str] = None, is_active: bool = True) -> None:
        with self._lock:
            self._tenants.append({"id": tenant_id, "isActive": is_active, "database": database})
            if database:
                self._databases.setdefault(database, {})

    def insert(self, tenant_id: str, collection: str, doc: Mapping[str, Any]) -> None:
        with self._lock:
            self._collection(tenant_id, collection).append(copy.deepcopy(dict(doc)))

    # --- DocumentStore ---------------------------------------------------------

    def list_tenants(self) -> List[Tenant]:
        with self._lock:
            return [Tenant.from_document(t) for t in self._tenants]

    def _database_for(self, tenant_id: str) -> Dict[str, List[Dict[str, Any]]]:
        tenant = next((t for t in self._tenants if str(t.get("id")) == tenant_id), None)
        if tenant is None:
            raise TenantStoreUnavailable(tenant_id, "unknown tenant")
        db_ref = Tenant.from_document(tenant).database
        if not db_ref or db_ref not in self._databases:
            raise TenantStoreUnavailable(tenant_id, f"database {db_ref!r} not found")
        return self._databases[db_ref]

    def _collection(self, tenant_id: str, collection: str) -> List[Dict[str, Any]]:
        return self._database_for(tenant_id).setdefault(collection, [])

    def find(
        self,
        tenant_id: str,
        collection: str,
        filter: Mapping[str, Any],
        *,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            docs = [d for d in self._collection(tenant_id, collection) if matches(d, filter)]
            docs = sort_documents(docs, sort)
            if limit is not None and limit > 0:
                docs = docs[:limit]
            return copy.deepcopy(docs)

    def find_one(self, tenant_id: str, collection: str, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        found = self.find(tenant_id, collection, filter, limit=1)
        return found[0] if found else None

    def update_one(
        self,
        tenant_id: str,
        collection: str,
        filter: Mapping[str, Any],
        set_fields: Mapping[str, Any],
    ) -> bool:
        with self._lock:
            for doc in self._collection(tenant_id, collection):
                if matches(doc, filter):
                    apply_set(doc, copy.deepcopy(dict(set_fields)))
                    self._after_write()
                    return True
            return False

    def _after_write(self) -> None:
        """Hook for persistent subclasses; called with the lock held."""
