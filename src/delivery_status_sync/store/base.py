"""Document-store contract and the Mongo-style filter/update helpers.

Only the small query subset the engine needs is supported:

- equality on (dotted) paths: ``{"courier.providerId": "redx"}``
- operators: ``$exists``, ``$ne``, ``$in``, ``$nin``
- updates: ``$set``-style ``{dotted.path: value}`` partial sets
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from delivery_status_sync.models.domain import Tenant

ORDERS = "orders"
COURIER_SERVICES = "courier_services_config"

ASCENDING = 1
DESCENDING = -1

SortSpec = Sequence[Tuple[str, int]]

_MISSING = object()


class DocumentStore(Protocol):
    def list_tenants(self) -> List[Tenant]:
        ...

    def find(
        self,
        tenant_id: str,
        collection: str,
        filter: Mapping[str, Any],
        *,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ...

    def find_one(self, tenant_id: str, collection: str, filter: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def update_one(
        self,
        tenant_id: str,
        collection: str,
        filter: Mapping[str, Any],
        set_fields: Mapping[str, Any],
    ) -> bool:
        ...


def get_path(doc: Mapping[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = doc
    for part in path.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return default
        cur = cur[part]
    return cur


def _match_condition(value: Any, cond: Any) -> bool:
    if not (isinstance(cond, Mapping) and cond and all(str(k).startswith("$") for k in cond)):
        return value is not _MISSING and value == cond

    present = value is not _MISSING
    v = value if present else None
    for op, arg in cond.items():
        if op == "$exists":
            if present != bool(arg):
                return False
        elif op == "$ne":
            if v == arg:
                return False
        elif op == "$in":
            if v not in list(arg):
                return False
        elif op == "$nin":
            if v in list(arg):
                return False
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return True


def matches(doc: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    return all(_match_condition(get_path(doc, path, _MISSING), cond) for path, cond in (filter or {}).items())


def apply_set(doc: Dict[str, Any], set_fields: Mapping[str, Any]) -> None:
    """In-place ``$set``; intermediate objects are created (or replaced if not a dict)."""
    for path, value in set_fields.items():
        parts = path.split(".")
        cur = doc
        for part in parts[:-1]:
            nxt = cur.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cur[part] = nxt
            cur = nxt
        cur[parts[-1]] = value


def sort_documents(docs: List[Dict[str, Any]], sort: Optional[SortSpec]) -> List[Dict[str, Any]]:
    """Stable multi-key sort. Missing/None values sort first when ascending."""
    out = list(docs)
    for path, direction in reversed(list(sort or ())):
        def key(d: Dict[str, Any], _p: str = path) -> Tuple[int, str]:
            v = get_path(d, _p)
            return (0, "") if v is None else (1, str(v))

        out.sort(key=key, reverse=direction == DESCENDING)
    return out
