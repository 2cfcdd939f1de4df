from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

OUTCOME_UPDATED = "updated"
OUTCOME_UNCHANGED = "unchanged"
OUTCOME_SKIPPED = "skipped"
OUTCOME_FAILED = "failed"

DEFAULT_ERROR_SAMPLE_CAP = 10


@dataclass(frozen=True)
class WorkerResult:
    """Outcome of reconciling one order."""
    order_id: str
    outcome: str
    reason: Optional[str] = None
    provider_id: Optional[str] = None
    previous_status: Optional[str] = None
    delivery_status: Optional[str] = None
    order_delivered: bool = False

    @classmethod
    def failed(cls, order_id: str, reason: str, **kw: Any) -> "WorkerResult":
        return cls(order_id=order_id, outcome=OUTCOME_FAILED, reason=reason, **kw)

    @classmethod
    def skipped(cls, order_id: str, reason: str, **kw: Any) -> "WorkerResult":
        return cls(order_id=order_id, outcome=OUTCOME_SKIPPED, reason=reason, **kw)


@dataclass
class TenantRunResult:
    tenant_id: str
    error_sample_cap: int = DEFAULT_ERROR_SAMPLE_CAP
    orders_scanned: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    error_count: int = 0
    sample_errors: list[str] = field(default_factory=list)
    outcomes: list[WorkerResult] = field(default_factory=list)

    def record(self, result: WorkerResult) -> None:
        self.outcomes.append(result)
        if result.outcome == OUTCOME_UPDATED:
            self.updated += 1
        elif result.outcome == OUTCOME_UNCHANGED:
            self.unchanged += 1
        elif result.outcome == OUTCOME_SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
            self.add_error(
                f"[{self.tenant_id}] Order {result.order_id}: {result.reason or 'unknown error'}")

    def add_error(self, message: str) -> None:
        self.error_count += 1
        if len(self.sample_errors) < self.error_sample_cap:
            self.sample_errors.append(message)


@dataclass
class TenantSummary:
    tenant_id: str
    state: str                       # "synced" | "skipped" | "failed"
    detail: str = ""
    result: Optional[TenantRunResult] = None


@dataclass
class RunResult:
    error_sample_cap: int = DEFAULT_ERROR_SAMPLE_CAP
    tenants_scanned: int = 0
    tenants_skipped: int = 0
    tenants_failed: int = 0
    orders_scanned: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    failed: int = 0
    error_count: int = 0
    sample_errors: list[str] = field(default_factory=list)
    tenants: list[TenantSummary] = field(default_factory=list)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def _add_error(self, message: str) -> None:
        self.error_count += 1
        if len(self.sample_errors) < self.error_sample_cap:
            self.sample_errors.append(message)

    def merge_tenant(self, tenant_result: TenantRunResult) -> None:
        self.orders_scanned += tenant_result.orders_scanned
        self.updated += tenant_result.updated
        self.unchanged += tenant_result.unchanged
        self.skipped += tenant_result.skipped
        self.failed += tenant_result.failed
        # Tenant samples are already capped; the run-wide cap still applies.
        for msg in tenant_result.sample_errors:
            if len(self.sample_errors) >= self.error_sample_cap:
                break
            self.sample_errors.append(msg)
        self.error_count += tenant_result.error_count
        self.tenants.append(TenantSummary(
            tenant_result.tenant_id, "synced", result=tenant_result))

    def record_tenant_skipped(self, tenant_id: str, reason: str) -> None:
        self.tenants_skipped += 1
        self.tenants.append(TenantSummary(tenant_id, "skipped", detail=reason))

    def record_tenant_error(self, tenant_id: str, message: str) -> None:
        self.tenants_failed += 1
        self._add_error(f"[{tenant_id}] {message}")
        self.tenants.append(TenantSummary(tenant_id, "failed", detail=message))

    def outcomes(self) -> list[tuple[str, WorkerResult]]:
        out: list[tuple[str, WorkerResult]] = []
        for t in self.tenants:
            if t.result is not None:
                out.extend((t.tenant_id, r) for r in t.result.outcomes)
        return out

    def to_report(self) -> dict[str, Any]:
        """Structured summary returned to the trigger caller."""
        return {
            "tenantsScanned": self.tenants_scanned,
            "tenantsSkipped": self.tenants_skipped,
            "tenantsFailed": self.tenants_failed,
            "ordersScanned": self.orders_scanned,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "failed": self.failed,
            "errorCount": self.error_count,
            "errorSampleCount": len(self.sample_errors),
            "sampleErrors": list(self.sample_errors),
            "timestamp": self.timestamp,
        }
