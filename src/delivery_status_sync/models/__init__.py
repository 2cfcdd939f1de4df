from .env_cfg import SyncSettings
from .domain import CourierInfo, CourierServiceConfig, Order, Tenant
from .normalized import NormalizedStatusResult
from .results import RunResult, TenantRunResult, WorkerResult

__all__ = [
    "SyncSettings",
    "CourierInfo",
    "CourierServiceConfig",
    "Order",
    "Tenant",
    "NormalizedStatusResult",
    "RunResult",
    "TenantRunResult",
    "WorkerResult",
]
