from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from delivery_status_sync.models.domain import CourierServiceConfig, Order
from delivery_status_sync.models.results import DEFAULT_ERROR_SAMPLE_CAP, TenantRunResult, WorkerResult
from delivery_status_sync.pipelines.worker import ReconciliationWorker

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 5
DEFAULT_PACING_MS = 150


class BatchScheduler:
    """Runs one tenant's orders through the worker in fixed-size concurrent chunks.

    Each chunk of `concurrency` orders is fanned out on a thread pool and fully
    drained before the next starts. A pacing sleep separates chunks (none after
    the last) to stay under courier rate limits.
    """

    def __init__(
        self,
        worker: ReconciliationWorker,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        pacing_ms: int = DEFAULT_PACING_MS,
        error_sample_cap: int = DEFAULT_ERROR_SAMPLE_CAP,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.worker = worker
        self.concurrency = concurrency
        self.pacing_ms = pacing_ms
        self.error_sample_cap = error_sample_cap
        self.sleep = sleep

    def _safe_reconcile(self, tenant_id: str, order: Order, providers: Sequence[CourierServiceConfig]) -> WorkerResult:
        try:
            return self.worker.reconcile(tenant_id, order, providers)
        except Exception as ex:
            log.exception("[%s] order %s: unexpected error", tenant_id, order.id)
            return WorkerResult.failed(order.id, f"{type(ex).__name__}: {ex}")

    def run_tenant(
        self,
        tenant_id: str,
        orders: Sequence[Order],
        providers: Sequence[CourierServiceConfig],
        concurrency: Optional[int] = None,
    ) -> TenantRunResult:
        size = max(int(concurrency or self.concurrency), 1)
        result = TenantRunResult(tenant_id=tenant_id, error_sample_cap=self.error_sample_cap)
        result.orders_scanned = len(orders)

        chunks = [orders[i:i + size] for i in range(0, len(orders), size)]
        with ThreadPoolExecutor(max_workers=size, thread_name_prefix=f"sync-{tenant_id}") as pool:
            for n, chunk in enumerate(chunks):
                futures = [pool.submit(self._safe_reconcile, tenant_id, o, providers) for o in chunk]
                # Counters are only touched here, on the calling thread.
                for fut in as_completed(futures):
                    result.record(fut.result())

                if n < len(chunks) - 1 and self.pacing_ms > 0:
                    self.sleep(self.pacing_ms / 1000.0)

        log.debug("[%s] %d orders in %d chunk(s): updated=%d unchanged=%d skipped=%d failed=%d",
                  tenant_id, len(orders), len(chunks), result.updated, result.unchanged,
                  result.skipped, result.failed)
        return result
