# src/delivery_status_sync/pipelines/orchestrator.py
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from delivery_status_sync.api.registry import build_adapters
from delivery_status_sync.models.env_cfg import SyncSettings
from delivery_status_sync.models.results import RunResult
from delivery_status_sync.notifier import ChangeNotifier, LoggingPubSub, PubSub
from delivery_status_sync.pipelines.scheduler import BatchScheduler
from delivery_status_sync.pipelines.worker import ReconciliationWorker, utcnow
from delivery_status_sync.registry import TenantCourierRegistry
from delivery_status_sync.selector import select_eligible_orders
from delivery_status_sync.store.base import DocumentStore

log = logging.getLogger(__name__)


class RunOrchestrator:
    """
    One sweep over every tenant:
      enumerate -> enabled couriers -> eligible orders -> scheduler -> merge.

    Tenants run one after another. Anything a single tenant raises is recorded
    against that tenant and the sweep moves on; only a failure to enumerate
    tenants at all propagates (TenantEnumerationFailure).
    """

    def __init__(
        self,
        store: DocumentStore,
        adapters: Mapping[str, Any],
        pubsub: Optional[PubSub] = None,
        *,
        settings: Optional[SyncSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.settings = settings or SyncSettings()
        self.registry = TenantCourierRegistry(store)
        self.worker = ReconciliationWorker(
            store, adapters, ChangeNotifier(pubsub) if pubsub is not None else None, clock=clock)
        self.sleep = sleep

    def run_once(
        self,
        tenant_id: Optional[str] = None,
        batch_size: Optional[int] = None,
        concurrency: Optional[int] = None,
    ) -> RunResult:
        s = self.settings
        batch_size = batch_size or s.SYNC_BATCH_SIZE
        concurrency = concurrency or s.SYNC_CONCURRENCY
        scheduler = BatchScheduler(
            self.worker,
            concurrency=concurrency,
            pacing_ms=s.SYNC_PACING_MS,
            error_sample_cap=s.SYNC_ERROR_SAMPLE_CAP,
            sleep=self.sleep,
        )
        run = RunResult(error_sample_cap=s.SYNC_ERROR_SAMPLE_CAP)

        log.info("Delivery status sync started (tenant=%s batch_size=%d concurrency=%d)",
                 tenant_id or "*", batch_size, concurrency)
        tenants = self.registry.list_tenants(tenant_id)

        for tenant in tenants:
            run.tenants_scanned += 1
            if not tenant.database:
                log.info("[%s] skipped: no database configured", tenant.id)
                run.record_tenant_skipped(tenant.id, "no database configured")
                continue
            try:
                providers = self.registry.enabled_providers(tenant)
                if not providers:
                    log.info("[%s] skipped: no enabled courier services", tenant.id)
                    run.record_tenant_skipped(tenant.id, "no enabled courier services")
                    continue

                orders = select_eligible_orders(self.store, tenant.id, batch_size)
                if not orders:
                    log.info("[%s] skipped: no eligible orders", tenant.id)
                    run.record_tenant_skipped(tenant.id, "no eligible orders")
                    continue

                tenant_result = scheduler.run_tenant(tenant.id, orders, providers, concurrency)
            except Exception as ex:
                log.error("[%s] tenant sync failed: %s", tenant.id, ex)
                run.record_tenant_error(tenant.id, str(ex))
                continue

            run.merge_tenant(tenant_result)
            log.info("[%s] scanned=%d updated=%d unchanged=%d skipped=%d failed=%d",
                     tenant.id, tenant_result.orders_scanned, tenant_result.updated,
                     tenant_result.unchanged, tenant_result.skipped, tenant_result.failed)

        log.info("Delivery status sync finished: tenants=%d (skipped=%d failed=%d) orders=%d "
                 "updated=%d unchanged=%d skipped=%d failed=%d errors=%d",
                 run.tenants_scanned, run.tenants_skipped, run.tenants_failed, run.orders_scanned,
                 run.updated, run.unchanged, run.skipped, run.failed, run.error_count)
        return run


def run_once(
    store: DocumentStore,
    *,
    tenant_id: Optional[str] = None,
    batch_size: Optional[int] = None,
    concurrency: Optional[int] = None,
    adapters: Optional[Mapping[str, Any]] = None,
    pubsub: Optional[PubSub] = None,
    settings: Optional[SyncSettings] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """Direct-call trigger. Builds live adapters and a logging publisher when not given."""
    settings = settings or SyncSettings()
    if adapters is None:
        adapters = build_adapters(settings)
    orchestrator = RunOrchestrator(
        store, adapters, pubsub if pubsub is not None else LoggingPubSub(),
        settings=settings, sleep=sleep,
    )
    return orchestrator.run_once(tenant_id=tenant_id, batch_size=batch_size, concurrency=concurrency)
