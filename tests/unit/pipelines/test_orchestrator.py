import pytest

from delivery_status_sync.errors import TenantEnumerationFailure
from delivery_status_sync.models.env_cfg import SyncSettings
from delivery_status_sync.notifier import InMemoryPubSub
from delivery_status_sync.pipelines.orchestrator import RunOrchestrator, run_once
from delivery_status_sync.store.memory import InMemoryDocumentStore

FAST = SyncSettings(SYNC_PACING_MS=0)


def test_end_to_end_single_delivery(make_store, make_order, fake_adapter):
    store = make_store({"t1": [make_order("o1", "C123", status="shipped", delivery_status="in_transit")]})
    bus = InMemoryPubSub()
    adapter = fake_adapter("steadfast", {"C123": "delivered"})

    run = run_once(store, adapters={"steadfast": adapter}, pubsub=bus, settings=FAST)

    assert run.updated == 1
    assert run.failed == 0
    assert run.tenants_scanned == 1
    doc = store.find_one("t1", "orders", {"id": "o1"})
    assert doc["status"] == "delivered"
    assert doc["courier"]["deliveryStatus"] == "delivered"
    events = bus.on_channel("tenant:t1:orders")
    assert len(events) == 1
    assert events[0]["order"]["id"] == "o1"
    assert events[0]["order"]["status"] == "delivered"

    # Delivered orders are terminal: the next sweep does not even select it.
    again = run_once(store, adapters={"steadfast": adapter}, pubsub=bus, settings=FAST)
    assert again.orders_scanned == 0
    assert again.tenants_skipped == 1
    assert adapter.calls == ["C123"]


def test_thousand_failures_keep_a_bounded_sample(make_store, make_order, fake_adapter):
    orders = [make_order(f"o{i}", f"C{i}") for i in range(1000)]
    store = make_store({"t1": orders})
    adapter = fake_adapter("steadfast", fail={"*"})
    settings = SyncSettings(SYNC_PACING_MS=0, SYNC_BATCH_SIZE=1000, SYNC_CONCURRENCY=20)

    run = run_once(store, adapters={"steadfast": adapter}, pubsub=InMemoryPubSub(), settings=settings)
    report = run.to_report()

    assert report["failed"] == 1000
    assert report["errorCount"] == 1000
    assert report["errorSampleCount"] == len(report["sampleErrors"])
    assert len(report["sampleErrors"]) <= 10


def test_failing_tenant_does_not_stop_others(make_order, fake_adapter):
    store = InMemoryDocumentStore(
        tenants=[
            {"id": "broken", "isActive": True, "database": "db_missing"},
            {"id": "ok", "isActive": True, "database": "db_ok"},
        ],
        databases={"db_ok": {
            "courier_services_config": [{"id": "steadfast", "enabled": True}],
            "orders": [make_order("o1", "C1")],
        }},
    )
    adapter = fake_adapter("steadfast", {"C1": "in_transit"})

    run = run_once(store, adapters={"steadfast": adapter}, pubsub=InMemoryPubSub(), settings=FAST)

    assert run.tenants_scanned == 2
    assert run.tenants_failed == 1
    assert run.updated == 1
    assert run.sample_errors[0].startswith("[broken] store unavailable for tenant broken")


def test_skipped_tenants(make_order, fake_adapter):
    store = InMemoryDocumentStore(
        tenants=[
            {"id": "nodb", "isActive": True},
            {"id": "nocouriers", "isActive": True, "database": "db1"},
            {"id": "noorders", "isActive": True, "database": "db2"},
            {"id": "inactive", "isActive": False, "database": "db3"},
        ],
        databases={
            "db1": {"courier_services_config": [{"id": "redx", "enabled": False}],
                    "orders": [make_order("o1", "C1")]},
            "db2": {"courier_services_config": [{"id": "steadfast", "enabled": True}], "orders": []},
            "db3": {},
        },
    )
    run = run_once(store, adapters={"steadfast": fake_adapter("steadfast")}, pubsub=InMemoryPubSub(), settings=FAST)

    assert run.tenants_scanned == 3
    assert run.tenants_skipped == 3
    assert run.tenants_failed == 0
    assert [(t.tenant_id, t.detail) for t in run.tenants] == [
        ("nodb", "no database configured"),
        ("nocouriers", "no enabled courier services"),
        ("noorders", "no eligible orders"),
    ]


def test_tenant_filter_and_batch_limit(make_store, make_order, fake_adapter):
    store = make_store({
        "t1": [make_order(f"a{i}", f"A{i}") for i in range(5)],
        "t2": [make_order("b1", "B1")],
    })
    adapter = fake_adapter("steadfast")

    run = RunOrchestrator(store, {"steadfast": adapter}, InMemoryPubSub(), settings=FAST).run_once(
        tenant_id="t1", batch_size=2, concurrency=1)

    assert run.tenants_scanned == 1
    assert run.orders_scanned == 2
    assert len(adapter.calls) == 2
    assert all(c.startswith("A") for c in adapter.calls)


def test_enumeration_failure_propagates():
    class DownPlatform:
        def list_tenants(self):
            raise ConnectionError("platform db unreachable")

    with pytest.raises(TenantEnumerationFailure):
        run_once(DownPlatform(), adapters={}, pubsub=InMemoryPubSub(), settings=FAST)


def test_report_shape(make_store, make_order, fake_adapter):
    store = make_store({"t1": [make_order("o1", "C1")]})
    report = run_once(store, adapters={"steadfast": fake_adapter("steadfast")},
                      pubsub=InMemoryPubSub(), settings=FAST).to_report()

    assert set(report) == {
        "tenantsScanned", "tenantsSkipped", "tenantsFailed", "ordersScanned",
        "updated", "unchanged", "skipped", "failed", "errorCount",
        "errorSampleCount", "sampleErrors", "timestamp",
    }
