import logging

from delivery_status_sync.notifier import (
    ChangeNotifier,
    InMemoryPubSub,
    LoggingPubSub,
    channel_for,
)


def test_channel_is_tenant_scoped():
    assert channel_for("shop-42") == "tenant:shop-42:orders"


def test_order_updated_publishes_to_tenant_channel():
    bus = InMemoryPubSub()
    assert ChangeNotifier(bus).order_updated("t1", {"id": "o1", "status": "delivered"}) is True

    assert bus.on_channel("tenant:t1:orders") == [
        {"type": "order:updated", "order": {"id": "o1", "status": "delivered"}}]
    assert bus.on_channel("tenant:t2:orders") == []


def test_publish_failure_is_logged_not_raised():
    class DownBus:
        def publish(self, channel, payload):
            raise ConnectionError("redis down")

    records = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record.getMessage())

    lg = logging.getLogger("delivery_status_sync.notifier")
    handler = Capture(level=logging.WARNING)
    lg.addHandler(handler)
    try:
        ok = ChangeNotifier(DownBus()).order_updated("t1", {"id": "o1"})
    finally:
        lg.removeHandler(handler)

    assert ok is False
    assert any("redis down" in m for m in records)


def test_logging_pubsub_writes_event():
    records = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record.getMessage())

    lg = logging.getLogger("dss.events.test")
    lg.setLevel(logging.INFO)
    lg.addHandler(Capture())

    LoggingPubSub(lg).publish("tenant:t1:orders", {"id": "o1"})
    assert records == ['event channel=tenant:t1:orders payload={"id": "o1"}']
