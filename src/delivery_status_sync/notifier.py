from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

EVENT_ORDER_UPDATED = "order:updated"


def channel_for(tenant_id: str) -> str:
    return f"tenant:{tenant_id}:orders"


class PubSub(Protocol):
    def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        ...


class InMemoryPubSub:
    """Collects published messages; handy for tests and dry runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.messages: List[Tuple[str, Dict[str, Any]]] = []

    def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        with self._lock:
            self.messages.append((channel, dict(payload)))

    def on_channel(self, channel: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [p for c, p in self.messages if c == channel]


class LoggingPubSub:
    """Writes each event to the log instead of a broker (CLI default)."""

    def __init__(self, logger_: Optional[logging.Logger] = None) -> None:
        self.logger = logger_ or logging.getLogger("delivery_status_sync.events")

    def publish(self, channel: str, payload: Mapping[str, Any]) -> None:
        self.logger.info("event channel=%s payload=%s", channel,
                         json.dumps(payload, ensure_ascii=False, default=str))


class ChangeNotifier:
    """Fire-and-forget publisher of order changes to the tenant's channel.

    A failing broker never fails the reconciliation; the write already happened.
    """

    def __init__(self, pubsub: PubSub) -> None:
        self.pubsub = pubsub

    def order_updated(self, tenant_id: str, order: Mapping[str, Any]) -> bool:
        channel = channel_for(tenant_id)
        try:
            self.pubsub.publish(channel, {"type": EVENT_ORDER_UPDATED, "order": dict(order)})
        except Exception as ex:
            logger.warning("publish to %s failed for order %s: %s", channel, order.get("id"), ex)
            return False
        return True
