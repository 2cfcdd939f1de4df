"""Provider adapter registry.

Adapters register their class under a provider id with a decorator:

    @provider_registry.register("redx")
    class RedxAdapter(ProviderAdapter): ...

`build_adapters()` instantiates every registered class with a shared transport
and returns the `{provider_id: adapter}` mapping the worker dispatches on.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Mapping, Optional, Type

from delivery_status_sync.api.transport import RequestsTransport
from delivery_status_sync.models.env_cfg import SyncSettings

if TYPE_CHECKING:
    from delivery_status_sync.api.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class ProviderRegistry:
    def __init__(self) -> None:
        self._classes: Dict[str, Type["ProviderAdapter"]] = {}

    def register(self, provider_id: str) -> Callable[[Type["ProviderAdapter"]], Type["ProviderAdapter"]]:
        def decorator(cls: Type["ProviderAdapter"]) -> Type["ProviderAdapter"]:
            self._classes[provider_id.lower()] = cls
            logger.debug("Registered provider adapter: %s -> %s", provider_id, cls.__name__)
            return cls

        return decorator

    def build(
        self,
        transport: Optional[RequestsTransport] = None,
        *,
        base_urls: Optional[Mapping[str, Optional[str]]] = None,
    ) -> Dict[str, "ProviderAdapter"]:
        transport = transport or RequestsTransport()
        base_urls = base_urls or {}
        return {
            pid: cls(transport, base_url=base_urls.get(pid))
            for pid, cls in self._classes.items()
        }


provider_registry = ProviderRegistry()


def base_urls_from_settings(settings: SyncSettings) -> Dict[str, Optional[str]]:
    return {
        "pathao": settings.PATHAO_BASE_URL,
        "redx": settings.REDX_BASE_URL,
        "steadfast": settings.STEADFAST_BASE_URL,
        "paperfly": settings.PAPERFLY_TRACKER_URL,
    }


def build_adapters(
    settings: Optional[SyncSettings] = None,
    transport: Optional[RequestsTransport] = None,
) -> Dict[str, "ProviderAdapter"]:
    """Instantiate all built-in adapters, honouring base-URL/timeout overrides."""
    # Importing the package registers the built-in adapters.
    import delivery_status_sync.api.providers  # noqa: F401

    settings = settings or SyncSettings()
    transport = transport or RequestsTransport(
        timeout=settings.PROVIDER_TIMEOUT_SEC,
        pool_size=max(settings.SYNC_CONCURRENCY, 1),
    )
    return provider_registry.build(transport, base_urls=base_urls_from_settings(settings))
