from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.registry import provider_registry
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult


@provider_registry.register("steadfast")
class SteadfastAdapter(ProviderAdapter):
    """Steadfast (Packzy portal). The secret is stored as `appSecret` or `secretKey`."""

    provider_id = "steadfast"
    default_base_url = "https://portal.packzy.com/api/v1"

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> Dict[str, Any]:
        api_key = self._credential(config, "apiKey")
        secret = self._credential(config, "appSecret", "secretKey")
        if not (api_key and secret):
            raise ProviderError(self.provider_id, "API credentials are not fully configured")
        resp = self._request(
            "GET",
            f"{self.base_url}/status_by_cid/{quote(consignment_id, safe='')}",
            headers={
                "Api-Key": api_key,
                "Secret-Key": secret,
                "Content-Type": "application/json",
            },
        )
        return self._json(resp)

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        if not isinstance(raw, dict):
            raise ProviderError(self.provider_id, "malformed status payload")
        return self._result(consignment_id, raw.get("delivery_status") or "unknown", raw)
