from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.registry import provider_registry
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult


@provider_registry.register("redx")
class RedxAdapter(ProviderAdapter):
    provider_id = "redx"
    default_base_url = "https://openapi.redx.com.bd"

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> Dict[str, Any]:
        api_key = self._credential(config, "apiKey")
        if not api_key:
            raise ProviderError(self.provider_id, "API key is not configured")
        resp = self._request(
            "GET",
            f"{self.base_url}/v1.0.0-beta/parcel/info/{quote(consignment_id, safe='')}",
            headers={"API-ACCESS-TOKEN": f"Bearer {api_key}"},
        )
        return self._json(resp)

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        if not isinstance(raw, dict):
            raise ProviderError(self.provider_id, "malformed parcel payload")
        parcel = raw.get("parcel")
        if not isinstance(parcel, dict):
            raise ProviderError(self.provider_id, "parcel missing from response")
        echoed = parcel.get("tracking_id")
        return self._result(str(echoed) if echoed else consignment_id,
                            parcel.get("status") or "unknown", raw)
