from __future__ import annotations

from typing import Any, Dict, Optional, Tuple
from urllib.parse import quote
import threading
import time

from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.registry import provider_registry
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult


@provider_registry.register("pathao")
class PathaoAdapter(ProviderAdapter):
    """Pathao (Aladdin API).

    Token: password grant POSTed as JSON to /aladdin/api/v1/issue-token, cached
    per (client_id, username) until shortly before expiry. Worker threads share
    the cache, so it is lock-guarded.
    """

    provider_id = "pathao"
    default_base_url = "https://api-hermes.pathao.com"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._tokens: Dict[Tuple[str, str], Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def authenticate(self, config: CourierServiceConfig) -> str:
        client_id = self._credential(config, "clientId")
        client_secret = self._credential(config, "clientSecret")
        username = self._credential(config, "username")
        password = self._credential(config, "password")
        if not (client_id and client_secret and username and password):
            raise ProviderError(self.provider_id, "credentials are not fully configured")

        key = (client_id, username)
        with self._lock:
            cached = self._tokens.get(key)
            if cached and time.time() < cached[1] - 10:
                return cached[0]

        self.logger.debug("Requesting Pathao access token from %s (client_id=%s...)",
                          self.base_url, client_id[:4])
        resp = self._request(
            "POST",
            f"{self.base_url}/aladdin/api/v1/issue-token",
            headers={"Content-Type": "application/json"},
            json={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "password",
                "username": username,
                "password": password,
            },
        )
        data = self._json(resp)
        token: Optional[str] = data.get("access_token")
        if not token:
            raise ProviderError(self.provider_id, "access token missing in token response")
        try:
            expires_in = int(data.get("expires_in", 3600))
        except (TypeError, ValueError):
            expires_in = 3600

        with self._lock:
            self._tokens[key] = (token, time.time() + expires_in)
        return token

    def forget_token(self, config: CourierServiceConfig) -> None:
        """Drop the cached token, e.g. after the API rejected it."""
        key = (self._credential(config, "clientId"), self._credential(config, "username"))
        with self._lock:
            self._tokens.pop(key, None)

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> Dict[str, Any]:
        token = self.authenticate(config)
        try:
            resp = self._request(
                "GET",
                f"{self.base_url}/aladdin/api/v1/orders/{quote(consignment_id, safe='')}/info",
                headers={"Authorization": f"Bearer {token}"},
            )
        except ProviderError as ex:
            if ex.status_code == 401:
                self.forget_token(config)
            raise
        return self._json(resp)

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        if not isinstance(raw, dict):
            raise ProviderError(self.provider_id, "malformed order info payload")
        block = raw.get("data") if isinstance(raw.get("data"), dict) else {}
        label = block.get("order_status_slug") or block.get("order_status") or raw.get("message") or "unknown"
        echoed = block.get("consignment_id")
        return self._result(str(echoed) if echoed else consignment_id, label, raw)
