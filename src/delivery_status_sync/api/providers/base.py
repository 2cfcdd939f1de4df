from __future__ import annotations

from typing import Any, Dict, Mapping, Optional
import json
import logging

import requests

from delivery_status_sync.api.normalize import humanize_status, normalize_status
from delivery_status_sync.api.transport import RequestsTransport
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult


def _snip(text: Optional[str], limit: int = 2000) -> Optional[str]:
    if text and len(text) > limit:
        return text[:limit] + "..."
    return text


class ProviderAdapter:
    """Base class for courier tracking adapters.

    Subclasses implement two steps:
    - fetch_raw(config, consignment_id): perform the HTTP call(s) and return the
      provider payload (parsed JSON, or text for scraped trackers).
    - parse(consignment_id, raw): turn that payload into a NormalizedStatusResult.

    Keeping the steps apart lets ReplayAdapter feed recorded payloads through the
    same parser. Every failure surfaces as ProviderError; nothing is retried here.
    """

    provider_id: str = ""
    requires_composite_id: bool = False
    default_base_url: str = ""

    def __init__(
        self,
        transport: Optional[RequestsTransport] = None,
        *,
        base_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.transport = transport or RequestsTransport()
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.logger: logging.Logger = logger or logging.getLogger(
            f"delivery_status_sync.api.providers.{self.provider_id or 'base'}"
        )

    # --- public contract -----------------------------------------------------

    def fetch_status(self, config: CourierServiceConfig, consignment_id: str) -> NormalizedStatusResult:
        raw = self.fetch_raw(config, consignment_id)
        return self.parse(consignment_id, raw)

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> Any:
        raise NotImplementedError

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        raise NotImplementedError

    # --- helpers for subclasses ------------------------------------------------

    def _credential(self, config: CourierServiceConfig, *names: str) -> Optional[str]:
        creds: Mapping[str, Any] = config.credentials or {}
        for name in names:
            v = creds.get(name)
            if v is not None and str(v).strip():
                return str(v).strip()
        return None

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Issue an HTTP call; transport errors and non-2xx become ProviderError."""
        self.logger.debug("%s %s %s", self.provider_id, method, url)
        try:
            if method == "POST":
                resp = self.transport.post(url, **kwargs)
            else:
                resp = self.transport.get(url, **kwargs)
        except requests.Timeout as ex:
            raise ProviderError(self.provider_id, f"timed out calling {url}") from ex
        except requests.RequestException as ex:
            raise ProviderError(self.provider_id, f"transport error: {ex}") from ex

        status = getattr(resp, "status_code", None)
        if status is None or not 200 <= int(status) < 300:
            body = getattr(resp, "text", None)
            self.logger.warning(
                "%s %s returned status=%s response_body=%s",
                self.provider_id, url, status, _snip(body),
            )
            raise ProviderError(self.provider_id, f"HTTP {status} from {url}", status_code=status)
        return resp

    def _json(self, resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as ex:
            raise ProviderError(self.provider_id, "response is not valid JSON") from ex
        if not isinstance(data, dict):
            raise ProviderError(self.provider_id, f"unexpected payload type {type(data).__name__}")
        try:
            self.logger.debug("%s response_body=%s", self.provider_id,
                              _snip(json.dumps(data, ensure_ascii=False), 4000))
        except (TypeError, ValueError):
            pass
        return data

    def _result(self, consignment_id: str, label: Any, raw: Any) -> NormalizedStatusResult:
        return NormalizedStatusResult(
            provider_id=self.provider_id,
            consignment_id=consignment_id,
            normalized_status=normalize_status(self.provider_id, label),
            provider_status=humanize_status(label),
            raw=raw,
        )
