from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.registry import provider_registry
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult

# $("#field").val("value") / $("#field").html("value")
_FIELD_RE = re.compile(r"""\$\(["']#([^"']+)["']\)\.(?:val|html)\(["']([^"']*)["']\)""")
# any .val("...")/.html("...") call, in document order
_VALUE_RE = re.compile(r"""\.(?:val|html)\(["']([^"']+)["']\)""")
_STATUS_RES = (
    re.compile(r"""order[_\s-]?status[_\s-]?eng["']?\s*[:=]\s*["']([^"']+)["']""", re.I),
    re.compile(r"""order[_\s-]?status["']?\s*[:=]\s*["']([^"']+)["']""", re.I),
    re.compile(r"""status["']?\s*[:=]\s*["']([^"']+)["']""", re.I),
    re.compile(r"""delivery[_\s-]?status["']?\s*[:=]\s*["']([^"']+)["']""", re.I),
)
_TAG_RE = re.compile(r"<[^>]*>")

_STATUS_FIELDS = ("status", "order_status_eng", "order_status", "orderstatus",
                  "ordertypeeng", "ordertype", "delivery_status")
_ORDER_ID_FIELDS = ("order_id", "order_id_eng", "orderid", "tracking_id", "trackingid")


def split_composite(consignment_id: str) -> Tuple[str, str]:
    order_id, _, phone = (consignment_id or "").partition("|")
    return order_id.strip(), phone.strip()


def _clean(v: str) -> str:
    return _TAG_RE.sub("", v).strip()


def scrape_tracker_page(text: str) -> Dict[str, Any]:
    """Pull field/value pairs and a status candidate out of the tracker's HTML/JS."""
    fields: Dict[str, str] = {}
    for key, value in _FIELD_RE.findall(text or ""):
        fields[key.lower()] = _clean(value)

    values: List[str] = [_clean(v) for v in _VALUE_RE.findall(text or "")]

    found: Optional[str] = None
    for pattern in _STATUS_RES:
        m = pattern.search(text or "")
        if m and m.group(1):
            found = _clean(m.group(1))
            break

    status = next((fields[k] for k in _STATUS_FIELDS if fields.get(k)), None)
    status = status or found or (values[-1] if values else None) or "pending"
    order_id = next((fields[k] for k in _ORDER_ID_FIELDS if fields.get(k)), None)
    return {"fields": fields, "status": status, "orderId": order_id}


@provider_registry.register("paperfly")
class PaperflyAdapter(ProviderAdapter):
    """Paperfly public tracker.

    The tracker is keyed by merchant order id plus recipient phone, so the stored
    consignment id is the composite `orderId|phone`. The response is an HTML page
    with values injected through jQuery calls; there is no JSON API for tracking.
    """

    provider_id = "paperfly"
    requires_composite_id = True
    default_base_url = "http://paperfly.com.bd/trackerapi.php"

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> str:
        order_id, phone = split_composite(consignment_id)
        if not (order_id and phone):
            raise ProviderError(self.provider_id,
                                "tracking requires consignment in format 'orderId|phone'")
        resp = self._request(
            "POST",
            self.base_url,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={"orderid": order_id, "phone": phone},
        )
        return resp.text or ""

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        if not isinstance(raw, str):
            raise ProviderError(self.provider_id, "tracker response is not text")
        scraped = scrape_tracker_page(raw)
        payload = {**scraped, "rawText": raw[:500]}
        # The composite id is what the worker stores; never replace it with the bare order id.
        return self._result(consignment_id, scraped["status"], payload)
