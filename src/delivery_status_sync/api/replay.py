# src/delivery_status_sync/api/replay.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping
import json

from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.errors import ProviderError
from delivery_status_sync.models.domain import CourierServiceConfig
from delivery_status_sync.models.normalized import NormalizedStatusResult


def load_replay_file(path: Path) -> Dict[str, Dict[str, Any]]:
    """
    Read a recorded-payload file shaped as ``{providerId: {consignmentId: payload}}``.
    Paperfly payloads are the tracker page text; the others are JSON bodies.
    """
    if not path.exists():
        raise ValueError(f"Replay file does not exist: {path}")
    if not path.is_file():
        raise ValueError(f"Replay path must be a single JSON file: {path}")

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("Replay file must contain a JSON object keyed by provider id")

    index: Dict[str, Dict[str, Any]] = {}
    for provider_id, payloads in raw.items():
        if not isinstance(payloads, dict):
            raise ValueError(f"Replay entry for {provider_id!r} must be an object")
        index[str(provider_id).lower()] = {str(cid): body for cid, body in payloads.items()}
    return index


@dataclass
class ReplayAdapter:
    """Serves recorded payloads through a real adapter's parser. No network.

    Used for dry runs and for deterministic end-to-end tests: the worker sees the
    same provider_id / requires_composite_id as it would for the live adapter.
    """

    delegate: ProviderAdapter
    payloads: Mapping[str, Any] = field(default_factory=dict)

    @property
    def provider_id(self) -> str:
        return self.delegate.provider_id

    @property
    def requires_composite_id(self) -> bool:
        return self.delegate.requires_composite_id

    def fetch_raw(self, config: CourierServiceConfig, consignment_id: str) -> Any:
        if consignment_id not in self.payloads:
            raise ProviderError(self.provider_id, f"no recorded payload for consignment {consignment_id}")
        return self.payloads[consignment_id]

    def parse(self, consignment_id: str, raw: Any) -> NormalizedStatusResult:
        return self.delegate.parse(consignment_id, raw)

    def fetch_status(self, config: CourierServiceConfig, consignment_id: str) -> NormalizedStatusResult:
        return self.parse(consignment_id, self.fetch_raw(config, consignment_id))


def replay_adapters(path: Path, live: Mapping[str, ProviderAdapter]) -> Dict[str, ReplayAdapter]:
    """Wrap every live adapter; providers absent from the file replay nothing."""
    index = load_replay_file(path)
    return {
        pid: ReplayAdapter(adapter, index.get(pid, {}))
        for pid, adapter in live.items()
    }
