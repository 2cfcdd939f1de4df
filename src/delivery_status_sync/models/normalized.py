from __future__ import annotations
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class NormalizedStatusResult:
    # identity
    provider_id: str
    consignment_id: str               # echoed back by the courier when it corrects it

    # status
    normalized_status: str            # one of models.domain.NORMALIZED_STATUSES
    provider_status: str              # provider label, humanised ("In Transit")

    # raw payload for audit/debugging; stored on CourierInfo.rawStatus
    raw: Any

    def is_delivered(self) -> bool:
        return (self.normalized_status or "").strip().lower() == "delivered"
