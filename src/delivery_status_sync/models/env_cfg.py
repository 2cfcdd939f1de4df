from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SyncSettings:
    """Shape returned by get_app_env(); every field has a working default."""
    SYNC_STORE_PATH: Optional[str] = None
    SYNC_BATCH_SIZE: int = 50
    SYNC_CONCURRENCY: int = 5
    SYNC_PACING_MS: int = 150
    SYNC_ERROR_SAMPLE_CAP: int = 10
    PROVIDER_TIMEOUT_SEC: float = 15.0
    PATHAO_BASE_URL: Optional[str] = None
    REDX_BASE_URL: Optional[str] = None
    STEADFAST_BASE_URL: Optional[str] = None
    PAPERFLY_TRACKER_URL: Optional[str] = None
