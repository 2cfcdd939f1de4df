from delivery_status_sync.api.providers.base import ProviderAdapter
from delivery_status_sync.api.providers.paperfly import PaperflyAdapter
from delivery_status_sync.api.providers.pathao import PathaoAdapter
from delivery_status_sync.api.providers.redx import RedxAdapter
from delivery_status_sync.api.providers.steadfast import SteadfastAdapter

__all__ = [
    "ProviderAdapter",
    "PathaoAdapter",
    "PaperflyAdapter",
    "RedxAdapter",
    "SteadfastAdapter",
]
