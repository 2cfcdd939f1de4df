from delivery_status_sync.store.base import COURIER_SERVICES, ORDERS, DocumentStore
from delivery_status_sync.store.json_file import JsonFileDocumentStore
from delivery_status_sync.store.memory import InMemoryDocumentStore

__all__ = [
    "COURIER_SERVICES",
    "ORDERS",
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
]
