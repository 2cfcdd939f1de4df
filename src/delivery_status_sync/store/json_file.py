from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Union

from delivery_status_sync.store.memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)


class JsonFileDocumentStore(InMemoryDocumentStore):
    """InMemoryDocumentStore persisted to a single JSON file.

    File layout::

        {"tenants": [{"id": "t1", "isActive": true, "database": "db_t1"}],
         "databases": {"db_t1": {"courier_services_config": [...], "orders": [...]}}}

    The whole file is rewritten (temp file + os.replace) after every update.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(self.path)
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Store file must contain a JSON object: {self.path}")
        super().__init__(raw.get("tenants") or [], raw.get("databases") or {})
        logger.debug("Loaded store %s (%d tenants)", self.path, len(self._tenants))

    def _after_write(self) -> None:
        self.save()

    def save(self) -> None:
        with self._lock:
            data = {"tenants": self._tenants, "databases": self._databases}
            tmp = self.path.with_name(self.path.name + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
            os.replace(tmp, self.path)
