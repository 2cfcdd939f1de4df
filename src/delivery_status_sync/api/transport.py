from __future__ import annotations

from typing import Any, Dict, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_TIMEOUT_SEC = 15.0


class RequestsTransport:
    """Requests session wrapper shared by the provider adapters.

    Every call carries an explicit timeout. Retries are disabled by default: a
    failed or timed-out courier call is picked up again on the next scheduled run,
    never within the same run. The session's connection pool is sized for the
    scheduler's per-chunk fan-out.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SEC, max_retries: int = 0, pool_size: int = 10) -> None:
        self.session = requests.Session()
        self.timeout = timeout

        retry = Retry(
            total=max_retries,
            connect=max_retries,
            read=max_retries,
            status=0,
            redirect=3,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def post(self, url: str, *, headers: Optional[Dict[str, str]] = None, data: Any = None, json: Any = None, params: Optional[Dict[str, Any]] = None):
        return self.session.post(url, headers=headers, data=data, json=json, params=params, timeout=self.timeout)

    def get(self, url: str, *, headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, Any]] = None):
        return self.session.get(url, headers=headers, params=params, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()
