import logging
import threading
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from config.settings import GOG_MAX_CONCURRENT_CALLS, GOG_TIMEOUT_SECONDS, GOG_USER_AGENT
from metadata.errors import NetworkError, NotFound, ParseError

logger = logging.getLogger(__name__)


class GogClient:
    def __init__(self, *, session=None, timeout_seconds=GOG_TIMEOUT_SECONDS, user_agent=GOG_USER_AGENT) -> None:
        self.timeout_seconds = float(timeout_seconds)
        self.user_agent = user_agent
        if session is None:
            session = requests.Session()
            # One pooled connection per bulkhead slot.
            adapter = HTTPAdapter(pool_connections=4, pool_maxsize=max(1, GOG_MAX_CONCURRENT_CALLS))
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            resp = self._session.get(
                url,
                params=params or {},
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.RequestException as exc:
            logger.info("[GOG] request=%s status=error error=%s", url, exc)
            raise NetworkError(f"GOG request failed: {url}: {exc}") from exc

        status = int(resp.status_code)
        logger.info("[GOG] request=%s status=%s", url, status)
        if status == 404:
            raise NotFound(f"GOG resource not found (404): {url}")
        if status != 200:
            raise NetworkError(f"GOG request failed ({status}): {url}")
        try:
            payload = resp.json() if resp.content else {}
        except ValueError as exc:
            raise ParseError(f"GOG response is not JSON: {url}") from exc
        if not isinstance(payload, dict):
            raise ParseError(f"GOG response is not a JSON object: {url}")
        return payload


_CLIENT: GogClient | None = None
_CLIENT_LOCK = threading.Lock()


def get_gog_client() -> GogClient:
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    with _CLIENT_LOCK:
        if _CLIENT is None:
            _CLIENT = GogClient()
    return _CLIENT
