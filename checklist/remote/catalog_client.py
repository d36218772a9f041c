from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from checklist.core.catalog import RemoteCatalog, parse_weekday_map

DEFAULT_TIMEOUT_SEC = 15.0
DEFAULT_TASKS_FIELD = "weeklyTasks"

_NO_CACHE_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class CatalogFetchError(Exception):
    pass


class InvalidEndpointError(CatalogFetchError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"invalid catalog endpoint: {endpoint!r}")
        self.endpoint = endpoint


class NetworkFailureError(CatalogFetchError):
    def __init__(self, cause: Exception) -> None:
        super().__init__(f"network failure: {cause}")
        self.cause = cause


class NonSuccessStatusError(CatalogFetchError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"unexpected status {status_code}")
        self.status_code = status_code
        self.body = body


class DecodeFailureError(CatalogFetchError):
    def __init__(self, cause: Exception | str) -> None:
        super().__init__(f"cannot decode catalog: {cause}")
        self.cause = cause


def _validate_endpoint(endpoint: str) -> httpx.URL:
    text = (endpoint or "").strip()
    if not text:
        raise InvalidEndpointError(endpoint)
    try:
        url = httpx.URL(text)
    except httpx.InvalidURL as exc:
        raise InvalidEndpointError(endpoint) from exc
    if url.scheme not in {"http", "https"} or not url.host:
        raise InvalidEndpointError(endpoint)
    return url


class CatalogClient:
    """Fetches the per-user weekly task catalog.

    One GET per call, no retries, no HTTP caching. Failures are raised as
    ``CatalogFetchError`` subclasses; retry policy belongs to the caller.
    """

    def __init__(
        self,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        tasks_field: str = DEFAULT_TASKS_FIELD,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_sec = timeout_sec
        self._tasks_field = tasks_field
        self._transport = transport

    async def fetch(self, endpoint: str) -> RemoteCatalog:
        url = _validate_endpoint(endpoint)
        logger.info("catalog fetch start url={} timeout={}", url, self._timeout_sec)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_sec),
                transport=self._transport,
                trust_env=False,
            ) as client:
                response = await client.get(url, headers=_NO_CACHE_HEADERS)
        except httpx.RequestError as exc:
            logger.warning("catalog fetch failed url={} err={}", url, exc)
            raise NetworkFailureError(exc) from exc

        if response.status_code != 200:
            logger.warning(
                "catalog fetch failed status={} body_head={!r}",
                response.status_code,
                (response.text or "")[:200],
            )
            raise NonSuccessStatusError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("catalog response JSON parse error")
            raise DecodeFailureError(exc) from exc

        catalog = self.decode(payload)
        logger.info("catalog fetch ok users={}", len(catalog))
        return catalog

    def decode(self, payload: Any) -> RemoteCatalog:
        if not isinstance(payload, dict):
            raise DecodeFailureError(f"expected a JSON object, got {type(payload).__name__}")
        catalog: RemoteCatalog = {}
        for user, entry in payload.items():
            weekly = entry.get(self._tasks_field) if isinstance(entry, dict) else None
            if not isinstance(weekly, dict):
                logger.warning("catalog entry without {} user={!r}", self._tasks_field, user)
                continue
            catalog[str(user)] = parse_weekday_map(weekly)
        return catalog
