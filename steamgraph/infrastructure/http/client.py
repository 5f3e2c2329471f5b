"""HTTP client for the Steam Web API.

This module centralises HTTP access to ``api.steampowered.com``. It maintains
a :class:`requests.Session`, attaches the API key, throttles requests per
host and turns transport failures, non-success statuses and unparseable
bodies into :class:`SteamApiError` so callers have a single failure type to
handle.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping
from urllib.parse import urljoin, urlparse

import requests
from requests import Response, Session

from steamgraph.infrastructure.observability import get_logger, record_api_request

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.steampowered.com"

# Statuses worth another attempt when retries are enabled.
_RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


class SteamApiError(Exception):
    """Raised when a Steam API call fails or returns an unusable response."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RateLimiter:
    """Simple host-level rate limiter."""

    def __init__(
        self,
        requests_per_second: float | None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = 1.0 / requests_per_second if requests_per_second else 0.0
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()
        self._sleep = sleep

    def _next_delay(self, host: str) -> float:
        if self.min_interval <= 0:
            return 0.0
        last = self._last_seen.get(host)
        now = time.monotonic()
        if last is None:
            self._last_seen[host] = now
            return 0.0
        elapsed = now - last
        if elapsed >= self.min_interval:
            self._last_seen[host] = now
            return 0.0
        delay = self.min_interval - elapsed
        self._last_seen[host] = now + delay
        return delay

    def wait(self, host: str) -> None:
        if self.min_interval <= 0:
            return
        with self._lock:
            delay = self._next_delay(host)
        if delay > 0:
            self._sleep(delay)


class SteamHttpClient:
    """Keyed JSON GET helper with throttling and optional retries."""

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 1,
        backoff_base_seconds: float = 0.5,
        requests_per_second: float | None = None,
        session: Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        from steamgraph import __version__

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_base_seconds = max(0.0, backoff_base_seconds)
        self.rate_limiter = RateLimiter(requests_per_second, sleep=sleep)
        self.session = session or requests.Session()
        self.headers = {"User-Agent": f"steamgraph/{__version__}"}
        self._sleep = sleep

    def _url(self, path: str) -> str:
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def _backoff_delay(self, attempt: int) -> float:
        return self.backoff_base_seconds * (2**attempt)

    def get_json(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        *,
        include_key: bool = True,
    ) -> dict[str, Any]:
        """GET ``path`` and return the decoded JSON object.

        Raises:
            SteamApiError: On transport failure, a non-success status after
                all attempts, or a body that is not a JSON object.
        """
        url = self._url(path)
        query: dict[str, Any] = dict(params or {})
        if include_key:
            if not self.api_key:
                raise SteamApiError(f"No Steam API key configured for {path}")
            query["key"] = self.api_key

        host = urlparse(url).hostname or ""
        endpoint = path.strip("/")
        last_error: SteamApiError | None = None
        for attempt in range(self.retry_attempts):
            self.rate_limiter.wait(host)
            started = time.perf_counter()
            try:
                response = self.session.get(
                    url, params=query, headers=self.headers, timeout=self.timeout_seconds
                )
            except requests.RequestException as exc:
                record_api_request(endpoint, None, time.perf_counter() - started)
                last_error = SteamApiError(f"Request to {endpoint} failed: {exc}")
            else:
                record_api_request(
                    endpoint, response.status_code, time.perf_counter() - started
                )
                if response.ok:
                    return self._decode(endpoint, response)
                last_error = SteamApiError(
                    f"{endpoint} returned HTTP {response.status_code}: {response.reason}",
                    status=response.status_code,
                )
                if response.status_code not in _RETRYABLE_STATUSES:
                    break

            if attempt < self.retry_attempts - 1:
                delay = self._backoff_delay(attempt)
                logger.warning(
                    "Steam request %s failed (%s); retrying in %.1fs",
                    endpoint,
                    last_error,
                    delay,
                )
                self._sleep(delay)

        assert last_error is not None
        logger.error("Steam request %s failed: %s", endpoint, last_error)
        raise last_error

    def _decode(self, endpoint: str, response: Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise SteamApiError(
                f"{endpoint} returned invalid JSON: {exc}", status=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise SteamApiError(
                f"{endpoint} returned {type(payload).__name__}, expected an object",
                status=response.status_code,
            )
        return payload

    def close(self) -> None:
        self.session.close()


__all__ = ["DEFAULT_BASE_URL", "RateLimiter", "SteamApiError", "SteamHttpClient"]
