"""
Source HTTP client

Fetches delimited exports and JSON listings from the remote sources, with
rate limiting and retries.
"""

import json
import logging
import threading
import time
from typing import Any

import httpx
from tenacity import Retrying, stop_after_attempt, wait_exponential

from beverage_catalog.core.config import settings

logger = logging.getLogger(__name__)


class SourceFetchError(Exception):
    """Transport failure, unexpected status or unusable body"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SourceClient:
    """HTTP client shared by the source adapters"""

    def __init__(
        self,
        timeout: float | None = None,
        request_interval: float | None = None,
        max_attempts: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.timeout = settings.request_timeout if timeout is None else timeout
        self.request_interval = (
            settings.request_interval if request_interval is None else request_interval
        )
        self.max_attempts = settings.request_max_attempts if max_attempts is None else max_attempts
        self._last_request_time: float = 0
        self._rate_lock = threading.Lock()
        self._client = httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            transport=transport,
            headers={
                "User-Agent": "BeverageCatalog/1.0",
            },
        )

    def __enter__(self) -> "SourceClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _wait_for_rate_limit(self) -> None:
        """Sleep until request_interval has passed since the last request started

        The lock serializes the check and the timestamp update, so adapters
        running on worker threads still share one request budget.
        """
        with self._rate_lock:
            now = time.monotonic()
            if self._last_request_time > 0:
                elapsed = now - self._last_request_time
                if elapsed < self.request_interval:
                    time.sleep(self.request_interval - elapsed)
                    now = time.monotonic()
            self._last_request_time = now

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    @staticmethod
    def _check_status(response: httpx.Response, url: str) -> None:
        if response.status_code >= 400:
            raise SourceFetchError(
                f"HTTP {response.status_code} from {url}",
                status_code=response.status_code,
            )

    def _get_bytes(self, url: str, params: dict[str, Any] | None) -> bytes:
        self._wait_for_rate_limit()
        logger.debug(f"GET {url} params={params}")
        try:
            response = self._client.get(url, params=params)
        except httpx.HTTPError as e:
            raise SourceFetchError(f"Request to {url} failed: {e}") from e

        logger.debug(f"Response: status={response.status_code}")
        self._check_status(response, url)
        return response.content

    def _stream_lines(self, url: str, max_lines: int | None) -> list[str]:
        self._wait_for_rate_limit()
        logger.debug(f"GET (stream) {url} max_lines={max_lines}")
        lines: list[str] = []
        try:
            with self._client.stream("GET", url) as response:
                self._check_status(response, url)
                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    lines.append(line)
                    if max_lines is not None and len(lines) >= max_lines:
                        break
        except httpx.HTTPError as e:
            raise SourceFetchError(f"Request to {url} failed: {e}") from e
        return lines

    def fetch_lines(self, url: str, max_lines: int | None = None) -> list[str]:
        """
        Fetch a delimited export as non-blank lines

        Reading stops once max_lines lines have been collected, so only a
        prefix of a large export is ever held in memory.

        Raises:
            SourceFetchError: request failed, status >= 400 or empty body
        """
        for attempt in self._retrying():
            with attempt:
                lines = self._stream_lines(url, max_lines)

        if not lines:
            raise SourceFetchError(f"Empty body from {url}")
        return lines

    def fetch_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Fetch and decode a JSON document

        Raises:
            SourceFetchError: request failed, status >= 400, empty or invalid body
        """
        for attempt in self._retrying():
            with attempt:
                body = self._get_bytes(url, params)

        if not body.strip():
            raise SourceFetchError(f"Empty body from {url}")
        try:
            return json.loads(body)
        except ValueError as e:
            raise SourceFetchError(f"Invalid JSON from {url}: {e}") from e
