"""
HTTP client for template providers and the archive cache.

Every network call of the package goes through TemplateHTTP so that timeouts,
retries, TLS settings and error mapping are decided in one place.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import DownloadFailedError, TemplateNetworkError
from .settings import Settings

__all__ = ["TemplateHTTP", "USER_AGENT"]

logger = logging.getLogger(__name__)

USER_AGENT = "remote-templates/0.1.0"


class TemplateHTTP:
    """
    Thin wrapper around ``httpx.Client``.

    Status codes are returned to callers rather than raised, except in the
    explicitly raising helpers (``get_json``). Transport failures are mapped to
    TemplateNetworkError. The ``try_*`` helpers are best-effort and return None
    instead of raising.
    """

    def __init__(self, settings: Optional[Settings] = None, *,
                 transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the HTTP client.

        Args:
            settings: Timeout, retry and TLS settings (defaults used when None)
            transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests)
        """
        timeout_s = settings.http_timeout_s if settings else 30.0
        self.retries = settings.http_retry if settings else 0
        insecure = settings.insecure if settings else False

        self.client = httpx.Client(
            timeout=httpx.Timeout(timeout_s, connect=min(timeout_s, 10.0)),
            follow_redirects=True,
            verify=not insecure,
            transport=transport,
            headers={"User-Agent": USER_AGENT},
        )

    def request(self, method: str, url: str, headers: Optional[Mapping[str, str]] = None) -> httpx.Response:
        """
        Send a request and read the full response.

        Timeouts are retried ``settings.http_retry`` extra times.

        Raises:
            TemplateNetworkError: If no response could be obtained
        """
        try:
            for attempt in self._retrying():
                with attempt:
                    return self.client.request(method, url, headers=dict(headers or {}))
        except httpx.RequestError as e:
            raise TemplateNetworkError(f"Failed to fetch {url}: {e}") from e

    def head(self, url: str, headers: Optional[Mapping[str, str]] = None) -> httpx.Response:
        return self.request("HEAD", url, headers=headers)

    def try_head(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Optional[httpx.Response]:
        """Best-effort HEAD; None on any transport failure."""
        try:
            return self.head(url, headers=headers)
        except TemplateNetworkError as e:
            logger.debug(f"HEAD {url} failed: {e}")
            return None

    def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Any:
        """
        GET a URL and decode the body as JSON.

        Raises:
            TemplateNetworkError: If no response could be obtained
            DownloadFailedError: If the status is >= 400
            ValueError: If the body is not valid JSON
        """
        response = self.request("GET", url, headers=headers)
        if response.status_code >= 400:
            raise DownloadFailedError(
                f"Failed to fetch {url}: {response.status_code} {response.reason_phrase}"
            )
        return response.json()

    def try_get_json(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Optional[Any]:
        """Best-effort JSON GET; None on transport failure, bad status or bad JSON."""
        try:
            return self.get_json(url, headers=headers)
        except (DownloadFailedError, ValueError) as e:
            logger.debug(f"GET {url} failed: {e}")
            return None

    @contextmanager
    def stream(self, url: str, headers: Optional[Mapping[str, str]] = None) -> Iterator[httpx.Response]:
        """
        Open a streaming GET; the body is read through ``iter_bytes()``.

        Raises:
            TemplateNetworkError: If no response could be obtained or the
                connection drops while streaming
        """
        try:
            with self.client.stream("GET", url, headers=dict(headers or {})) as response:
                yield response
        except httpx.RequestError as e:
            raise TemplateNetworkError(f"Failed to download {url}: {e}") from e

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        )

    def close(self):
        """Close HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
