"""
Rate-limited HTTP source client.

The single point of outbound I/O for crawling. Wraps one ``httpx.AsyncClient``
with:
- a global cap on in-flight requests (``asyncio.Semaphore``)
- a minimum interval between requests to the same host

Failures (network errors, timeouts, non-2xx) are raised as ``FetchError``.
No retries happen here.
"""

import asyncio
import logging
import time
from typing import Optional
from urllib.parse import urlsplit

import httpx

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Transient fetch failure: network error, timeout or non-2xx status."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"{message} ({url})")


class SourceClient:
    """
    Async HTTP client shared by every crawl of one run.

    Usage:
        async with SourceClient() as client:
            html = await client.fetch_text(url)
            data = await client.fetch_binary(pdf_url)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(self.settings.max_concurrency)
        self._host_lock = asyncio.Lock()
        self._last_request: dict[str, float] = {}

    async def __aenter__(self) -> "SourceClient":
        self._client = httpx.AsyncClient(
            headers={"User-Agent": self.settings.user_agent},
            timeout=self.settings.request_timeout_s,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _wait_for_host(self, url: str) -> None:
        """Hold back until the host's minimum interval has elapsed."""
        host = urlsplit(url).netloc.lower()
        async with self._host_lock:
            last = self._last_request.get(host)
            if last is not None:
                wait = self.settings.host_min_interval_s - (time.monotonic() - last)
                if wait > 0:
                    await asyncio.sleep(wait)
            self._last_request[host] = time.monotonic()

    async def _get(self, url: str) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("SourceClient must be used as an async context manager")

        async with self._semaphore:
            await self._wait_for_host(url)
            logger.debug(f"[FETCH] GET {url}")
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                logger.warning(f"[FETCH] {type(e).__name__} for {url}: {e}")
                raise FetchError(url, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.warning(f"[FETCH] HTTP {response.status_code} for {url}")
            raise FetchError(url, f"HTTP {response.status_code}", status_code=response.status_code)
        return response

    async def fetch_text(self, url: str) -> str:
        """Fetch a page and return its decoded body."""
        response = await self._get(url)
        return response.text

    async def fetch_binary(self, url: str) -> bytes:
        """Fetch a binary document (PDF) and return its raw bytes."""
        response = await self._get(url)
        return response.content
