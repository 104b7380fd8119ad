# a11y_scout/crawler/fetcher.py
"""
Fetcher module: HTML page requests with rate limiting, retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession

from a11y_scout.config import ScannerConfig
from a11y_scout.crawler.models import PageData
from a11y_scout.logger import logger

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)


class FetchError(ClientError):
    """Retryable HTTP status returned by the server."""


class Fetcher:
    """Fetches HTML pages, spacing requests by ``config.rate_limit``."""

    def __init__(
        self,
        session: ClientSession,
        config: ScannerConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def fetch(self, url: str) -> Optional[PageData]:
        """
        GET *url* and return PageData for a 200 HTML response.

        Returns None for other statuses, non-HTML content and requests that
        still fail after ``config.retry_times`` retries.
        """
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status:
                        raise FetchError(f"retryable status {resp.status}")
                    mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    if resp.status != 200 or mime not in ("text/html", "application/xhtml+xml"):
                        logger.debug("Not a page: %s (HTTP %s, %s)", url, resp.status, mime or "-")
                        return None
                    text = await resp.text(errors="replace")
                    return PageData(url=str(resp.url), content=text, requested_url=url)
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.warning("Failed %s: %s", url, exc or type(exc).__name__)
                    return None
                backoff = self._backoff(attempts)
                logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)

    @staticmethod
    def _backoff(attempts: int) -> float:
        return min(60, 2**attempts + random.random())

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            wait = interval - (time.monotonic() - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
