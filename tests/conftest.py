# File: tests/conftest.py
from collections.abc import AsyncIterator, Callable

import pytest
from aiohttp import web

from a11y_scout.config import ScannerConfig
from a11y_scout.logger import configure


@pytest.fixture(autouse=True)
def fresh_logger():
    """
    Rebind the project logger to the current test's stdout so handlers
    never point at a stream captured by an earlier test.
    """
    configure(level="DEBUG")
    yield
    configure(level="INFO")


@pytest.fixture()
def make_config() -> Callable[..., ScannerConfig]:
    """
    Return a factory for fast ScannerConfig instances: no retries, a high
    rate limit and optional crawler overrides.
    """

    def factory(base_url: str, **crawler) -> ScannerConfig:
        limit = crawler.pop("limit", 10)
        return ScannerConfig(
            base_url=base_url,
            limit=limit,
            timeout=2.0,
            user_agent="TestAgent/1.0",
            rate_limit=100.0,
            retry_times=crawler.pop("retry_times", 0),
            crawler=crawler,
        )

    return factory


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


def text(body: str, content_type: str = "text/plain", status: int = 200) -> web.Response:
    return web.Response(text=body, content_type=content_type, status=status)


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
