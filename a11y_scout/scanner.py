# === FILE: a11y_scout/scanner.py ===
"""
Thin wrapper that runs route discovery for one configuration.
"""
from typing import List

from a11y_scout.crawler.crawler import AsyncCrawler


async def start_scan(cfg) -> List[str]:
    """
    Run the async crawler inside its session context and return the
    discovered canonical URLs.

    Parameters
    ----------
    cfg : ScannerConfig
        Crawl configuration.

    Returns
    -------
    List[str]
        Canonical URLs of the pages to audit, start page first.
    """
    async with AsyncCrawler(cfg) as crawler:
        routes = await crawler.discover_routes()
    return routes

__all__ = ["start_scan"]
