# === FILE: a11y_scout/crawler/crawler.py ===
from __future__ import annotations

import time
from itertools import chain
from typing import Dict, List, Optional

from aiohttp import ClientSession, ClientTimeout

from a11y_scout.config import ScannerConfig
from a11y_scout.crawler.discovery import probe_common_paths
from a11y_scout.crawler.fetcher import Fetcher
from a11y_scout.crawler.filters import InvalidUrl
from a11y_scout.crawler.frontier import (
    PRIORITY_NAVIGATION,
    PRIORITY_REGULAR,
    PRIORITY_SEED,
    PRIORITY_START,
    Frontier,
)
from a11y_scout.crawler.link_extractor import extract_links_with_priority, normalise_crawl_target
from a11y_scout.crawler.models import ExtractedLinks, PageData
from a11y_scout.crawler.policy import CrawlPolicy, Verdict
from a11y_scout.crawler.robots import RobotsTxt, load_robots_txt
from a11y_scout.logger import logger
from a11y_scout.parser.sitemap_parser import load_sitemaps

__all__ = ("AsyncCrawler",)

# queued + visited URLs are capped at this multiple of the page limit
QUEUE_BUDGET_FACTOR = 10


class AsyncCrawler:
    """Discovers the pages of one site for auditing, honouring robots.txt and operator patterns."""

    def __init__(self, config: ScannerConfig) -> None:
        self.config = config
        self.limit = config.limit
        self.max_depth = config.crawler.max_depth
        self.policy = CrawlPolicy.from_config(config)
        self.robots = RobotsTxt()
        self.sitemap_urls: List[str] = []
        self.url_depths: Dict[str, int] = {}
        self.visited: Dict[str, None] = {}
        self.disallowed_pages: List[str] = []
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[Fetcher] = None
        self._prefetched: Dict[str, PageData] = {}

    async def __aenter__(self) -> AsyncCrawler:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def discover_routes(self) -> List[str]:
        """Return canonical URLs of the pages to audit, start page first."""
        if not self.session or not self.fetcher:
            raise RuntimeError("Session not initialized")
        crawler_cfg = self.config.crawler
        start = self.config.start_url
        start_canonical = self.policy.canonical(start)
        logger.info("Start discovery: %s", start_canonical)
        started = time.monotonic()

        if crawler_cfg.respect_robots_txt:
            self.robots = await load_robots_txt(self.session, self.config.origin)
            self.policy = self.policy.with_robots(self.robots.disallowed_paths)

        if crawler_cfg.use_sitemap:
            self.sitemap_urls = await load_sitemaps(
                self.session, self.config.origin, self.limit, self.robots.sitemap_urls
            )
            logger.info("Found %d URLs in sitemaps", len(self.sitemap_urls))
            if len(self.sitemap_urls) >= self.limit:
                routes = self._routes_from_sitemap(start_canonical)
                logger.info("Using %d URLs from sitemap", len(routes))
                return routes

        frontier = Frontier()
        frontier.push(start_canonical, PRIORITY_START, 0)
        self.url_depths[start_canonical] = 0
        for url in self.sitemap_urls:
            try:
                canonical = self.policy.canonical(url)
            except InvalidUrl:
                continue
            if canonical not in self.url_depths:
                frontier.push(canonical, PRIORITY_SEED, 1)
                self.url_depths[canonical] = 1

        if crawler_cfg.follow_navigation:
            await self._prime_from_start(frontier, start_canonical)

        if crawler_cfg.discover_common_paths and (
            not crawler_cfg.follow_navigation or len(frontier) < max(4, self.limit / 2)
        ):
            await probe_common_paths(
                self.session,
                self.policy,
                frontier,
                self.url_depths,
                start_url=start_canonical,
                limit=self.limit,
                visited_count=len(self.visited),
            )

        logger.info("Starting crawl with %d URLs in queue", len(frontier))
        await self._crawl(frontier)

        duration = time.monotonic() - started
        logger.info("Discovered %d pages in %.2f s", len(self.visited), duration)
        if self.disallowed_pages:
            logger.info("Blocked by robots.txt: %d", len(self.disallowed_pages))
        return list(self.visited)

    def _routes_from_sitemap(self, start_canonical: str) -> List[str]:
        routes = [start_canonical]
        seen = {start_canonical}
        for url in self.sitemap_urls:
            if len(routes) >= self.limit:
                break
            verdict, canonical = self.policy.classify(url)
            if verdict is Verdict.BLOCKED:
                self._record_disallowed(canonical)
            if verdict is not Verdict.ADMIT or canonical in seen:
                continue
            routes.append(canonical)
            seen.add(canonical)
        return routes

    async def _prime_from_start(self, frontier: Frontier, start_canonical: str) -> None:
        page = await self.fetcher.fetch(start_canonical)
        if page is None:
            logger.debug("Seed link priming skipped for %s", start_canonical)
            return
        self._prefetched[start_canonical] = page
        added = self._enqueue_links(frontier, page.url, extract_links_with_priority(page.content), 1)
        if added:
            logger.info("Seeded %d links from start page", added)

    async def _crawl(self, frontier: Frontier) -> None:
        while frontier and len(self.visited) < self.limit:
            candidate = frontier.pop()
            if candidate is None:
                break
            if candidate.depth > self.max_depth:
                logger.debug("Skipping (max depth exceeded): %s", candidate.url)
                continue

            verdict, canonical = self.policy.classify(candidate.url)
            if canonical is None or canonical in self.visited:
                continue
            if verdict is Verdict.BLOCKED:
                self._record_disallowed(canonical)
                continue
            if verdict is not Verdict.ADMIT:
                continue

            logger.debug("Crawling %s at depth %d", canonical, candidate.depth)
            page = self._prefetched.pop(canonical, None) or await self.fetcher.fetch(canonical)
            if page is None:
                logger.warning("Crawler skip (unreachable): %s", canonical)
                continue
            if page.requested_url and page.url != page.requested_url:
                logger.debug("Redirected: %s -> %s", page.requested_url, page.url)
            self.visited[canonical] = None
            links = extract_links_with_priority(page.content)
            logger.debug("Found %d links on %s", len(links), page.url)
            self._enqueue_links(frontier, page.url, links, candidate.depth + 1)

    def _enqueue_links(
        self, frontier: Frontier, page_url: str, links: ExtractedLinks, depth: int
    ) -> int:
        if depth > self.max_depth:
            return 0
        added = 0
        prioritised = chain(
            ((href, PRIORITY_NAVIGATION) for href in links.navigation),
            ((href, PRIORITY_REGULAR) for href in links.regular),
        )
        for href, priority in prioritised:
            if len(frontier) + len(self.visited) >= self.limit * QUEUE_BUDGET_FACTOR:
                break
            target = normalise_crawl_target(self.config.origin, href, page_url)
            if target is None:
                continue
            verdict, candidate = self.policy.classify(target)
            if verdict is Verdict.BLOCKED:
                self._record_disallowed(candidate)
            if verdict is not Verdict.ADMIT or candidate in self.visited or candidate in self.url_depths:
                continue
            frontier.push(candidate, priority, depth)
            self.url_depths[candidate] = depth
            added += 1
        return added

    def _record_disallowed(self, url: str) -> None:
        if url not in self.disallowed_pages:
            self.disallowed_pages.append(url)
