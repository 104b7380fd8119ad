# a11y_scout/crawler/discovery.py
"""
Discovery of pages that many sites have but do not always link to.
"""
from __future__ import annotations

import asyncio
from typing import Dict

from aiohttp import ClientError, ClientSession, ClientTimeout

from a11y_scout.crawler.filters import InvalidUrl
from a11y_scout.crawler.frontier import PRIORITY_SEED, Frontier
from a11y_scout.crawler.link_extractor import normalise_crawl_target
from a11y_scout.crawler.policy import CrawlPolicy
from a11y_scout.logger import logger

__all__ = ("COMMON_PATHS", "probe_common_paths")

PROBE_TIMEOUT = 5.0

COMMON_PATHS = (
    # about
    "/about", "/about-us", "/who-we-are", "/our-story", "/our-team", "/team",
    "/mission", "/vision", "/values",
    # contact
    "/contact", "/contact-us", "/get-in-touch", "/reach-us", "/enquiry", "/enquiries",
    # services and products
    "/services", "/what-we-do", "/products", "/solutions",
    # content
    "/blog", "/news", "/articles", "/resources",
    # help
    "/faqs", "/faq", "/help", "/support", "/help-centre", "/help-center",
    # legal, where accessibility statements usually live
    "/privacy", "/privacy-policy", "/terms", "/terms-of-service", "/terms-and-conditions",
    "/accessibility", "/accessibility-statement", "/cookies", "/cookie-policy",
    # navigation aids
    "/sitemap", "/site-map", "/search", "/find",
    # accounts
    "/login", "/signin", "/sign-in", "/register", "/signup", "/sign-up",
    "/account", "/my-account", "/dashboard",
    # shop
    "/shop", "/store", "/catalogue", "/catalog", "/cart", "/basket", "/checkout",
    "/categories", "/collections",
    # charity and membership
    "/donate", "/support-us", "/get-involved", "/volunteer", "/events", "/whats-on",
    "/calendar", "/membership", "/join", "/become-a-member",
    # information
    "/information", "/info", "/guides", "/advice", "/conditions", "/symptoms", "/treatments",
)


async def probe_common_paths(
    session: ClientSession,
    policy: CrawlPolicy,
    frontier: Frontier,
    url_depths: Dict[str, int],
    start_url: str,
    limit: int,
    visited_count: int = 0,
) -> int:
    """
    Request each well-known path on the crawl origin and queue the ones that
    answer with an HTML page. Redirect targets are queued under their final
    URL. Returns the number of URLs added to *frontier*.
    """
    start_canonical = policy.canonical(start_url)
    timeout = ClientTimeout(total=PROBE_TIMEOUT)
    added = 0
    for path in COMMON_PATHS:
        if visited_count + len(frontier) >= limit * 3:
            break
        candidate = policy.canonical(f"{policy.base_url.rstrip('/')}{path}")
        if candidate in url_depths or policy.is_blocked(candidate):
            continue
        try:
            async with session.get(candidate, timeout=timeout) as resp:
                content_type = resp.headers.get("Content-Type", "").lower()
                if resp.status != 200 or "text/html" not in content_type:
                    continue
                final_url = str(resp.url)
        except (ClientError, asyncio.TimeoutError) as exc:
            logger.debug("Probe %s failed: %s", candidate, exc)
            continue

        target = normalise_crawl_target(policy.base_url, final_url)
        if target is None:
            continue
        try:
            final = policy.canonical(target)
        except InvalidUrl:
            continue
        if final == start_canonical or final in url_depths:
            continue
        frontier.push(final, PRIORITY_SEED, 1)
        url_depths[final] = 1
        added += 1
        logger.debug("Discovered common path: %s", final)
    return added
