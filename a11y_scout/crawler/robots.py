# a11y_scout/crawler/robots.py
"""
robots.txt parsing and loading.

Only the Disallow lines of sections addressed to ``*`` or to an agent whose
name contains ``a11y`` are kept; ``Sitemap:`` lines are collected from the
whole file. Matching the collected rules against URLs is the job of
:mod:`a11y_scout.crawler.filters`.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from aiohttp import ClientError, ClientSession

from a11y_scout.logger import logger

__all__ = ("RobotsTxt", "parse_robots_txt", "load_robots_txt")

AGENT_TOKEN = "a11y"


@dataclass(frozen=True, slots=True)
class RobotsTxt:
    """Rules extracted from one robots.txt file."""

    disallowed_paths: FrozenSet[str] = field(default_factory=frozenset)
    sitemap_urls: Tuple[str, ...] = ()


def _split_directive(raw: str) -> Tuple[str, str] | None:
    line = raw.split("#", 1)[0].strip()
    if ":" not in line:
        return None
    key, _, value = line.partition(":")
    return key.strip().lower(), value.strip()


def parse_robots_txt(text: str) -> RobotsTxt:
    """Parse robots.txt content into disallow rules and sitemap references."""
    disallowed: List[str] = []
    sitemaps: List[str] = []
    relevant = False
    for raw in text.splitlines():
        directive = _split_directive(raw)
        if directive is None:
            continue
        key, value = directive
        if key == "user-agent":
            agent = value.lower()
            relevant = agent == "*" or AGENT_TOKEN in agent
        elif key == "disallow":
            # empty Disallow allows everything
            if relevant and value:
                disallowed.append(value)
        elif key == "sitemap":
            if value and value not in sitemaps:
                sitemaps.append(value)
    return RobotsTxt(frozenset(disallowed), tuple(sitemaps))


async def load_robots_txt(session: ClientSession, origin: str) -> RobotsTxt:
    """Fetch ``{origin}/robots.txt``; any failure yields an empty rule set."""
    robots_url = f"{origin.rstrip('/')}/robots.txt"
    try:
        async with session.get(robots_url) as resp:
            if resp.status != 200:
                logger.debug("robots.txt %s -> HTTP %s", robots_url, resp.status)
                return RobotsTxt()
            text = await resp.text()
    except (ClientError, asyncio.TimeoutError, UnicodeDecodeError) as exc:
        logger.debug("Could not load robots.txt %s: %s", robots_url, exc)
        return RobotsTxt()

    parsed = parse_robots_txt(text)
    logger.debug("Loaded robots.txt with %d disallow rules", len(parsed.disallowed_paths))
    return parsed
