# File: a11y_scout/parser/sitemap_parser.py
"""a11y_scout.parser.sitemap_parser: parsing of sitemap.xml / sitemap index files and URL collection."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set
from urllib.parse import urlsplit

from aiohttp import ClientError, ClientSession
from lxml import etree

from a11y_scout.logger import logger

__all__ = ("SitemapDocument", "parse_sitemap", "load_sitemaps", "COMMON_SITEMAP_PATHS")

COMMON_SITEMAP_PATHS = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/sitemaps.xml",
    "/sitemap/sitemap.xml",
    "/wp-sitemap.xml",
    "/page-sitemap.xml",
    "/post-sitemap.xml",
)
MAX_SITEMAP_DEPTH = 5
_SITEMAP_FILE_RE = re.compile(r"sitemap.*\.xml$", re.IGNORECASE)
_HEADERS = {"Accept": "application/xml, text/xml, */*"}


@dataclass(slots=True)
class SitemapDocument:
    """Parsed sitemap: ``kind`` is "urlset", "sitemapindex" or "unknown"."""

    kind: str
    locations: List[str] = field(default_factory=list)


def parse_sitemap(xml_content: str) -> SitemapDocument:
    """Parse sitemap XML and return its ``<loc>`` entries.

    Args:
        xml_content: text of a sitemap.xml or a sitemap index.

    Returns:
        SitemapDocument whose ``kind`` tells whether the locations are pages
        (``urlset``) or further sitemaps (``sitemapindex``).

    Example:
    ```python
    from a11y_scout.parser.sitemap_parser import parse_sitemap

    doc = parse_sitemap(open("sitemap.xml", encoding="utf-8").read())
    if doc.kind == "urlset":
        print(doc.locations)
    ```
    """
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.strip().encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return SitemapDocument("unknown")
    if root is None:
        return SitemapDocument("unknown")

    kind = etree.QName(root).localname.lower()
    if kind == "sitemapindex":
        entries = root.findall("{*}sitemap/{*}loc")
    elif kind == "urlset":
        entries = root.findall("{*}url/{*}loc")
    else:
        return SitemapDocument("unknown")
    return SitemapDocument(kind, [loc.text.strip() for loc in entries if loc.text and loc.text.strip()])


def _looks_like_xml(content_type: str, content: str) -> bool:
    return (
        "xml" in content_type
        or content.lstrip().startswith("<?xml")
        or "<urlset" in content
        or "<sitemapindex" in content
    )


def _same_origin(url: str, origin: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return f"{parts.scheme}://{parts.netloc}".lower() == origin.lower()


async def _collect(
    session: ClientSession,
    origin: str,
    sitemap_url: str,
    found: Dict[str, None],
    visited: Set[str],
    depth: int,
) -> None:
    if depth > MAX_SITEMAP_DEPTH or sitemap_url in visited:
        return
    visited.add(sitemap_url)

    try:
        async with session.get(sitemap_url, headers=_HEADERS) as resp:
            final_url = str(resp.url)
            if final_url != sitemap_url:
                visited.add(final_url)
                logger.debug("Sitemap redirected: %s -> %s", sitemap_url, final_url)
            if resp.status != 200:
                logger.debug("Sitemap %s returned %s", sitemap_url, resp.status)
                return
            content_type = resp.headers.get("Content-Type", "").lower()
            content = await resp.text()
    except (ClientError, asyncio.TimeoutError, UnicodeDecodeError) as exc:
        logger.debug("Could not load sitemap %s: %s", sitemap_url, exc)
        return

    if not _looks_like_xml(content_type, content):
        return

    doc = parse_sitemap(content)
    if doc.kind == "sitemapindex":
        logger.debug("Found %d nested sitemaps in %s", len(doc.locations), sitemap_url)
        for nested in doc.locations:
            await _collect(session, origin, nested, found, visited, depth + 1)
    elif doc.kind == "urlset":
        logger.debug("Found %d URLs in %s", len(doc.locations), sitemap_url)
        for url in doc.locations:
            if url in found or _SITEMAP_FILE_RE.search(url):
                continue
            if _same_origin(url, origin):
                found[url] = None


async def load_sitemaps(
    session: ClientSession,
    origin: str,
    limit: int,
    robots_sitemap_urls: Iterable[str] = (),
) -> List[str]:
    """
    Collect same-origin page URLs from robots.txt sitemaps and the usual
    sitemap locations, stopping once ``2 * limit`` URLs are known.
    """
    origin = origin.rstrip("/")
    locations = [f"{origin}{path}" for path in COMMON_SITEMAP_PATHS]
    for url in robots_sitemap_urls:
        if url not in locations:
            locations.insert(0, url)

    found: Dict[str, None] = {}
    visited: Set[str] = set()
    for sitemap_url in locations:
        if len(found) >= limit * 2:
            logger.debug("Already have %d URLs, stopping sitemap parsing", len(found))
            break
        await _collect(session, origin, sitemap_url, found, visited, depth=0)

    logger.debug("Loaded sitemaps with total %d URLs", len(found))
    return list(found)
