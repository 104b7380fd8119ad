# a11y_scout/crawler/link_extractor.py
"""
Link discovery for the crawler.

Links inside site navigation (nav, header, footer, menus, breadcrumbs) are
returned separately from ordinary body links so the crawler can visit the
site's main sections first.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable, List, Optional, Set
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from a11y_scout.crawler.models import ExtractedLinks

__all__ = ("extract_links_with_priority", "normalise_crawl_target")

_IGNORED_PREFIXES = ("javascript:", "mailto:", "tel:", "sms:", "#")
_NAV_TAGS = {"nav", "header", "footer"}
_NAV_ROLES = {"navigation", "banner", "contentinfo"}
_NAV_CLASSES = {"nav", "navigation", "menu", "header", "footer"}
_NAV_ID_PARTS = ("nav", "menu", "header", "footer")
_JSON_LD_KEYS = {"url", "mainEntityOfPage", "sameAs", "relatedLink", "hasPart"}
_ONCLICK_RE = re.compile(r"""(?:location\.href|window\.location)\s*=\s*['"]([^'"]+)['"]""")
_ASSET_MARKERS = (".css", ".js", ".ico")
_DATA_ATTRS = ("data-href", "data-link", "data-url")


def _in_navigation(tag: Tag) -> bool:
    current: Optional[Tag] = tag
    while isinstance(current, Tag) and current.name not in ("body", "[document]"):
        role = str(current.get("role") or "").lower()
        classes = {c.lower() for c in current.get("class") or []}
        element_id = str(current.get("id") or "").lower()
        if (
            current.name in _NAV_TAGS
            or role in _NAV_ROLES
            or classes & _NAV_CLASSES
            or any(part in element_id for part in _NAV_ID_PARTS)
        ):
            return True
        current = current.parent
    return False


def _in_breadcrumb(tag: Tag) -> bool:
    for parent in tag.parents:
        if not isinstance(parent, Tag):
            continue
        classes = " ".join(parent.get("class") or []).lower()
        label = str(parent.get("aria-label") or "").lower()
        if "breadcrumb" in classes or "breadcrumb" in label:
            return True
    return False


def _json_ld_urls(data: Any) -> Iterable[str]:
    if isinstance(data, list):
        for item in data:
            if isinstance(item, str):
                if item.startswith("http"):
                    yield item
            else:
                yield from _json_ld_urls(item)
    elif isinstance(data, dict):
        for key, value in data.items():
            if key in _JSON_LD_KEYS and isinstance(value, str):
                yield value
            elif isinstance(value, (list, dict)):
                yield from _json_ld_urls(value)


def extract_links_with_priority(html: str) -> ExtractedLinks:
    """Collect candidate hrefs from *html*, navigation links first.

    Hrefs are returned raw (possibly relative); run them through
    :func:`normalise_crawl_target` or the crawl policy before queueing.
    """
    soup = BeautifulSoup(html, "html.parser")
    navigation: List[str] = []
    regular: List[str] = []
    seen_nav: Set[str] = set()
    seen_regular: Set[str] = set()

    def add(href: Optional[str], nav: bool) -> None:
        if not href:
            return
        href = href.strip()
        if not href or href.lower().startswith(_IGNORED_PREFIXES):
            return
        bucket, seen = (navigation, seen_nav) if nav else (regular, seen_regular)
        if href not in seen:
            seen.add(href)
            bucket.append(href)

    for tag in soup.find_all("a", href=True):
        add(tag.get("href"), _in_navigation(tag) or _in_breadcrumb(tag))

    for tag in soup.find_all("area", href=True):
        add(tag.get("href"), False)

    for tag in soup.find_all("link", href=True):
        rel = {r.lower() for r in tag.get("rel") or []}
        href = str(tag.get("href") or "")
        if not (rel & {"alternate", "canonical"} or "/" in href):
            continue
        if href.startswith("data:") or any(marker in href for marker in _ASSET_MARKERS):
            continue
        add(href, False)

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "")
        except ValueError:
            continue
        for url in _json_ld_urls(data):
            add(url, False)

    for tag in soup.find_all(lambda t: any(t.has_attr(a) for a in _DATA_ATTRS)):
        add(next(str(tag[a]) for a in _DATA_ATTRS if tag.has_attr(a)), False)

    for tag in soup.find_all(attrs={"onclick": True}):
        match = _ONCLICK_RE.search(str(tag.get("onclick")))
        if match:
            add(match.group(1), False)

    # A link already known as navigation is not repeated among regular links.
    regular = [href for href in regular if href not in seen_nav]
    return ExtractedLinks(navigation=navigation, regular=regular)


def normalise_crawl_target(origin: str, href: str, page_url: Optional[str] = None) -> Optional[str]:
    """
    Absolute, fragment-free form of *href* if it is a same-origin http(s)
    URL, otherwise None. Relative hrefs resolve against *page_url* when
    given, else against *origin*.
    """
    if not href or href.startswith("#"):
        return None
    if href.lower().startswith(_IGNORED_PREFIXES):
        return None
    try:
        parts = urlsplit(urljoin(page_url or origin, href))
        origin_parts = urlsplit(origin)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https"):
        return None
    if (parts.scheme, parts.netloc.lower()) != (origin_parts.scheme, origin_parts.netloc.lower()):
        return None
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", parts.query, ""))
