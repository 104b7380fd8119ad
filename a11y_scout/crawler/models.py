# a11y_scout/crawler/models.py
"""
Data models shared by the A11yScout fetcher and crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True)
class PageData:
    """An HTML page as fetched: final URL after redirects and the markup."""

    url: str
    content: str
    requested_url: str = ""


@dataclass(slots=True)
class ExtractedLinks:
    """Links found on a page, split by crawl priority."""

    navigation: List[str] = field(default_factory=list)
    regular: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.navigation) + len(self.regular)
