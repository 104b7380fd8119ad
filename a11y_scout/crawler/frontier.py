# a11y_scout/crawler/frontier.py
"""
Crawl frontier: candidates ordered by priority, then by insertion order.
"""
from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass
from typing import List, Optional, Tuple

__all__ = (
    "CrawlCandidate",
    "Frontier",
    "PRIORITY_START",
    "PRIORITY_SEED",
    "PRIORITY_NAVIGATION",
    "PRIORITY_REGULAR",
)

PRIORITY_START = 0
PRIORITY_SEED = 1  # sitemap entries and probed common paths
PRIORITY_NAVIGATION = 2
PRIORITY_REGULAR = 3


@dataclass(frozen=True, slots=True)
class CrawlCandidate:
    url: str
    priority: int
    depth: int


class Frontier:
    """Min-heap of candidates; lower priority values are crawled first."""

    def __init__(self) -> None:
        self._heap: List[Tuple[int, int, CrawlCandidate]] = []
        self._counter = itertools.count()

    def push(self, url: str, priority: int, depth: int) -> None:
        candidate = CrawlCandidate(url, priority, depth)
        heapq.heappush(self._heap, (priority, next(self._counter), candidate))

    def pop(self) -> Optional[CrawlCandidate]:
        if not self._heap:
            return None
        return heapq.heappop(self._heap)[2]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
