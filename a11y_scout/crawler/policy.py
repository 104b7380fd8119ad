# a11y_scout/crawler/policy.py
"""
Per-session crawl policy: the three gates every discovered link passes
before it may enter the frontier.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from a11y_scout.crawler.filters import (
    InvalidUrl,
    RobotsRuleSet,
    canonicalize,
    evaluate_policy,
    is_disallowed,
)
from a11y_scout.logger import logger

if TYPE_CHECKING:
    from a11y_scout.config import ScannerConfig

__all__ = ("CrawlPolicy", "Verdict")


class Verdict(str, Enum):
    ADMIT = "admit"
    INVALID = "invalid"
    BLOCKED = "blocked"
    EXCLUDED = "excluded"


@dataclass(frozen=True, slots=True)
class CrawlPolicy:
    """Immutable snapshot of the URL rules for one crawl session.

    Workers share one instance; refreshing robots rules produces a new
    snapshot through :meth:`with_robots` instead of mutating this one.
    """

    base_url: str
    keep_query: bool = True
    respect_robots_txt: bool = True
    robots_rules: RobotsRuleSet = RobotsRuleSet()
    include_patterns: Tuple[str, ...] = ()
    exclude_patterns: Tuple[str, ...] = ()

    @classmethod
    def from_config(cls, config: ScannerConfig) -> CrawlPolicy:
        crawler = config.crawler
        return cls(
            base_url=config.origin,
            keep_query=crawler.include_query,
            respect_robots_txt=crawler.respect_robots_txt,
            include_patterns=tuple(crawler.include_patterns),
            exclude_patterns=tuple(crawler.exclude_patterns),
        )

    def with_robots(self, disallowed: Iterable[str]) -> CrawlPolicy:
        return replace(self, robots_rules=RobotsRuleSet.from_rules(disallowed))

    def canonical(self, url: str) -> str:
        return canonicalize(self.base_url, self.keep_query, url)

    def is_blocked(self, url: str) -> bool:
        return self.respect_robots_txt and is_disallowed(url, self.robots_rules)

    def passes_patterns(self, url: str) -> bool:
        return evaluate_policy(url, self.include_patterns, self.exclude_patterns)

    def classify(self, url: str) -> Tuple[Verdict, Optional[str]]:
        """Run *url* through all gates; the canonical URL is None only for INVALID."""
        try:
            canonical = self.canonical(url)
        except InvalidUrl as exc:
            logger.debug("Skipping (invalid URL): %s", exc)
            return Verdict.INVALID, None
        if self.is_blocked(canonical):
            logger.debug("Skipping (robots.txt disallowed): %s", canonical)
            return Verdict.BLOCKED, canonical
        if not self.passes_patterns(canonical):
            logger.debug("Skipping (pattern excluded): %s", canonical)
            return Verdict.EXCLUDED, canonical
        return Verdict.ADMIT, canonical

    def admit(self, url: str) -> Optional[str]:
        """Return the canonical form of *url* if all gates let it through."""
        verdict, canonical = self.classify(url)
        return canonical if verdict is Verdict.ADMIT else None
