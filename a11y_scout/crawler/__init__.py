"""a11y_scout.crawler: route discovery and the URL policy engine it runs on."""

from .filters import (
    InvalidUrl,
    RobotsRuleSet,
    canonicalize,
    evaluate_policy,
    is_disallowed,
    match_glob,
    wildcard_rule_to_matcher,
)
from .policy import CrawlPolicy, Verdict

__all__ = [
    "InvalidUrl",
    "RobotsRuleSet",
    "canonicalize",
    "evaluate_policy",
    "is_disallowed",
    "match_glob",
    "wildcard_rule_to_matcher",
    "CrawlPolicy",
    "Verdict",
]
