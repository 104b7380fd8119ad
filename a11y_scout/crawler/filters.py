# a11y_scout/crawler/filters.py
"""
URL-level crawl filters: canonicalization, robots.txt rule matching and
operator include/exclude globs.

Everything here is a pure function over strings and immutable rule
collections.
"""
from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Iterable, Iterator, Sequence, Tuple, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

__all__ = (
    "InvalidUrl",
    "LiteralRule",
    "WildcardRule",
    "RobotsRule",
    "RobotsRuleSet",
    "canonicalize",
    "compile_robots_rule",
    "wildcard_rule_to_matcher",
    "is_disallowed",
    "match_glob",
    "evaluate_policy",
)

PathMatcher = Callable[[str], bool]

# code points that can never appear in a host name
_FORBIDDEN_HOST_RE = re.compile(r'[\x00-\x20\x7f"#%/:<>?@\[\\\]^`{|}]')


class InvalidUrl(ValueError):
    """A discovered link could not be resolved to a well-formed absolute URL."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"invalid URL {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


# --------------------------------------------------------------------------- #
#                              Canonicalization                               #
# --------------------------------------------------------------------------- #


def canonicalize(base_url: str, keep_query: bool, raw: str) -> str:
    """
    Resolve *raw* against *base_url* and reduce it to the crawler's dedup key.

    The fragment is always dropped, the query only when *keep_query* is false,
    and trailing slashes are removed from every path except the root. Host
    case, percent-escapes and parameter order are left untouched; surrounding
    whitespace of *raw* is not part of the URL.

    Raises InvalidUrl when the result has no scheme or host, has a malformed
    host, or cannot be parsed at all (broken IPv6 literal, bad port).
    """
    try:
        parts = urlsplit(urljoin(base_url, raw.strip()))
        parts.port  # raises ValueError for non-numeric or out-of-range ports
    except ValueError as exc:
        raise InvalidUrl(raw, str(exc)) from exc

    if not parts.scheme:
        raise InvalidUrl(raw, "no scheme")
    if not parts.hostname:
        raise InvalidUrl(raw, "no host")
    if not _valid_host(parts.hostname):
        raise InvalidUrl(raw, "bad host")

    path = parts.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") or "/"
    query = parts.query if keep_query else ""
    return urlunsplit((parts.scheme, parts.netloc, path, query, ""))


def _valid_host(host: str) -> bool:
    if ":" in host:
        # bracketed IPv6 literal, possibly with a zone id
        try:
            ipaddress.IPv6Address(host.split("%", 1)[0])
        except ValueError:
            return False
        return True
    return _FORBIDDEN_HOST_RE.search(host) is None


# --------------------------------------------------------------------------- #
#                                Robots rules                                 #
# --------------------------------------------------------------------------- #


@lru_cache(maxsize=1024)
def _robots_regex(rule: str) -> re.Pattern[str]:
    # start-anchored only: a rule describes a prefix of path+query
    return re.compile(".*".join(re.escape(chunk) for chunk in rule.split("*")), re.DOTALL)


def wildcard_rule_to_matcher(rule: str) -> PathMatcher:
    """
    Turn a robots.txt rule containing ``*`` into a predicate over path+query.

    ``*`` matches any run of characters; every other character, ``?`` and
    ``$`` included, matches itself. So ``/*?`` blocks any URL with a query.
    """
    regex = _robots_regex(rule)

    def matcher(path_with_query: str) -> bool:
        return regex.match(path_with_query) is not None

    return matcher


@dataclass(frozen=True, slots=True)
class LiteralRule:
    """Plain-prefix rule: ``/admin`` blocks ``/admin``, ``/admin/x`` and ``/administration``."""

    prefix: str

    def matches(self, path: str, path_with_query: str) -> bool:
        # A "?" can only ever occur in the query, so such rules test path+query.
        target = path_with_query if "?" in self.prefix else path
        return target.startswith(self.prefix)


@dataclass(frozen=True, slots=True)
class WildcardRule:
    """Rule containing ``*``, compiled once when the rule set is built."""

    rule: str
    matcher: PathMatcher = field(compare=False, repr=False)

    def matches(self, path: str, path_with_query: str) -> bool:
        return self.matcher(path_with_query)


RobotsRule = Union[LiteralRule, WildcardRule]


def compile_robots_rule(rule: str) -> RobotsRule:
    if "*" in rule:
        return WildcardRule(rule, wildcard_rule_to_matcher(rule))
    return LiteralRule(rule)


@dataclass(frozen=True, slots=True)
class RobotsRuleSet:
    """Immutable, pre-compiled set of Disallow rules for one origin."""

    rules: Tuple[RobotsRule, ...] = ()

    @classmethod
    def from_rules(cls, rules: Iterable[str]) -> RobotsRuleSet:
        # An empty Disallow means "allow everything", never "block every path".
        compiled = [compile_robots_rule(r) for r in dict.fromkeys(rules) if r]
        return cls(tuple(compiled))

    def matches(self, path: str, path_with_query: str) -> bool:
        return any(rule.matches(path, path_with_query) for rule in self.rules)

    def __iter__(self) -> Iterator[RobotsRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def is_disallowed(url: str, rules: Union[RobotsRuleSet, Iterable[str]]) -> bool:
    """Return True if any robots rule blocks *url*.

    *rules* is normally a prebuilt RobotsRuleSet; a plain collection of rule
    strings is compiled on the spot. There is no Allow precedence: the first
    matching Disallow wins.
    """
    rule_set = rules if isinstance(rules, RobotsRuleSet) else RobotsRuleSet.from_rules(rules)
    if not rule_set.rules:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    path = parts.path or "/"
    path_with_query = f"{path}?{parts.query}" if parts.query else path
    return rule_set.matches(path, path_with_query)


# --------------------------------------------------------------------------- #
#                              Operator patterns                              #
# --------------------------------------------------------------------------- #


@lru_cache(maxsize=512)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(
        ".*".join(re.escape(chunk) for chunk in pattern.split("*")),
        re.IGNORECASE | re.DOTALL,
    )


def match_glob(url: str, pattern: str) -> bool:
    """Whole-string glob match where only ``*`` is special (case-insensitive)."""
    return _glob_regex(pattern).fullmatch(url) is not None


def evaluate_policy(
    url: str,
    include_patterns: Sequence[str],
    exclude_patterns: Sequence[str],
) -> bool:
    """Accept/reject *url* by operator globs; exclusion always wins."""
    if any(match_glob(url, pattern) for pattern in exclude_patterns):
        return False
    if include_patterns:
        return any(match_glob(url, pattern) for pattern in include_patterns)
    return True
