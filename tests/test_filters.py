# File: tests/test_filters.py
"""Tests for URL canonicalization, robots rule matching and operator globs."""
import pytest

from a11y_scout.crawler.filters import (
    InvalidUrl,
    LiteralRule,
    RobotsRuleSet,
    WildcardRule,
    canonicalize,
    compile_robots_rule,
    evaluate_policy,
    is_disallowed,
    match_glob,
    wildcard_rule_to_matcher,
)

BASE = "https://example.com"


# --------------------------------------------------------------------------- #
#                              canonicalize                                   #
# --------------------------------------------------------------------------- #


def test_canonicalize_strips_hash_query_and_trailing_slash():
    assert canonicalize(BASE, True, "/about?x=1#section") == "https://example.com/about?x=1"
    assert canonicalize(BASE, True, "/about/?x=1#section") == "https://example.com/about?x=1"
    assert canonicalize(BASE, True, "/#section") == "https://example.com/"
    assert canonicalize(BASE, False, "/about?x=1#section") == "https://example.com/about"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://example.com/docs/", "https://example.com/docs"),
        ("//example.com/docs", "https://example.com/docs"),
        ("guide", "https://example.com/base/guide"),
        ("../up", "https://example.com/up"),
        ("https://other.org/x/", "https://other.org/x"),
        ("", "https://example.com/base/page"),
    ],
)
def test_canonicalize_resolves_against_base(raw, expected):
    assert canonicalize("https://example.com/base/page", True, raw) == expected


def test_canonicalize_root_is_preserved():
    assert canonicalize(BASE, True, "/") == BASE + "/"
    assert canonicalize(BASE, False, BASE) == BASE + "/"
    assert canonicalize(BASE, False, "https://example.com/?q=1") == BASE + "/"


def test_canonicalize_trailing_slash_is_equivalent():
    for keep_query in (True, False):
        assert canonicalize(BASE, keep_query, "/foo/") == canonicalize(BASE, keep_query, "/foo")


def test_canonicalize_does_not_fold_case_or_decode():
    url = "https://Example.com/A%20B/Page?b=2&a=1"
    assert canonicalize(BASE, True, url) == url


def test_canonicalize_ignores_surrounding_whitespace():
    assert canonicalize(BASE, True, " /about ") == canonicalize(BASE, True, "/about")
    assert canonicalize(BASE, True, "\n\thttps://example.com/docs/ \n") == "https://example.com/docs"


@pytest.mark.parametrize(
    "raw",
    ["http://[::1]:8080/a/", "https://bücher.example/katalog", "http://192.168.0.1/x"],
)
def test_canonicalize_accepts_ip_and_international_hosts(raw):
    assert canonicalize(BASE, True, raw) == raw.rstrip("/")


def test_canonicalize_keeps_query_verbatim():
    assert canonicalize(BASE, True, "/search?q=a+b&z=%2F&a=") == "https://example.com/search?q=a+b&z=%2F&a="


@pytest.mark.parametrize(
    "raw",
    [
        "/about/?x=1#top",
        "https://example.com/",
        "https://example.com/a//",
        "relative/path/",
        "/p?x=1&y=#frag",
        "https://example.com:8443/deep/path/?q",
    ],
)
@pytest.mark.parametrize("keep_query", [True, False])
def test_canonicalize_is_idempotent(raw, keep_query):
    once = canonicalize(BASE, keep_query, raw)
    assert canonicalize(BASE, keep_query, once) == once
    assert "#" not in once
    if not keep_query:
        assert "?" not in once


@pytest.mark.parametrize(
    "raw",
    [
        "http://[::1",
        "http://example.com:notaport/",
        "http://example.com:99999/",
        "mailto:someone@example.com",
        "http:///nohost",
        "https://exa mple.com/x",
        "https://example.com\\evil",
        "http://ex<a>mple.com/",
        "http://exa|mple.com/",
    ],
)
def test_canonicalize_rejects_malformed_urls(raw):
    with pytest.raises(InvalidUrl) as excinfo:
        canonicalize(BASE, True, raw)
    assert excinfo.value.raw == raw
    assert isinstance(excinfo.value, ValueError)


# --------------------------------------------------------------------------- #
#                                robots rules                                 #
# --------------------------------------------------------------------------- #


def test_wildcard_rule_matches_query_variants():
    matcher = wildcard_rule_to_matcher("/*?")
    assert matcher("/page?x=1") is True
    assert matcher("/page") is False


def test_wildcard_rule_is_start_anchored_only():
    matcher = wildcard_rule_to_matcher("/private/*.pdf")
    assert matcher("/private/docs/report.pdf")
    assert matcher("/private/report.pdf?download=1")
    assert not matcher("/public/private/report.pdf")


def test_wildcard_rule_treats_dollar_and_dots_literally():
    matcher = wildcard_rule_to_matcher("/*.php$")
    assert not matcher("/index.php")
    assert matcher("/index.php$")
    assert not wildcard_rule_to_matcher("/a.c*")("/abc")


def test_compile_robots_rule_tags_variants():
    assert compile_robots_rule("/admin") == LiteralRule("/admin")
    wildcard = compile_robots_rule("/*/edit")
    assert isinstance(wildcard, WildcardRule)
    assert wildcard.rule == "/*/edit"


def test_is_disallowed_supports_direct_and_wildcard_rules():
    disallowed = {"/admin", "/*?"}
    assert is_disallowed("https://example.com/admin/users", disallowed) is True
    assert is_disallowed("https://example.com/page?draft=true", disallowed) is True
    assert is_disallowed("https://example.com/public", disallowed) is False


def test_literal_rule_is_plain_string_prefix():
    rules = RobotsRuleSet.from_rules(["/admin"])
    assert is_disallowed("https://example.com/admin", rules)
    assert is_disallowed("https://example.com/admin/", rules)
    assert is_disallowed("https://example.com/administration", rules)
    assert not is_disallowed("https://example.com/public/admin", rules)


def test_literal_rule_ignores_query_unless_it_names_one():
    assert not is_disallowed("https://example.com/page?admin=1", ["/page?x"])
    assert is_disallowed("https://example.com/search?q=shoes", ["/search?q="])
    assert not is_disallowed("https://example.com/search", ["/search?q="])


def test_is_disallowed_with_empty_rules():
    assert is_disallowed("https://example.com/anything", []) is False
    assert is_disallowed("https://example.com/anything", RobotsRuleSet()) is False
    assert RobotsRuleSet.from_rules([""]).rules == ()


def test_rule_set_deduplicates_and_iterates():
    rules = RobotsRuleSet.from_rules(["/a", "/a", "/b*"])
    assert len(rules) == 2
    assert [type(r) for r in rules] == [LiteralRule, WildcardRule]


def test_is_disallowed_for_root_without_path():
    assert is_disallowed("https://example.com", ["/"])


# --------------------------------------------------------------------------- #
#                              globs & policy                                 #
# --------------------------------------------------------------------------- #


def test_match_glob_is_anchored_on_both_ends():
    assert match_glob("https://example.com/about/team", "*/about/*") is True
    assert match_glob("https://example.com/aboutus", "*/about/*") is False
    assert match_glob("https://example.com/about/team", "/about/*") is False
    assert match_glob("https://example.com/about/team", "*/about") is False


def test_match_glob_treats_metacharacters_literally():
    assert match_glob("https://example.com/a?b", "*/a?b") is True
    assert match_glob("https://example.com/axb", "*/a?b") is False
    assert match_glob("https://example.com/a.b", "*/a.b") is True
    assert match_glob("https://example.com/axb", "*/a.b") is False
    assert match_glob("https://example.com/[x]", "*/[x]") is True


def test_match_glob_star_matches_empty_and_is_case_insensitive():
    assert match_glob("https://example.com/about/", "*/about/*")
    assert match_glob("https://example.com/About/Team", "*/about/*")


def test_evaluate_policy_applies_exclude_first_then_include():
    include, exclude = ["*/about/*"], ["*/about/private/*"]
    assert evaluate_policy("https://example.com/about/team", include, exclude) is True
    assert evaluate_policy("https://example.com/about/private/roadmap", include, exclude) is False
    assert evaluate_policy("https://example.com/blog/post", include, exclude) is False


def test_evaluate_policy_defaults_to_allow():
    assert evaluate_policy("https://example.com/anything?at=all", [], []) is True
    assert evaluate_policy("https://example.com/blog", [], ["*/admin/*"]) is True


def test_evaluate_policy_order_does_not_matter():
    include = ["*/blog/*", "*/about/*"]
    url = "https://example.com/about/team"
    assert evaluate_policy(url, include, []) == evaluate_policy(url, list(reversed(include)), [])
