# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from a11y_scout.config import ScannerConfig, load_config, merge_overrides


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("base_url: http://example.com\nlimit: 7", ".yaml", None),
        (json.dumps({"base_url": "http://example.com", "limit": 7}), ".json", None),
        ("{}", ".json", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("::invalid yaml", ".yml", TypeError),
        ("[1, 2]", ".json", TypeError),
        ("{broken", ".json", ValueError),
        ("base_url = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ScannerConfig)
        assert str(cfg.base_url).rstrip("/") == "http://example.com"
        assert cfg.limit == 7
        assert cfg.crawler.max_depth == 5


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_finds_default_candidates(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".a11yrc.json").write_text(json.dumps({"base_url": "https://rc.example"}), encoding="utf-8")
    assert load_config(None).origin == "https://rc.example"

    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("base_url: https://yaml.example\n", encoding="utf-8")
    assert load_config(None).origin == "https://yaml.example"


def test_load_config_explicit_path_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_unknown_keys_are_rejected(tmp_path):
    cfg_path = write_file(tmp_path, "base_url: http://example.com\ncrawler: {depth: 3}", ".yaml")
    with pytest.raises(ValidationError):
        load_config(cfg_path)


def test_scheme_is_assumed_and_origin_derived():
    cfg = ScannerConfig(base_url="example.com:8080/start/page#top")
    assert cfg.start_url == "https://example.com:8080/start/page"
    assert cfg.origin == "https://example.com:8080"


def test_patterns_accept_comma_separated_string():
    cfg = ScannerConfig(base_url="https://example.com", crawler={"exclude_patterns": "*/admin/*, */api/* ,"})
    assert cfg.crawler.exclude_patterns == ["*/admin/*", "*/api/*"]


@pytest.mark.parametrize("field,value", [("limit", 0), ("limit", 501), ("rate_limit", 0), ("retry_times", -1)])
def test_field_bounds(field, value):
    with pytest.raises(ValidationError):
        ScannerConfig(base_url="https://example.com", **{field: value})


def test_merge_overrides_ignores_none_and_merges_crawler():
    cfg = ScannerConfig(
        base_url="https://example.com",
        limit=20,
        crawler={"exclude_patterns": ["*/admin/*"], "max_depth": 2},
    )
    merged = merge_overrides(
        cfg,
        base_url=None,
        limit=3,
        crawler={"use_sitemap": False, "exclude_patterns": None},
    )
    assert merged.limit == 3
    assert merged.origin == "https://example.com"
    assert merged.crawler.use_sitemap is False
    assert merged.crawler.exclude_patterns == ["*/admin/*"]
    assert merged.crawler.max_depth == 2
    # the original is frozen and untouched
    assert cfg.limit == 20
    with pytest.raises(ValidationError):
        cfg.limit = 1  # type: ignore[misc]


def test_merge_overrides_revalidates():
    cfg = ScannerConfig(base_url="https://example.com")
    with pytest.raises(ValidationError):
        merge_overrides(cfg, limit=0)
