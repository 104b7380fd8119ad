# === FILE: a11y_scout/config.py ===
"""
Loading and validation of the A11yScout crawl configuration.
The schema is described with Pydantic; files may be YAML or JSON.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlsplit

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

__all__ = [
    "CrawlerConfig",
    "ScannerConfig",
    "load_config",
    "merge_overrides",
    "ValidationError",
]


class CrawlerConfig(BaseModel):
    """Route discovery switches and operator URL patterns."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    use_sitemap: bool = Field(True, description="Seed the frontier from sitemap.xml.")
    respect_robots_txt: bool = Field(True, description="Skip URLs disallowed by robots.txt.")
    discover_common_paths: bool = Field(True, description="Probe well-known paths such as /about.")
    follow_navigation: bool = Field(True, description="Prime the queue from the start page links.")
    max_depth: int = Field(5, ge=0, description="Maximum link depth from the start page.")
    include_query: bool = Field(True, description="Treat query strings as distinct pages.")
    include_patterns: List[str] = Field(default_factory=list, description="Globs a URL must match.")
    exclude_patterns: List[str] = Field(default_factory=list, description="Globs that reject a URL.")

    @field_validator("include_patterns", "exclude_patterns", mode="before")
    def _split_csv(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class ScannerConfig(BaseModel):
    """Configuration for one crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Start URL of the crawl.")
    limit: int = Field(5, ge=1, le=500, description="Maximum number of pages to discover.")
    timeout: float = Field(30.0, gt=0, description="Per-request timeout (seconds).")
    user_agent: str = Field("A11yScoutBot/1.0", min_length=1, description="User-Agent header.")
    rate_limit: float = Field(5.0, gt=0, description="Requests per second.")
    retry_times: int = Field(2, ge=0, description="Retries on 5xx/429 and connection errors.")
    crawler: CrawlerConfig = Field(default_factory=CrawlerConfig)

    @field_validator("base_url", mode="before")
    def _assume_https(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if v and "://" not in v:
                return f"https://{v}"
        return v

    @property
    def start_url(self) -> str:
        """Start URL as plain text, without a fragment."""
        return str(self.base_url).split("#", 1)[0]

    @property
    def origin(self) -> str:
        parts = urlsplit(self.start_url)
        return f"{parts.scheme}://{parts.netloc}"


_DEFAULT_CANDIDATES = (Path("configs/default.yaml"), Path(".a11yrc.json"))


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def _resolve_path(path: Union[str, Path, None]) -> Path:
    if path is None:
        for candidate in _DEFAULT_CANDIDATES:
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CANDIDATES[0]))
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))
    return path_obj


def load_config(path: Union[str, Path, None]) -> ScannerConfig:
    """
    Read YAML or JSON and return a validated ScannerConfig.
    With *path* None, ``configs/default.yaml`` then ``.a11yrc.json`` are tried
    in the current directory; FileNotFoundError if neither exists.
    """
    path_obj = _resolve_path(path)
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")
    return ScannerConfig(**data)


def merge_overrides(config: ScannerConfig, **overrides: Any) -> ScannerConfig:
    """
    Apply CLI overrides on top of a loaded config and re-validate.

    ``None`` values mean "not given on the command line" and are ignored;
    a ``crawler`` mapping is merged key by key into the nested section.
    """
    data: Dict[str, Any] = config.model_dump(mode="json")
    crawler_overrides: Optional[Dict[str, Any]] = overrides.pop("crawler", None)
    data.update({k: v for k, v in overrides.items() if v is not None})
    if crawler_overrides:
        data["crawler"].update({k: v for k, v in crawler_overrides.items() if v is not None})
    return ScannerConfig(**data)
