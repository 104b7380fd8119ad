# === FILE: a11y_scout/cli.py ===
#!/usr/bin/env python3
"""
Command line entry point for A11yScout route discovery.

Commands:
  crawl     Discover the pages of a site and print/save them as JSON
  check     Show how the crawl policy treats individual URLs
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml or .a11yrc.json)
  --url URL           Start URL (overrides base_url)
  --limit INT         Maximum number of pages (overrides limit)
  --include GLOB      Include pattern, repeatable (overrides crawler.include_patterns)
  --exclude GLOB      Exclude pattern, repeatable (overrides crawler.exclude_patterns)
  --no-robots         Ignore robots.txt
  --no-sitemap        Do not read sitemaps
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only if omitted)
  --log-format FORMAT Logging format string

Example:
  a11y-scout --url https://example.com --limit 20 --exclude '*/admin/*' crawl --pretty
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from a11y_scout import __version__
from a11y_scout.config import ScannerConfig, load_config, merge_overrides
from a11y_scout.crawler.policy import CrawlPolicy, Verdict
from a11y_scout.logger import DEFAULT_FORMAT, init_logging
from a11y_scout.scanner import start_scan

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

_VERDICT_COLOURS = {
    Verdict.ADMIT: "green",
    Verdict.BLOCKED: "yellow",
    Verdict.EXCLUDED: "yellow",
    Verdict.INVALID: "red",
}


def print_error(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def _load(config_path: Optional[Path], url: Optional[str]) -> ScannerConfig:
    if config_path is not None:
        return load_config(config_path)
    try:
        return load_config(None)
    except FileNotFoundError:
        if url is None:
            raise
        return ScannerConfig(base_url=url)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="A11yScout, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a YAML or JSON config file.",
)
@click.option("--url", "-u", "url", default=None, help="Start URL of the crawl.")
@click.option("--limit", "-l", "limit", type=int, default=None, help="Maximum number of pages.")
@click.option("--include", "include", multiple=True, help="Include glob (repeatable).")
@click.option("--exclude", "exclude", multiple=True, help="Exclude glob (repeatable).")
@click.option("--no-robots", "no_robots", is_flag=True, help="Ignore robots.txt.")
@click.option("--no-sitemap", "no_sitemap", is_flag=True, help="Do not read sitemaps.")
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Logging level.",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Log file (stdout only if omitted).",
)
@click.option("--log-format", "log_format", default=DEFAULT_FORMAT, help="Logging format string.")
@click.pass_context
def cli(ctx, config_path, url, limit, include, exclude, no_robots, no_sitemap,
        log_level, log_file, log_format):
    """A11yScout: discover the pages of a site for accessibility auditing."""
    init_logging(level=log_level, log_file=log_file, log_format=log_format)
    try:
        cfg = _load(config_path, url)
        cfg = merge_overrides(
            cfg,
            base_url=url,
            limit=limit,
            crawler={
                "include_patterns": list(include) or None,
                "exclude_patterns": list(exclude) or None,
                "respect_robots_txt": False if no_robots else None,
                "use_sitemap": False if no_sitemap else None,
            },
        )
    except (OSError, ValueError, TypeError) as e:
        print_error(f"Failed to load configuration: {e}")
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("crawl", context_settings=CONTEXT_SETTINGS)
@click.option(
    "--json", "-j", "json_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Save the discovered URLs to a JSON file.",
)
@click.option("--pretty", is_flag=True, help="Indent JSON output.")
@click.option("--scan-timeout", "scan_timeout", type=float, default=None,
              help="Timeout for the whole discovery (seconds).")
@click.pass_context
def crawl(ctx, json_output, pretty, scan_timeout):
    """Discover routes and print or save them."""
    cfg = ctx.obj["config"]
    try:
        if scan_timeout:
            routes = asyncio.run(asyncio.wait_for(start_scan(cfg), timeout=scan_timeout))
        else:
            routes = asyncio.run(start_scan(cfg))
    except asyncio.TimeoutError:
        print_error(f"Discovery did not finish within {scan_timeout} seconds")

    indent = 2 if pretty else None
    if json_output is None:
        click.echo(json.dumps(routes, ensure_ascii=False, indent=indent))
        return
    try:
        json_output.parent.mkdir(parents=True, exist_ok=True)
        json_output.write_text(json.dumps(routes, ensure_ascii=False, indent=indent), encoding="utf-8")
    except OSError as e:
        print_error(f"Failed to save JSON: {e}")
    click.echo(f"{len(routes)} URLs saved to {json_output}")


@cli.command("check", context_settings=CONTEXT_SETTINGS)
@click.argument("urls", nargs=-1, required=True)
@click.option("--disallow", "disallow", multiple=True,
              help="robots.txt Disallow rule to apply (repeatable).")
@click.pass_context
def check(ctx, urls, disallow):
    """Show the canonical form of each URL and whether the crawler would visit it."""
    cfg = ctx.obj["config"]
    policy = CrawlPolicy.from_config(cfg).with_robots(disallow)
    for url in urls:
        verdict, canonical = policy.classify(url)
        click.secho(f"{verdict.value.upper():<9} {canonical or url}", fg=_VERDICT_COLOURS[verdict])


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as JSON."""
    cfg = ctx.obj["config"]
    click.echo(cfg.model_dump_json(indent=2))


def main():
    cli(prog_name="a11y-scout")


if __name__ == "__main__":
    main()
