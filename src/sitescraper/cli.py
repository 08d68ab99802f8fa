"""
Command-line interface for the scraper.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from sitescraper.core import VisitedRegistry, scrape
from sitescraper.output import (
    format_lines,
    generate_output_path,
    print_summary,
    summarize,
    write_scrape_file,
)
from sitescraper.settings import ScraperSettings, SettingsError, load_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recursively visit same-domain links starting from a URL and record their HTTP status."
    )
    parser.add_argument("start_url", help="Start URL (e.g. https://example.com)")
    parser.add_argument("--limit", type=int, help="Maximum number of requests, 0 for unlimited (env: WEB_REQUESTS_LIMIT)")
    parser.add_argument("--depth", type=int, help="Maximum link depth from the start URL (env: PATH_DEPTH)")
    parser.add_argument("--include-path", help="Only visit URLs whose path contains this text (env: INCLUDE_PATH)")
    parser.add_argument("--timeout-ms", type=int, help="Request timeout in milliseconds (env: TIMEOUT_MS)")
    parser.add_argument("--delay-ms", type=int, help="Delay after each visited page in milliseconds (env: DELAY_MS)")
    parser.add_argument(
        "--skip-word",
        action="append",
        dest="skip_words",
        help="Skip URLs containing this text; repeatable (env: SKIP_WORDS)",
    )
    parser.add_argument("--output-http-code", action="store_true", help="Append '|<status>' to every output line")
    parser.add_argument("--no-sort", action="store_true", help="Keep visit order in the output")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated .out file)")
    parser.add_argument("--no-save", action="store_true", help="Do not write an output file")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging and a summary")
    return parser


def apply_overrides(settings: ScraperSettings, args: argparse.Namespace) -> ScraperSettings:
    """Return settings with command-line flags taking precedence over the environment."""
    for flag in ("limit", "depth", "timeout_ms", "delay_ms"):
        value = getattr(args, flag)
        if value is not None and value < 0:
            raise SettingsError(f"--{flag.replace('_', '-')} must not be negative")

    overrides = {}
    if args.limit is not None:
        overrides["requests_limit"] = args.limit
    if args.depth is not None:
        overrides["path_depth"] = args.depth
    if args.include_path is not None:
        overrides["include_path"] = args.include_path or None
    if args.timeout_ms is not None:
        overrides["timeout_ms"] = args.timeout_ms
    if args.delay_ms is not None:
        overrides["delay_ms"] = args.delay_ms
    if args.skip_words:
        overrides["skip_words"] = list(args.skip_words)
    if args.output_http_code:
        overrides["output_http_code"] = True
    if args.no_sort:
        overrides["sort_output"] = False

    return dataclasses.replace(settings, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the scraper CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = apply_overrides(load_settings(), args)
    except SettingsError as e:
        sys.stderr.write(f"Invalid settings: {e}\n")
        return 2

    def save(registry: VisitedRegistry) -> None:
        if args.out == "-":
            lines = format_lines(registry, settings.output_http_code, settings.sort_output)
            print("\n".join(lines))
            return

        output_path = write_scrape_file(
            registry,
            args.out or generate_output_path(args.start_url),
            output_http_code=settings.output_http_code,
            sort_output=settings.sort_output,
        )
        sys.stderr.write(f"Results written to: {output_path}\n")

    registry, _ = scrape(
        args.start_url,
        settings,
        sink=None if args.no_save else save,
    )

    if args.verbose and registry:
        print_summary(summarize(registry))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
