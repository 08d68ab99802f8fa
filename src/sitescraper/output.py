"""
Rendering and persistence of scrape results.
"""
from __future__ import annotations

import sys
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union
from urllib.parse import quote

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_."
_FILENAME_SAFE = "!~*'()"


@dataclass(slots=True)
class ScrapeStats:
    """Statistics derived from a finished scrape for summary output."""
    pages_visited: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record(self, status_code: Optional[int]) -> None:
        """Record one visited URL by status code category."""
        self.pages_visited += 1
        if status_code is None:
            self.error_counts["connection_error"] += 1
        elif status_code >= 400:
            self.error_counts[str(status_code)] += 1


def summarize(registry: Mapping[str, Optional[int]]) -> ScrapeStats:
    stats = ScrapeStats()
    for status_code in registry.values():
        stats.record(status_code)
    return stats


def print_summary(stats: ScrapeStats) -> None:
    """Print scrape summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("SCRAPE SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total URLs visited:     {stats.pages_visited}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            label = "Connection errors" if error_type == "connection_error" else f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def format_lines(
    registry: Mapping[str, Optional[int]],
    output_http_code: bool,
    sort_output: bool,
) -> List[str]:
    """Render one line per URL, optionally annotated with '|<status>'."""
    entries = list(registry.items())
    if sort_output:
        entries.sort(key=lambda entry: entry[0])

    if not output_http_code:
        return [url for url, _ in entries]
    return [
        f"{url}|{'N/A' if status_code is None else status_code}"
        for url, status_code in entries
    ]


def write_scrape_file(
    registry: Mapping[str, Optional[int]],
    path: Union[str, Path],
    *,
    output_http_code: bool,
    sort_output: bool,
) -> Path:
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        "\n".join(format_lines(registry, output_http_code, sort_output)),
        encoding="utf-8",
    )
    return output_path


def generate_output_path(
    start_url: str,
    now: Optional[datetime] = None,
    directory: Union[str, Path] = ".",
) -> Path:
    """Generate output path: s{YYYYMMDDHHMM, UTC}-{url-encoded start url}.out"""
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M")
    return Path(directory) / f"s{timestamp}-{quote(start_url, safe=_FILENAME_SAFE)}.out"
