"""
Scraper settings loaded from the environment (and an optional .env file).
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
)

TRUTHY = frozenset(("1", "true", "yes", "y", "on"))


class SettingsError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(slots=True)
class ScraperSettings:
    """Runtime options for a single scrape."""
    requests_limit: int = 0
    path_depth: int = 3
    include_path: Optional[str] = None
    user_agents: List[str] = field(default_factory=lambda: list(DEFAULT_USER_AGENTS))
    timeout_ms: int = 10_000
    skip_words: List[str] = field(default_factory=list)
    output_http_code: bool = False
    delay_ms: int = 0
    sort_output: bool = True
    trim_ending_slash: bool = True
    exclude_query_string: bool = True
    exclude_fragment: bool = True


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise SettingsError(f"{name} must not be negative, got {value}")
    return value


def _env_list(name: str, default: List[str]) -> List[str]:
    """
    Parse a list variable.

    Accepts a JSON array (needed for values containing commas, such as
    user agent strings) or a plain comma-separated string.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return list(default)

    raw = raw.strip()
    if raw.startswith("["):
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SettingsError(f"{name} is not a valid JSON array: {e}") from None
        return [str(item).strip() for item in items if str(item).strip()]

    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings() -> ScraperSettings:
    """Build ``ScraperSettings`` from environment variables."""
    load_dotenv()  # Loads .env values if present

    defaults = ScraperSettings()
    include_path = (os.getenv("INCLUDE_PATH") or "").strip() or None

    return ScraperSettings(
        requests_limit=_env_int("WEB_REQUESTS_LIMIT", defaults.requests_limit),
        path_depth=_env_int("PATH_DEPTH", defaults.path_depth),
        include_path=include_path,
        user_agents=_env_list("USER_AGENTS", defaults.user_agents),
        timeout_ms=_env_int("TIMEOUT_MS", defaults.timeout_ms),
        skip_words=_env_list("SKIP_WORDS", defaults.skip_words),
        output_http_code=_env_bool("OUTPUT_HTTP_CODE", defaults.output_http_code),
        delay_ms=_env_int("DELAY_MS", defaults.delay_ms),
        sort_output=_env_bool("SORT_OUTPUT", defaults.sort_output),
        trim_ending_slash=_env_bool("TRIM_ENDING_SLASH", defaults.trim_ending_slash),
        exclude_query_string=_env_bool("EXCLUDE_QUERY_STRING", defaults.exclude_query_string),
        exclude_fragment=_env_bool("EXCLUDE_FRAGMENT", defaults.exclude_fragment),
    )
