"""
Link normalization and eligibility filtering.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from sitescraper.settings import ScraperSettings

logger = logging.getLogger(__name__)

WEB_SCHEMES: frozenset[str] = frozenset(("http", "https"))


class LinkParseError(ValueError):
    """A candidate link cannot be turned into a crawlable URL."""


def _split(link: str) -> SplitResult:
    try:
        parsed = urlsplit(link)
        parsed.port  # Raises on out-of-range or non-numeric ports
    except ValueError as e:
        raise LinkParseError(f"Malformed URL {link!r}: {e}") from None
    return parsed


def _remove_dot_segments(path: str) -> str:
    """Resolve '.' and '..' path segments (RFC 3986, section 5.2.4)."""
    if "." not in path:
        return path

    output: List[str] = []
    for segment in path.split("/"):
        if segment == "..":
            if len(output) > 1:
                output.pop()
        elif segment != ".":
            output.append(segment)

    if path.endswith(("/.", "/..")):
        output.append("")
    return "/".join(output) or "/"


def transform_link(link: str, settings: ScraperSettings) -> str:
    """
    Canonicalize an absolute URL.

    - Normalizes scheme/host case
    - Removes default ports (:80, :443)
    - Resolves dot segments, empty path becomes '/'
    - Optionally strips the querystring, the fragment and trailing '/'

    Applying it twice yields the same string.
    """
    parsed = _split(link)
    if parsed.scheme.lower() not in WEB_SCHEMES or not parsed.hostname:
        raise LinkParseError(f"Not an absolute web URL: {link!r}")

    scheme = parsed.scheme.lower()
    hostname = parsed.hostname
    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parsed.port

    if (scheme == "http" and port == 80) or (scheme == "https" and port == 443):
        netloc = hostname
    elif port:
        netloc = f"{hostname}:{port}"
    else:
        netloc = hostname

    parts = [
        _remove_dot_segments(parsed.path) or "/",
        "" if settings.exclude_query_string else parsed.query,
        "" if settings.exclude_fragment else parsed.fragment,
    ]
    if settings.trim_ending_slash:
        _trim_ending_slashes(parts)

    return urlunsplit((scheme, netloc, *parts))


def _trim_ending_slashes(parts: List[str]) -> None:
    """
    Strip trailing '/' from the last non-empty of [path, query, fragment].

    A component emptied this way is dropped along with its '?' or '#', so the
    rendered URL never ends with '/' and re-parsing it gives the same parts.
    """
    while any(parts):
        last = max(i for i, part in enumerate(parts) if part)
        if not parts[last].endswith("/"):
            return
        parts[last] = parts[last].rstrip("/")


def resolve_link(base_url: str, relative_url: str, settings: ScraperSettings) -> str:
    """Resolve ``relative_url`` against ``base_url`` and canonicalize it."""
    try:
        joined = urljoin(base_url, relative_url)
    except ValueError as e:
        raise LinkParseError(f"Cannot resolve {relative_url!r} against {base_url!r}: {e}") from None
    return transform_link(joined, settings)


def normalize_link(
    link: str,
    resolved_url: str,
    base_url: str,
    settings: ScraperSettings,
) -> str:
    """
    Turn a raw href found on ``resolved_url`` into a canonical absolute URL.

    Domain-root links ("/about") take the scheme and host of ``base_url``;
    links without a host are appended to ``resolved_url`` after a '/'.
    Raises ``LinkParseError`` for malformed or non-web links.
    """
    link = link.strip()
    base = _split(base_url)

    if link.startswith("//"):
        link = f"{base.scheme}:{link}"
    elif link.startswith("/"):
        link = f"{base.scheme}://{base.netloc}{link}"

    parsed = _split(link)
    if parsed.scheme and parsed.scheme.lower() not in WEB_SCHEMES:
        raise LinkParseError(f"Unsupported scheme in {link!r}")

    if not parsed.hostname:
        link = f"{resolved_url}/{link}"

    return transform_link(link, settings)


def is_same_domain(url: str, base_url: str) -> bool:
    """Check if URL has the same hostname as the base URL (subdomains excluded)."""
    return urlsplit(url).hostname == urlsplit(base_url).hostname


def is_eligible(
    url: str,
    base_url: str,
    visited: Mapping[str, Optional[int]],
    settings: ScraperSettings,
) -> bool:
    """Check whether a canonical URL may be visited. First failing check wins."""
    if url in visited:
        return False

    if settings.include_path and settings.include_path not in urlsplit(url).path:
        return False

    if any(word in url for word in settings.skip_words):
        return False

    return is_same_domain(url, base_url)


def filter_page_links(
    links: Iterable[str],
    resolved_url: str,
    base_url: str,
    visited: Mapping[str, Optional[int]],
    settings: ScraperSettings,
) -> List[str]:
    """Normalize the hrefs of one page and keep the unique, eligible ones."""
    candidates: dict[str, None] = {}

    for href in links:
        try:
            target = normalize_link(href, resolved_url, base_url, settings)
        except LinkParseError as e:
            logger.debug("Dropping link %r found on %s: %s", href, resolved_url, e)
            continue

        if target == resolved_url:
            continue
        if not is_eligible(target, base_url, visited, settings):
            continue

        candidates[target] = None

    return list(candidates)
