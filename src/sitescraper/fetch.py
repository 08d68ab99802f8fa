"""
HTTP fetching and anchor extraction collaborators.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence

import requests
from bs4 import BeautifulSoup, SoupStrainer

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


@dataclass(slots=True)
class FetchResponse:
    """Status and body of a successful request."""
    status_code: int
    body: str
    content_type: str = "text/html"

    @property
    def is_html(self) -> bool:
        content_type = self.content_type.lower()
        return not content_type or "html" in content_type


class FetchError(Exception):
    """
    A request that produced no usable response.

    ``kind`` is one of "timeout", "connection", "http" or "request";
    ``status`` is set when the server answered with an error code.
    """

    def __init__(self, kind: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


class Fetcher(Protocol):
    def fetch(self, url: str, headers: Dict[str, str], timeout_ms: int) -> FetchResponse:
        ...


class RequestsFetcher:
    """Fetcher backed by a shared ``requests.Session``."""

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self.session = session or requests.Session()

    def fetch(self, url: str, headers: Dict[str, str], timeout_ms: int) -> FetchResponse:
        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=timeout_ms / 1000,
                allow_redirects=True,
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError("http", str(e), status) from e
        except requests.Timeout as e:
            raise FetchError("timeout", str(e)) from e
        except requests.ConnectionError as e:
            raise FetchError("connection", str(e)) from e
        except requests.RequestException as e:
            raise FetchError("request", str(e)) from e

        return FetchResponse(
            status_code=resp.status_code,
            body=resp.text,
            content_type=resp.headers.get("content-type") or "",
        )

    def close(self) -> None:
        self.session.close()


def pick_user_agent(pool: Sequence[str], rng: random.Random) -> Optional[str]:
    """Pick a user agent from the pool, or None when the pool is empty."""
    if not pool:
        return None
    return rng.choice(pool)


def extract_anchors(html: str) -> List[str]:
    """Extract unique href values from <a> tags, in document order."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return list(dict.fromkeys(a["href"] for a in soup.find_all("a", href=True) if a["href"]))
