"""
Core scraping logic and data structures.
"""
from __future__ import annotations

import logging
import random
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from sitescraper.fetch import Fetcher, FetchError, RequestsFetcher, extract_anchors, pick_user_agent
from sitescraper.links import LinkParseError, filter_page_links, is_eligible, resolve_link
from sitescraper.settings import ScraperSettings

logger = logging.getLogger(__name__)

# Canonical URL -> HTTP status, None when the status is unknown
VisitedRegistry = Dict[str, Optional[int]]
LogFn = Callable[[str], None]
Sink = Callable[[VisitedRegistry], None]


def stderr_log(message: str) -> None:
    """Print a single log line to stderr."""
    sys.stderr.write(f"{message}\n")
    sys.stderr.flush()


@dataclass(slots=True)
class CrawlBudget:
    """Request counter shared by every node of one scrape."""
    total_requests: int = 0
    limited: bool = False


@dataclass(slots=True)
class CrawlContext:
    """Arguments of a single recursive visit."""
    base_url: str
    relative_url: str
    depth: int
    registry: VisitedRegistry
    budget: CrawlBudget

    def child(self, resolved_url: str, link: str) -> CrawlContext:
        return CrawlContext(
            base_url=resolved_url,
            relative_url=link,
            depth=self.depth + 1,
            registry=self.registry,
            budget=self.budget,
        )


class Scraper:
    """
    Depth-first, same-domain scraper.

    Pages are visited one at a time; each child subtree completes before the
    next sibling starts. All state of a run lives in the ``CrawlContext``
    passed down the recursion, so one instance can run several scrapes.

    A fetcher created here is owned by the scraper and released by
    ``close()`` (or by leaving a ``with`` block); an injected fetcher stays
    the caller's to close.
    """

    def __init__(
        self,
        settings: ScraperSettings,
        fetcher: Optional[Fetcher] = None,
        log: LogFn = stderr_log,
        extract: Callable[[str], List[str]] = extract_anchors,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RequestsFetcher()
        self.log = log
        self.extract = extract
        self.rng = rng or random.Random()
        self.sleep = sleep

    def __enter__(self) -> Scraper:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_fetcher:
            self.fetcher.close()

    def visit(self, context: CrawlContext) -> Optional[VisitedRegistry]:
        """
        Visit ``context.relative_url`` and recurse into its same-domain links.

        Returns the registry, or None when the node was skipped before any
        request. Request failures are recorded, never raised.
        """
        settings = self.settings
        budget = context.budget
        registry = context.registry

        # Check if the total number of requests reached the limit
        if settings.requests_limit and budget.total_requests >= settings.requests_limit:
            if not budget.limited:
                self.log(f"Requests limit ({settings.requests_limit}) reached.")
                budget.limited = True
            return None

        if context.depth > settings.path_depth:
            return None

        resolved_url: Optional[str] = None
        try:
            resolved_url = resolve_link(context.base_url, context.relative_url, settings)
            if not is_eligible(resolved_url, context.base_url, registry, settings):
                return None

            headers = {}
            user_agent = pick_user_agent(settings.user_agents, self.rng)
            if user_agent:
                headers["User-Agent"] = user_agent

            budget.total_requests += 1
            response = self.fetcher.fetch(resolved_url, headers, settings.timeout_ms)

            page_links: List[str] = []
            if response.is_html:
                page_links = filter_page_links(
                    self.extract(response.body),
                    resolved_url,
                    context.base_url,
                    registry,
                    settings,
                )

            status_suffix = f" | {response.status_code}" if settings.output_http_code else ""
            self.log(
                f"Request {budget.total_requests}, visited: {resolved_url}, "
                f"new domain links found: {len(page_links)}{status_suffix}"
            )
            registry[resolved_url] = response.status_code
        except (FetchError, LinkParseError) as e:
            failed_url = resolved_url or context.relative_url
            if isinstance(e, FetchError):
                status = e.status
                logger.warning("HTTP error for %s: %s", failed_url, e)
            else:
                status = None
                logger.debug("Cannot resolve %s: %s", failed_url, e)
            registry[failed_url] = status
            self.log(
                f"Request {budget.total_requests}, error: {failed_url} | "
                f"{'STATUS_UNKNOWN' if status is None else status}"
            )
            return registry

        for link in page_links:
            if link not in registry:
                self.visit(context.child(resolved_url, link))

        # Delay before the next request
        if settings.delay_ms:
            self.sleep(settings.delay_ms / 1000)

        return registry

    def run(
        self,
        start_url: str,
        sink: Optional[Sink] = None,
    ) -> Tuple[VisitedRegistry, float]:
        """
        Scrape from ``start_url`` and hand the results to ``sink``.

        Returns tuple of (visited registry, elapsed milliseconds).
        """
        started = time.perf_counter()

        if start_url.endswith("/"):
            start_url = start_url[:-1]

        registry: VisitedRegistry = {}
        self.visit(CrawlContext(
            base_url=start_url,
            relative_url=start_url,
            depth=0,
            registry=registry,
            budget=CrawlBudget(),
        ))

        if not registry:
            self.log("No links were scraped. Check your scraper settings.")
            return registry, (time.perf_counter() - started) * 1000

        if sink is not None:
            sink(registry)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self.log(f"Scraping completed. Scraper execution time {elapsed_ms / 1000:.2f}s.")
        return registry, elapsed_ms


def scrape(
    start_url: str,
    settings: ScraperSettings,
    log: LogFn = stderr_log,
    sink: Optional[Sink] = None,
) -> Tuple[VisitedRegistry, float]:
    """Run one scrape with the default HTTP fetcher."""
    with Scraper(settings, log=log) as scraper:
        return scraper.run(start_url, sink=sink)
