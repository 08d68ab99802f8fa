"""
Same-domain web scraper that recursively visits links from a start URL.
Records every visited URL with its HTTP status code.
"""
from sitescraper.core import CrawlBudget, CrawlContext, Scraper, VisitedRegistry, scrape
from sitescraper.fetch import FetchError, FetchResponse, RequestsFetcher
from sitescraper.links import LinkParseError
from sitescraper.settings import ScraperSettings, load_settings

__version__ = "1.0.0"
__all__ = [
    "CrawlBudget",
    "CrawlContext",
    "FetchError",
    "FetchResponse",
    "LinkParseError",
    "RequestsFetcher",
    "Scraper",
    "ScraperSettings",
    "VisitedRegistry",
    "load_settings",
    "scrape",
]
