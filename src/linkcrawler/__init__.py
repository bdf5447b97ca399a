"""
Breadth-first link crawler.
Reports, per discovered URL, how many times it was linked and the last HTTP status seen.
"""
from linkcrawler.config import CrawlConfig
from linkcrawler.core import AdmissionStatus, CrawlState, UrlRecord, normalize_url
from linkcrawler.errors import BodyReadError, CrawlerError, FetchError, SeedURLError
from linkcrawler.fetch import FetchResponse, HttpTransport, extract_links
from linkcrawler.pool import WorkerPool, crawl

__version__ = "1.0.0"
__all__ = [
    "AdmissionStatus",
    "BodyReadError",
    "CrawlConfig",
    "CrawlState",
    "CrawlerError",
    "FetchError",
    "FetchResponse",
    "HttpTransport",
    "SeedURLError",
    "UrlRecord",
    "WorkerPool",
    "crawl",
    "extract_links",
    "normalize_url",
]
