"""
Exceptions raised by the crawler.
"""
from __future__ import annotations


class CrawlerError(Exception):
    """Base class for crawler errors."""


class SeedURLError(CrawlerError, ValueError):
    """The entrypoint is not an absolute URL; nothing can be crawled."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid start URL: {url!r}")
        self.url = url


class FetchError(CrawlerError):
    """Fetching a single URL failed. Contained to that URL's cycle."""

    def __init__(self, url: str, reason: object) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class BodyReadError(FetchError):
    """The response body could not be decoded as text."""
