from __future__ import annotations

import threading
from typing import Callable, Dict, List, Optional, Tuple, Union

import pytest

from linkcrawler.fetch import FetchResponse

Body = Union[str, Callable[[], str]]


class FakeTransport:
    """In-memory stand-in for HttpTransport serving a fixed set of pages."""

    def __init__(
        self,
        pages: Dict[str, Tuple[int, Body]],
        redirects: Optional[Dict[str, str]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.pages = pages
        self.redirects = redirects or {}
        self.errors = errors or {}
        self.fetched: List[str] = []
        self._lock = threading.Lock()

    def fetch(self, url: str) -> FetchResponse:
        with self._lock:
            self.fetched.append(url)
        if url in self.errors:
            raise self.errors[url]

        final = self.redirects.get(url, url)
        if final not in self.pages:
            return FetchResponse(url=final, status_code=404, body="<html></html>")

        status, body = self.pages[final]
        if callable(body):
            body = body()
        return FetchResponse(url=final, status_code=status, body=body)


def make_page(*hrefs: str) -> str:
    links = "".join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{links}</body></html>"


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def page():
    return make_page
