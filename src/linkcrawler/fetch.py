"""
HTTP transport and hyperlink extraction.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List

import requests
from bs4 import BeautifulSoup, SoupStrainer

from linkcrawler.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from linkcrawler.errors import BodyReadError, FetchError

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


@dataclass(slots=True)
class FetchResponse:
    """A fetched page: final URL after redirects, status code and decoded body."""
    url: str
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def extract_links(html: str) -> List[str]:
    """Extract all href values from <a> tags using optimized parsing."""
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    return [a["href"] for a in soup.find_all("a", href=True) if a["href"]]


def decode_body(resp: requests.Response) -> str:
    """
    Decode the response body strictly.

    Uses the charset declared in the Content-Type header, falling back to
    UTF-8. requests assumes ISO-8859-1 for any text/* response without a
    charset, so resp.encoding alone is not trusted.
    """
    content_type = (resp.headers.get("content-type") or "").lower()
    encoding = "utf-8"
    if "charset=" in content_type and resp.encoding:
        encoding = resp.encoding
    try:
        return resp.content.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise BodyReadError(resp.url, e) from e


class HttpTransport:
    """
    Fetch pages with requests.

    Each worker thread gets its own Session, since Session objects are not
    safe to share between threads.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout = timeout
        self.user_agent = user_agent

        self._thread_local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def fetch(self, url: str) -> FetchResponse:
        """Fetch url following redirects. Raises FetchError on any transport failure."""
        session = self._thread_local_session()
        try:
            resp = session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise FetchError(url, e) from e

        return FetchResponse(url=resp.url, status_code=resp.status_code, body=decode_body(resp))

    def close(self) -> None:
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def _thread_local_session(self) -> requests.Session:
        session = getattr(self._thread_local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.user_agent
            self._thread_local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
