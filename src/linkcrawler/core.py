"""
Core crawling logic and data structures.

CrawlState owns the frontier (URLs waiting to be fetched) and the ledger
(every URL ever admitted, with its reference count and last status). All
access goes through one lock, so workers can share a single instance.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Deque, Dict, Optional
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from linkcrawler.errors import SeedURLError
from linkcrawler.fetch import FetchResponse, HttpTransport, extract_links

logger = logging.getLogger(__name__)

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Schemes that cannot be parsed without a host
HOST_SCHEMES: frozenset[str] = frozenset(("http", "https", "ftp", "ws", "wss"))

DEFAULT_PORTS: Dict[str, int] = {"http": 80, "https": 443, "ftp": 21, "ws": 80, "wss": 443}


@dataclass(slots=True)
class UrlRecord:
    """Ledger entry for one canonical URL."""
    count: int = 1
    status: int = 0

    def increment(self, value: int = 1) -> None:
        self.count += value


class AdmissionStatus(str, Enum):
    """Outcome of offering a URL to the crawl state."""

    ADMITTED = "admitted"
    SKIPPED_LIMIT = "skipped_limit"
    SKIPPED_SEEN = "skipped_seen"
    SKIPPED_OFF_DOMAIN = "skipped_off_domain"
    SKIPPED_MALFORMED = "skipped_malformed"

    @property
    def accepted(self) -> bool:
        return self is AdmissionStatus.ADMITTED


def normalize_url(url: str, base: str) -> str:
    """
    Resolve a root-relative link against base.

    Anything not starting with "/" is returned untouched; the exclusion
    policy decides later whether it is usable.
    """
    if not url.startswith("/"):
        return url
    try:
        return urljoin(base, url)
    except ValueError:
        return f"{base}{url}"


def parse_absolute(url: str) -> Optional[SplitResult]:
    """
    Parse url as an absolute URL.

    Returns None for a relative reference (no scheme) and raises ValueError
    if the URL is malformed.
    """
    parts = urlsplit(url)
    if not parts.scheme:
        return None
    if parts.scheme in HOST_SCHEMES and not parts.hostname:
        raise ValueError(f"Empty host in {url!r}")
    # .port is validated lazily and raises ValueError when out of range
    parts.port
    return parts


def canonical_base(parts: SplitResult) -> str:
    """
    Rebuild a parsed seed URL in canonical form.

    Scheme and host are lowercased and a default port is dropped, so links
    resolved against it match absolute links written the usual way.
    """
    scheme = parts.scheme.lower()
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    netloc = host
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{parts.port}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


class CrawlState:
    """Frontier and ledger of one crawl, guarded by a single lock."""

    def __init__(self, base: str, restrict_on_domain: bool = False, limit: int = 0) -> None:
        self.base = base
        self.restrict_on_domain = restrict_on_domain
        self.limit = limit

        self.frontier: Deque[str] = deque()
        self.ledger: Dict[str, UrlRecord] = {}
        self.in_flight = 0

        self._base_host = urlsplit(base).hostname
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)

    @classmethod
    def from_seed(cls, seed: str, restrict_on_domain: bool = False, limit: int = 0) -> CrawlState:
        """Validate the seed URL and enqueue it."""
        try:
            parts = parse_absolute(seed)
        except ValueError:
            parts = None
        if parts is None or not parts.hostname:
            raise SeedURLError(seed)

        state = cls(canonical_base(parts), restrict_on_domain=restrict_on_domain, limit=limit)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"
        state.queue(target)
        return state

    def queue(self, url: str) -> AdmissionStatus:
        """Normalize a raw link and offer it to the frontier."""
        return self.lookup_or_reserve(normalize_url(url, self.base))

    def lookup_or_reserve(self, url: str) -> AdmissionStatus:
        """
        Admit a normalized URL unless the exclusion policy rejects it.

        The policy check and the ledger/frontier insert happen in the same
        critical section, so a URL is admitted at most once no matter how
        many workers discover it concurrently.
        """
        with self._lock:
            status = self._exclusion(url)
            if status.accepted:
                self.ledger[url] = UrlRecord()
                self.frontier.append(url)
                self._changed.notify()

        if status.accepted:
            logger.log(TRACE, "Queued %s", url)
        else:
            logger.debug("Skipped %s (%s)", url, status.value)
        return status

    def should_exclude(self, url: str) -> bool:
        """
        Return True if url must not be admitted.

        A URL already in the ledger has its count incremented as a side effect.
        """
        with self._lock:
            return not self._exclusion(url).accepted

    def _exclusion(self, url: str) -> AdmissionStatus:
        # Caller holds the lock.
        if self.limit > 0 and len(self.ledger) >= self.limit:
            return AdmissionStatus.SKIPPED_LIMIT

        record = self.ledger.get(url)
        if record is not None:
            record.increment()
            return AdmissionStatus.SKIPPED_SEEN

        try:
            parts = parse_absolute(url)
        except ValueError:
            return AdmissionStatus.SKIPPED_MALFORMED

        # Relative references are kept; the fetch resolves or rejects them.
        if parts is None:
            return AdmissionStatus.ADMITTED

        if self.restrict_on_domain and parts.hostname != self._base_host:
            return AdmissionStatus.SKIPPED_OFF_DOMAIN
        return AdmissionStatus.ADMITTED

    def pop(self) -> Optional[str]:
        """
        Take the next URL off the frontier.

        While the frontier is empty but other fetches are still in flight this
        blocks, since those fetches may admit more URLs. Idle workers park
        here instead of exiting, which keeps the pool parallel once the seed
        page has been fetched. Returns None once the frontier is empty and
        nothing is in flight, which is final.
        Every URL returned must be matched by a call to task_done().
        """
        with self._changed:
            while not self.frontier:
                if self.in_flight == 0:
                    return None
                self._changed.wait()
            self.in_flight += 1
            url = self.frontier.popleft()
        logger.log(TRACE, "Popped %s", url)
        return url

    def task_done(self) -> None:
        """Mark one popped URL as fully processed."""
        with self._changed:
            self.in_flight -= 1
            if self.in_flight == 0 and not self.frontier:
                self._changed.notify_all()

    def record_status(self, url: str, status: int) -> None:
        """Store the status observed for url, creating its record if needed."""
        with self._lock:
            self.ledger.setdefault(url, UrlRecord()).status = status

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        """Snapshot of the ledger as {url: {"count": n, "status": s}}, sorted by URL."""
        with self._lock:
            return {url: asdict(self.ledger[url]) for url in sorted(self.ledger)}

    def __len__(self) -> int:
        with self._lock:
            return len(self.ledger)


def on_response(response: FetchResponse, state: CrawlState) -> None:
    """Queue every link found in a fetched page and record its status."""
    for href in extract_links(response.body):
        state.queue(href)

    state.record_status(response.url, response.status_code)

    if response.ok:
        logger.info("%s - %s", response.status_code, response.url)
    else:
        logger.error("%s - %s", response.status_code, response.url)


def execute(url: str, state: CrawlState, transport: HttpTransport) -> None:
    """
    Fetch one frontier URL and dispatch its response.

    Raises FetchError if the transport fails; the URL is not re-queued.
    """
    on_response(transport.fetch(normalize_url(url, state.base)), state)
