"""
Worker pool draining the crawl frontier.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from linkcrawler.config import DEFAULT_WORKERS, CrawlConfig
from linkcrawler.core import CrawlState, execute
from linkcrawler.errors import FetchError
from linkcrawler.fetch import HttpTransport

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Fixed-size set of threads that share one CrawlState.

    Each worker pops a URL under the state lock, then fetches and parses it
    without holding the lock. Workers exit once the frontier is empty and no
    fetch is in flight. A pool of size 1 crawls sequentially.
    """

    def __init__(self, state: CrawlState, transport: HttpTransport, size: int = DEFAULT_WORKERS) -> None:
        if size < 1:
            raise ValueError("size must be > 0")
        self.state = state
        self.transport = transport
        self.size = size

    def run(self) -> None:
        """Start the workers and block until all of them have exited."""
        workers = [
            threading.Thread(
                target=self._worker,
                name=f"crawler-worker-{idx}",
                daemon=True,
            )
            for idx in range(self.size)
        ]

        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

    def _worker(self) -> None:
        while True:
            url = self.state.pop()
            if url is None:
                logger.debug("%s: frontier drained", threading.current_thread().name)
                return

            try:
                execute(url, self.state, self.transport)
            except FetchError as e:
                logger.error("%s", e)
            except Exception:
                logger.exception("Unexpected error while crawling %s", url)
            finally:
                self.state.task_done()


def crawl(config: CrawlConfig, transport: Optional[HttpTransport] = None) -> CrawlState:
    """
    Crawl breadth-first from config.entrypoint until the frontier is drained.

    Args:
        config: Crawl options.
        transport: Fetcher to use; an HttpTransport built from config when omitted.

    Returns:
        The final crawl state; its ledger holds every admitted URL.

    Raises:
        SeedURLError: If the entrypoint is not an absolute URL.
    """
    state = CrawlState.from_seed(
        config.entrypoint,
        restrict_on_domain=config.restrict_on_domain,
        limit=config.limit,
    )
    logger.info("Starting crawl from %s with %d workers", state.base, config.workers)

    owns_transport = transport is None
    if transport is None:
        transport = HttpTransport(timeout=config.timeout, user_agent=config.user_agent)

    try:
        WorkerPool(state, transport, size=config.workers).run()
    finally:
        if owns_transport:
            transport.close()

    logger.info("Crawl finished: %d URLs discovered", len(state))
    return state
