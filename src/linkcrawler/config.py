"""
Crawl configuration.
"""
from __future__ import annotations

import argparse
from dataclasses import dataclass

DEFAULT_WORKERS = 5
DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "linkcrawler/1.0"


@dataclass(slots=True)
class CrawlConfig:
    """Options for one crawl run."""
    entrypoint: str
    restrict_on_domain: bool = False
    limit: int = 0
    workers: int = DEFAULT_WORKERS
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def validate(self) -> None:
        """Raise ValueError if any option is out of range."""
        if self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout}")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CrawlConfig":
        config = cls(
            entrypoint=args.entrypoint,
            restrict_on_domain=args.restrict_on_domain,
            limit=args.limit,
            workers=args.workers,
            timeout=args.timeout,
            user_agent=args.user_agent,
        )
        config.validate()
        return config
