"""Rotating egress proxy pool loaded from a plain-text endpoint list."""

import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

PROXY_PATTERN = re.compile(r"^https?://[^:]+:\d+$")


def is_valid_proxy(endpoint: str) -> bool:
    """Check that an endpoint looks like protocol://host:port."""
    endpoint = (endpoint or "").strip()
    if not endpoint:
        return False
    return bool(PROXY_PATTERN.match(endpoint))


@dataclass
class ProxyEntry:
    """Proxy endpoint with consecutive-failure tracking."""

    url: str
    fail_count: int = 0
    success_count: int = 0
    last_failed: Optional[datetime] = None

    def mark_failed(self) -> None:
        self.fail_count += 1
        self.last_failed = datetime.now(timezone.utc)

    def mark_success(self) -> None:
        self.success_count += 1
        self.fail_count = 0

    def is_excluded(self, max_failures: int, cooldown: timedelta) -> bool:
        """Whether this proxy is on cooldown after too many failures."""
        if max_failures <= 0 or self.fail_count < max_failures:
            return False
        if self.last_failed is None:
            return False
        return datetime.now(timezone.utc) - self.last_failed <= cooldown


class ProxyPool:
    """Immutable set of proxy endpoints with stateless random selection.

    Membership is fixed at construction. Selection is uniformly random
    over all endpoints unless ``max_failures`` is positive, in which case
    endpoints with that many consecutive failures sit out a cooldown.
    An empty pool is not an error: ``select_random`` returns None and the
    caller fetches directly.
    """

    def __init__(
        self,
        endpoints: Iterable[str] = (),
        max_failures: int = 0,
        cooldown_minutes: int = 10,
    ):
        """Initialize proxy pool.

        Args:
            endpoints: Raw endpoint strings; invalid ones are dropped
            max_failures: Consecutive failures before exclusion (0 disables)
            cooldown_minutes: Minutes an excluded proxy sits out
        """
        valid = [e.strip() for e in endpoints if is_valid_proxy(e)]
        self._entries = tuple(ProxyEntry(url=url) for url in valid)
        self.max_failures = max_failures
        self.cooldown = timedelta(minutes=cooldown_minutes)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        max_failures: int = 0,
        cooldown_minutes: int = 10,
    ) -> "ProxyPool":
        """Load endpoints from a file, one per line.

        A missing or unreadable file yields an empty pool.
        """
        proxy_file = Path(path)
        if not proxy_file.exists():
            logger.warning("proxy_file_not_found", file_path=str(proxy_file))
            return cls([], max_failures, cooldown_minutes)

        try:
            lines = proxy_file.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error("proxy_file_read_failed", file_path=str(proxy_file), error=str(e))
            return cls([], max_failures, cooldown_minutes)

        pool = cls(lines, max_failures, cooldown_minutes)
        skipped = sum(1 for line in lines if line.strip()) - pool.count()
        if skipped:
            logger.warning("invalid_proxies_skipped", file_path=str(proxy_file), count=skipped)
        if not pool.count():
            logger.warning("no_proxies_found", file_path=str(proxy_file))
        else:
            logger.info("proxy_pool_loaded", file_path=str(proxy_file), count=pool.count())
        return pool

    def select_random(self) -> Optional[str]:
        """Pick a proxy endpoint, or None when the pool is empty."""
        if not self._entries:
            return None

        available = [
            p for p in self._entries if not p.is_excluded(self.max_failures, self.cooldown)
        ]
        if not available:
            # Every proxy is cooling down; start over rather than go proxyless
            for p in self._entries:
                p.fail_count = 0
            available = list(self._entries)

        proxy = random.choice(available)
        logger.debug("proxy_selected", proxy=proxy.url)
        return proxy.url

    def all(self) -> List[str]:
        return [p.url for p in self._entries]

    def count(self) -> int:
        return len(self._entries)

    def mark_failed(self, proxy_url: str) -> None:
        for p in self._entries:
            if p.url == proxy_url:
                p.mark_failed()
                break

    def mark_success(self, proxy_url: str) -> None:
        for p in self._entries:
            if p.url == proxy_url:
                p.mark_success()
                break

    def get_stats(self) -> dict:
        """Get statistics about proxy pool health."""
        excluded = sum(
            1 for p in self._entries if p.is_excluded(self.max_failures, self.cooldown)
        )
        return {
            "total_proxies": self.count(),
            "excluded_proxies": excluded,
            "failure_tracking": self.max_failures > 0,
        }
