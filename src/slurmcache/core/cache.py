"""
Throttled single-entry payload cache.

Guarantees the wrapped fetcher runs at most once per poll window no
matter how many threads ask for data at the same time.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

from slurmcache.core.logging import get_logger

if TYPE_CHECKING:
    from slurmcache.core.config.models import CacheConfig
    from slurmcache.core.fetchers.base import Fetcher


logger = get_logger("cache")

DEFAULT_POLL_LIMIT = 1.0


class ThrottledCache:
    """Thread-safe cache holding the most recent fetcher payload.

    Features:
    - Serves the cached payload while it is younger than ``poll_limit``
    - Refreshes synchronously in the calling thread once stale
    - One lock around decide-and-refresh, so concurrent callers wait
      for an in-flight refresh instead of starting their own
    - Failed refreshes leave the previous payload and timestamp intact

    Usage:
        cache = ThrottledCache(CommandFetcher("squeue", "--json"), poll_limit=5)
        payload = cache.fetch()
    """

    def __init__(self, fetcher: Fetcher, poll_limit: float = DEFAULT_POLL_LIMIT):
        """Initialize the cache.

        Args:
            fetcher: Source used for every refresh
            poll_limit: Seconds a payload stays fresh
        """
        if not poll_limit >= 0:
            raise ValueError(f"poll_limit must be a non-negative number, got {poll_limit!r}")
        self._lock = threading.Lock()
        self._fetcher = fetcher
        self._poll_limit = float(poll_limit)
        self._payload = b""
        self._refreshed_at: float | None = None
        self._refresh_count = 0

    @classmethod
    def from_config(cls, config: CacheConfig, fetcher: Fetcher) -> "ThrottledCache":
        """Build a cache from validated settings."""
        return cls(fetcher, poll_limit=config.poll_limit)

    @property
    def fetcher(self) -> Fetcher:
        return self._fetcher

    @property
    def poll_limit(self) -> float:
        return self._poll_limit

    @property
    def refreshed_at(self) -> float | None:
        """Monotonic time of the last successful refresh."""
        return self._refreshed_at

    @property
    def refresh_count(self) -> int:
        """Number of successful refreshes so far."""
        return self._refresh_count

    @property
    def age(self) -> float | None:
        """Seconds since the last successful refresh, None if never."""
        refreshed_at = self._refreshed_at
        if refreshed_at is None:
            return None
        return time.monotonic() - refreshed_at

    def _is_fresh(self, now: float) -> bool:
        if not self._payload or self._refreshed_at is None:
            return False
        return now - self._refreshed_at < self._poll_limit

    def fetch(self, fetcher: Fetcher | None = None) -> bytes:
        """Return the cached payload, refreshing it first if stale.

        Args:
            fetcher: Source for this call only; defaults to the configured one

        Returns:
            Payload bytes

        Raises:
            Exception: Whatever the fetcher raises, unchanged
        """
        source = fetcher if fetcher is not None else self._fetcher

        with self._lock:
            now = time.monotonic()
            if self._is_fresh(now):
                logger.debug(
                    "Serving cached payload",
                    extra={"age": round(now - self._refreshed_at, 3)},
                )
                return self._payload

            payload = source.fetch()

            self._payload = payload
            self._refreshed_at = time.monotonic()
            self._refresh_count += 1
            logger.debug("Refreshed payload (%d bytes)", len(payload))
            return payload

    def __repr__(self) -> str:
        return f"ThrottledCache({self._fetcher!r}, poll_limit={self._poll_limit})"
