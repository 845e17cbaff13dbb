"""Short-lived cache of merged year-over-year results, keyed by request key."""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from merchant_insights.schemas.metrics import MetricsResult


@dataclass(frozen=True)
class RequestCacheEntry:
    key: str
    data: MetricsResult
    fetched_at: float


class ResponseCache:
    """TTL cache with an injectable clock.

    The clock returns seconds as a float; ``time.monotonic`` by default.
    Entries older than ``ttl_seconds`` are treated as absent and are evicted
    on the next lookup of that key or the next ``put``.
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, RequestCacheEntry] = {}

    def get(self, key: str) -> Optional[RequestCacheEntry]:
        """Fresh entry for *key*, or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self.is_fresh(entry):
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, data: MetricsResult) -> RequestCacheEntry:
        self.prune()
        entry = RequestCacheEntry(key=key, data=data, fetched_at=self._clock())
        self._entries[key] = entry
        return entry

    def is_fresh(self, entry: RequestCacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl_seconds

    def prune(self) -> int:
        """Evict every expired entry; returns how many were dropped."""
        stale = [k for k, e in self._entries.items() if not self.is_fresh(e)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one entry, or everything when *key* is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
