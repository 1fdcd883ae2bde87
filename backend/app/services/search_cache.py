"""Search Result Cache — bounded, version-stamped cache of search result pages.

Invariants:
    - Fingerprint = SHA-256 of sorted-key JSON of (payload, user_id, version):
      key order in the request body never changes the fingerprint
    - Entries expire after ttl_seconds; at most max_entries are kept, least
      recently used evicted first
    - invalidate() bumps the version and drops every entry, so no page computed
      before a write is ever served after it
    - Every public method holds the lock; safe under concurrent requests

Design Decisions:
    - Owned by the application (built in the lifespan, stored on app.state) and
      injected with a dependency, not a module-level singleton
    - Stored pages are plain JSON-ready dicts; get() returns a shallow copy so
      callers can add the cached flag without touching the stored page
    - clock is injectable for TTL tests
"""

import hashlib
import json
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable
from uuid import UUID

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: dict
    expires_at: float


class SearchResultCache:
    """TTL + LRU cache for search result pages."""

    def __init__(
        self,
        ttl_seconds: float = 180.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()
        self._version = 0
        self._hits = 0
        self._misses = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def fingerprint(self, payload: dict, user_id: UUID | str) -> str:
        """Canonical cache key for a request payload and user."""
        with self._lock:
            version = self._version
        canonical = json.dumps(
            {"query": payload, "user_id": str(user_id), "version": version},
            sort_keys=True, separators=(",", ":"), default=str,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def get(self, key: str) -> dict | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return dict(entry.value)

    def put(self, key: str, value: dict) -> None:
        with self._lock:
            self._entries[key] = _Entry(value, self._clock() + self._ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def invalidate(self) -> int:
        """Bump the data version and drop all entries. Returns the new version."""
        with self._lock:
            self._version += 1
            self._entries.clear()
            version = self._version
        logger.debug("Search cache invalidated", extra={"cache_version": version})
        return version

    def clear(self) -> int:
        """Drop all entries. Returns how many were removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self._max_entries,
                "version": self._version,
                "hits": self._hits,
                "misses": self._misses,
            }
