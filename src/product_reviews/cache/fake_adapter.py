"""In-process review cache for development and testing.

Behaves like the Redis adapter (JSON round-trip, TTL expiry, glob patterns)
without a server. ``fail_with`` makes every call raise, to exercise the
degrade-on-cache-failure paths.
"""

import fnmatch
import json
import time
from typing import Any

from product_reviews.cache.port import ReviewCache


class InMemoryReviewCache(ReviewCache):
    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}
        self.fail_with: Exception | None = None
        self.deleted_patterns: list[str] = []

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _purge_expired(self) -> None:
        now = time.monotonic()
        for key in [k for k, (_, expires) in self._entries.items() if expires <= now]:
            del self._entries[key]

    def get(self, key: str) -> Any | None:
        self._check()
        self._purge_expired()
        entry = self._entries.get(key)
        return json.loads(entry[0]) if entry else None

    def set(self, key: str, value: Any, ttl: int) -> None:
        self._check()
        self._entries[key] = (json.dumps(value, default=str), time.monotonic() + ttl)

    def delete(self, key: str) -> int:
        self._check()
        return 1 if self._entries.pop(key, None) is not None else 0

    def delete_pattern(self, pattern: str) -> int:
        self._check()
        self.deleted_patterns.append(pattern)
        matches = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
        for key in matches:
            del self._entries[key]
        return len(matches)

    def keys(self) -> list[str]:
        self._purge_expired()
        return sorted(self._entries)

    def ttl_of(self, key: str) -> float | None:
        entry = self._entries.get(key)
        return entry[1] - time.monotonic() if entry else None
