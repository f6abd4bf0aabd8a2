"""Review cache port (abstract interface).

The cache is a read-through accelerator, never authoritative. Adapters may
raise on any call; callers go through ``product_reviews.cache.coordinator``,
which logs and swallows those failures.
"""

from abc import ABC, abstractmethod
from typing import Any


class ReviewCache(ABC):
    """Key-value store with TTLs and pattern deletion."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the decoded value, or None on a miss."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a JSON-serializable value for ``ttl`` seconds."""
        ...

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete one key. Returns the number of keys removed."""
        ...

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the number removed."""
        ...
