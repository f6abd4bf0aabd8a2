"""Redis-backed review cache.

Values are stored as JSON with ``SETEX``; pattern deletion walks the keyspace
with ``SCAN`` so a large cache never blocks the server the way ``KEYS`` would.
"""

import json
from typing import Any

import redis

from product_reviews.cache.port import ReviewCache


class RedisReviewCache(ReviewCache):
    def __init__(self, url: str, socket_timeout: float = 1.0) -> None:
        self.client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    def get(self, key: str) -> Any | None:
        raw = self.client.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any, ttl: int) -> None:
        self.client.setex(key, ttl, json.dumps(value, default=str))

    def delete(self, key: str) -> int:
        return self.client.delete(key)

    def delete_pattern(self, pattern: str) -> int:
        keys = list(self.client.scan_iter(match=pattern, count=500))
        if not keys:
            return 0
        return self.client.delete(*keys)
