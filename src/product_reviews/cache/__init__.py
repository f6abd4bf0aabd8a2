"""Review cache factory.

Provides get_cache() / set_cache() to swap implementations:
- InMemoryReviewCache for development and testing (no CACHE_URL)
- RedisReviewCache when CACHE_URL is configured
"""

from product_reviews.cache.fake_adapter import InMemoryReviewCache
from product_reviews.cache.port import ReviewCache
from product_reviews.cache.redis_adapter import RedisReviewCache
from product_reviews.utils.settings import setting

_current_cache: ReviewCache | None = None


def get_cache() -> ReviewCache:
    """Return the active cache, building it from domain config on first use."""
    global _current_cache
    if _current_cache is None:
        url = setting("CACHE_URL")
        if url:
            _current_cache = RedisReviewCache(url, socket_timeout=float(setting("CACHE_SOCKET_TIMEOUT_SECONDS", 1.0)))
        else:
            _current_cache = InMemoryReviewCache()
    return _current_cache


def set_cache(cache: ReviewCache) -> None:
    """Override the active cache (useful for tests)."""
    global _current_cache
    _current_cache = cache


def reset_cache() -> None:
    global _current_cache
    _current_cache = None
