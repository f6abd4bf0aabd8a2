"""Cache invalidation coordinator.

Cached reads are addressed as ``review-service:{scope}:{entity_id}`` or, for
list views, ``review-service:{scope}:{entity_id}:{params}`` where ``params``
is the base64 of the sorted JSON filter/sort parameters. Invalidating an
entity removes the plain key and every parameterized variant.

Cache trouble never fails a write: ``invalidate`` and ``read_through`` log
the error and carry on, leaving staleness bounded by the entry TTL.
"""

import base64
import json
from collections.abc import Callable
from enum import Enum
from typing import Any

import structlog

from product_reviews.cache import get_cache
from product_reviews.utils.settings import setting

logger = structlog.get_logger(__name__)

KEY_PREFIX = "review-service"


class CacheScope(Enum):
    PRODUCT_REVIEWS = "product-reviews"
    USER_REVIEWS = "user-reviews"
    RATING = "rating"


_TTL_SETTINGS = {
    CacheScope.PRODUCT_REVIEWS: ("PRODUCT_REVIEWS_CACHE_TTL_SECONDS", 300),
    CacheScope.USER_REVIEWS: ("USER_REVIEWS_CACHE_TTL_SECONDS", 600),
    CacheScope.RATING: ("CACHE_TTL_SECONDS", 3600),
}


def ttl_for(scope: CacheScope) -> int:
    name, default = _TTL_SETTINGS[scope]
    return int(setting(name, default))


def encode_params(params: dict | None) -> str:
    """Stable encoding of list-view parameters, independent of key order."""
    normalized = {k: v for k, v in sorted((params or {}).items()) if v is not None}
    return base64.urlsafe_b64encode(json.dumps(normalized, sort_keys=True).encode()).decode()


def cache_key(scope: CacheScope, entity_id: str, params: dict | None = None) -> str:
    key = f"{KEY_PREFIX}:{scope.value}:{entity_id}"
    if params is not None:
        key = f"{key}:{encode_params(params)}"
    return key


def invalidate(scope: CacheScope, entity_id, correlation_id: str | None = None) -> int:
    """Evict the entity's cached reads in one scope. Returns keys removed, 0 on failure."""
    if not entity_id:
        return 0

    base = cache_key(scope, str(entity_id))
    try:
        cache = get_cache()
        removed = cache.delete(base) + cache.delete_pattern(f"{base}:*")
    except Exception as exc:
        logger.warning(
            "Cache invalidation failed",
            scope=scope.value,
            entity_id=str(entity_id),
            correlation_id=correlation_id,
            error=str(exc),
        )
        return 0

    logger.debug(
        "Cache invalidated",
        scope=scope.value,
        entity_id=str(entity_id),
        removed=removed,
        correlation_id=correlation_id,
    )
    return removed


def invalidate_product(product_id, correlation_id: str | None = None) -> None:
    invalidate(CacheScope.PRODUCT_REVIEWS, product_id, correlation_id)
    invalidate(CacheScope.RATING, product_id, correlation_id)


def read_through(
    scope: CacheScope,
    entity_id: str,
    loader: Callable[[], Any],
    params: dict | None = None,
) -> Any:
    """Serve a cached read, loading and caching it on a miss.

    ``loader`` must return something JSON-serializable. A broken cache falls
    back to the loader.
    """
    key = cache_key(scope, entity_id, params)
    cache = None
    try:
        cache = get_cache()
        cached = cache.get(key)
        if cached is not None:
            return cached
    except Exception as exc:
        logger.warning("Cache read failed", key=key, error=str(exc))

    value = loader()

    if cache is not None:
        try:
            cache.set(key, value, ttl_for(scope))
        except Exception as exc:
            logger.warning("Cache write failed", key=key, error=str(exc))
    return value
