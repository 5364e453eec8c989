"""
Category-based caching for request handlers.

Handlers pick a category ("class", "leaderboard", ...) instead of choosing a
namespace and TTL themselves. Caching is only an optimization here: an
unknown category logs a warning and runs the compute uncached instead of
failing the request.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple, TypeVar

from .cache import Compute, NamespacedCache
from .invalidation import LEADERBOARD_NAMESPACE
from .keys import class_key, leaderboard_key, query_key
from .service_base import BaseService

T = TypeVar("T")

MINUTE = 60.0
HOUR = 60 * MINUTE

ALL_TIME_PERIOD = "all_time"


class CachePreset(NamedTuple):
    namespace: str
    ttl_seconds: float


# Frequently changing per-user data gets short TTLs, expensive aggregates
# get long ones.
CATEGORY_PRESETS: dict[str, CachePreset] = {
    "class": CachePreset("class-data", 5 * MINUTE),
    "class-metrics": CachePreset("class-metrics", 2 * MINUTE),
    "teacher-analytics": CachePreset("analytics", 5 * MINUTE),
    "student-points": CachePreset("points", 2 * MINUTE),
    "student-achievements": CachePreset("achievements", 2 * MINUTE),
    "student-level": CachePreset("level", 2 * MINUTE),
    "topics": CachePreset("topics", 30 * MINUTE),
    "leaderboard": CachePreset(LEADERBOARD_NAMESPACE, 5 * MINUTE),
    "leaderboard-all-time": CachePreset(LEADERBOARD_NAMESPACE, 6 * HOUR),
}


class ProcedureCache(BaseService):
    """Wraps a NamespacedCache with the category presets above."""

    def __init__(
        self,
        cache: NamespacedCache[Any],
        presets: dict[str, CachePreset] | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(logger=logger)
        self.cache = cache
        self.presets = dict(CATEGORY_PRESETS if presets is None else presets)

    async def call(self, category: str, key: str, compute: Compute[T]) -> T:
        preset = self.presets.get(category)
        if preset is None:
            self.logger.warning("Unknown cache category %r, bypassing cache", category)
            result = compute()
            if inspect.isawaitable(result):
                result = await result
            return result
        return await self.cache.get_or_set(preset.namespace, key, compute, preset.ttl_seconds)

    async def cache_class_by_id(self, class_id: str, compute: Compute[T], **filters: Any) -> T:
        return await self.call("class", class_key(class_id, **filters), compute)

    async def cache_class_metrics(self, class_id: str, compute: Compute[T]) -> T:
        return await self.call("class-metrics", class_key(class_id), compute)

    async def cache_leaderboard(
        self,
        entity_type: str,
        entity_id: str,
        period: str,
        limit: int,
        offset: int,
        compute: Compute[T],
    ) -> T:
        category = "leaderboard-all-time" if period.lower() == ALL_TIME_PERIOD else "leaderboard"
        key = leaderboard_key(entity_type, entity_id, period, limit, offset)
        return await self.call(category, key, compute)


def cached(
    cache: NamespacedCache[Any],
    namespace: str,
    ttl: float | None = None,
    key: Callable[..., str] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Memoize an async function through ``cache.get_or_set``.

    The key defaults to the function's qualified name plus its arguments.
    Pass ``key`` for methods, otherwise ``self`` ends up in the key.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            if key is not None:
                cache_key = key(*args, **kwargs)
            else:
                cache_key = query_key(func.__qualname__, {"args": list(args), "kwargs": kwargs})
            return await cache.get_or_set(namespace, cache_key, lambda: func(*args, **kwargs), ttl)

        return wrapper

    return decorator


__all__ = ["CATEGORY_PRESETS", "CachePreset", "ProcedureCache", "cached"]
