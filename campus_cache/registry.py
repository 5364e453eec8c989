"""Registry holding one cache per logical purpose.

Built once at startup and handed to whatever needs a cache, so nothing
relies on lazily created module globals and shutdown has a single owner.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from .cache import Clock, NamespacedCache
from .config_loader import Config
from .models import CachePolicy, CacheStats
from .service_base import BaseService


class CacheRegistry(BaseService):
    """Owns the caches of one process and their sweep tasks."""

    def __init__(
        self,
        policies: Mapping[str, CachePolicy],
        *,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ):
        super().__init__(logger=logger)
        extra = {} if clock is None else {"clock": clock}
        self._caches: dict[str, NamespacedCache[Any]] = {
            purpose: NamespacedCache(purpose, policy, logger=logger, **extra)
            for purpose, policy in policies.items()
        }
        self._closed = False

    @classmethod
    def from_config(cls, config: Config, logger: logging.Logger | None = None) -> CacheRegistry:
        return cls(config.cache_policies, logger=logger)

    def get(self, purpose: str) -> NamespacedCache[Any]:
        """
        Cache for ``purpose``.

        Raises:
            KeyError: If no cache is configured for that purpose
        """
        try:
            return self._caches[purpose]
        except KeyError:
            raise KeyError(f"No cache configured for purpose {purpose!r}") from None

    __getitem__ = get

    def __contains__(self, purpose: object) -> bool:
        return purpose in self._caches

    def __iter__(self) -> Iterator[str]:
        return iter(self._caches)

    def __len__(self) -> int:
        return len(self._caches)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start every cache's sweep. Needs a running event loop."""
        for cache in self._caches.values():
            cache.start()
        self._closed = False
        self.logger.info("Started %s caches: %s", len(self._caches), ", ".join(self._caches))

    def shutdown(self) -> None:
        """Destroy every cache. Safe to call more than once."""
        if self._closed:
            return
        for cache in self._caches.values():
            cache.destroy()
        self._closed = True
        self.logger.info("Cache registry shut down")

    def stats(self) -> dict[str, CacheStats]:
        return {purpose: cache.stats() for purpose, cache in self._caches.items()}


__all__ = ["CacheRegistry"]
