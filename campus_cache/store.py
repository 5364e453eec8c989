"""
Size-bounded entry stores, one per eviction policy.

Both stores subclass cachetools.Cache and only override ``popitem``:
cachetools keeps the size accounting and calls ``popitem`` whenever an
insert would push the store past ``maxsize``, so the bound holds no matter
which policy picks the victims. Expiry itself is handled by NamespacedCache;
the stores never look at the clock.
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from cachetools import Cache

from .models import CachePolicy

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A stored value plus the bookkeeping eviction needs."""

    value: T
    expires_at: float
    last_accessed: float
    # Monotonic tie-breaker for reads that share a clock reading
    sequence: int = 0
    access_count: int = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def touch(self, now: float, sequence: int) -> None:
        self.last_accessed = now
        self.sequence = sequence
        self.access_count += 1


class EntryStore(Cache):
    """Base for the policy stores; counts what it evicts."""

    def __init__(self, maxsize: int):
        super().__init__(maxsize=maxsize)
        self.evictions = 0

    def clear(self) -> None:
        # MutableMapping.clear would route through popitem and count evictions
        for key in list(self):
            del self[key]

    def _victim_error(self) -> KeyError:
        return KeyError(f"{type(self).__name__} is empty")


class ExpiryOrderedStore(EntryStore):
    """
    Bulk eviction by expiry time.

    When full, drops ``ceil(evict_fraction * size)`` entries (at least one)
    with the earliest ``expires_at``. Expired entries therefore go first.
    This is not LRU: a hot entry that expires soon can still be evicted.
    """

    def __init__(self, maxsize: int, evict_fraction: float = 0.1):
        super().__init__(maxsize=maxsize)
        self.evict_fraction = evict_fraction

    def popitem(self) -> tuple[str, CacheEntry[Any]]:
        if not self:
            raise self._victim_error()
        batch = max(1, math.ceil(len(self) * self.evict_fraction))
        victims = heapq.nsmallest(batch, self.items(), key=lambda item: item[1].expires_at)
        for key, _ in victims:
            del self[key]
        self.evictions += len(victims)
        return victims[0]


class LeastRecentlyUsedStore(EntryStore):
    """Single-entry eviction of the least recently read entry."""

    def popitem(self) -> tuple[str, CacheEntry[Any]]:
        try:
            key = min(self, key=lambda k: (self[k].last_accessed, self[k].sequence))
        except ValueError:
            raise self._victim_error() from None
        entry = self[key]
        del self[key]
        self.evictions += 1
        return key, entry


def build_store(policy: CachePolicy) -> EntryStore:
    """Create the store matching ``policy.eviction``."""
    if policy.eviction == "lru":
        return LeastRecentlyUsedStore(maxsize=policy.max_entries)
    return ExpiryOrderedStore(maxsize=policy.max_entries, evict_fraction=policy.evict_fraction)


__all__ = [
    "CacheEntry",
    "EntryStore",
    "ExpiryOrderedStore",
    "LeastRecentlyUsedStore",
    "build_store",
]
