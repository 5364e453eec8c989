"""
Pydantic models for cache configuration and statistics.

CachePolicy is validated once at startup so misconfiguration fails fast,
CacheStats is the snapshot returned by caches and the admin endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field, computed_field

EvictionPolicy = Literal["expiry", "lru"]


class CachePolicy(BaseModel):
    """
    Tuning for one cache purpose.

    Attributes:
        max_entries: Upper bound on live entries held by the cache
        default_ttl_seconds: TTL used when a caller does not pass one
        eviction: "expiry" drops the soonest-to-expire ~10% in bulk,
            "lru" drops the single least recently read entry
        sweep_interval_seconds: Period of the background expiry sweep
        evict_fraction: Share of entries removed per bulk eviction
    """

    max_entries: int = Field(default=1000, gt=0)
    default_ttl_seconds: float = Field(default=300.0, gt=0)
    eviction: EvictionPolicy = "expiry"
    sweep_interval_seconds: float = Field(default=60.0, gt=0)
    evict_fraction: float = Field(default=0.1, gt=0, le=1)


class CacheStats(BaseModel):
    """
    Point-in-time counters for a single cache.

    Attributes:
        hits: Reads served from a fresh entry
        misses: Reads that found nothing fresh
        sets: Entries written
        evictions: Entries dropped to respect max_entries
        expirations: Stale entries removed lazily or by the sweep
        deduplicated: get_or_set calls that joined an in-flight compute
        compute_errors: Computes that raised
        size: Entries currently stored (stale ones included until removed)
        max_entries: Configured bound
        pending: Computes currently in flight
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0
    deduplicated: int = 0
    compute_errors: int = 0
    size: int = 0
    max_entries: int = 0
    pending: int = 0

    @computed_field
    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


__all__ = ["CachePolicy", "CacheStats", "EvictionPolicy"]
