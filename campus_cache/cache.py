"""
Namespaced in-memory TTL cache with request deduplication.

One NamespacedCache holds the entries of one logical purpose (leaderboards,
student data, procedure results, ...). Entries live under composite
``namespace:key`` keys so a whole namespace can be dropped after a write.

Everything here assumes a single asyncio event loop. Store operations are
synchronous and never yield, so they cannot interleave with each other; the
only suspension point is ``get_or_set`` awaiting a compute. Between looking
up the pending registry and registering a new compute there must be no
``await``, otherwise concurrent misses would each start their own compute.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import re
import time
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar, Union

from .keys import namespace_prefix, namespaced
from .models import CachePolicy, CacheStats
from .service_base import BaseService
from .store import CacheEntry, build_store

T = TypeVar("T")

Clock = Callable[[], float]
Compute = Callable[[], Union[Awaitable[T], T]]


def _consume_outcome(task: asyncio.Task) -> None:
    # Marks the exception retrieved when every waiter was cancelled
    if not task.cancelled():
        task.exception()


class NamespacedCache(BaseService, Generic[T]):
    """
    Process-local TTL cache partitioned by namespace.

    Reads never raise: a missing or expired entry is simply absent, and an
    expired entry is removed when it is touched. A background sweep (see
    ``start``) removes expired entries nobody reads again.

    Values are stored by reference. Callers own what they get back and must
    not mutate shared results in place.
    """

    def __init__(
        self,
        name: str = "default",
        policy: CachePolicy | None = None,
        *,
        clock: Clock = time.monotonic,
        logger: logging.Logger | None = None,
    ):
        super().__init__(logger=logger)
        self.name = name
        self.policy = policy or CachePolicy()
        self._clock = clock
        self._store = build_store(self.policy)
        self._pending: dict[str, asyncio.Task[T]] = {}
        self._sequence = itertools.count()
        self._sweeper: asyncio.Task[None] | None = None
        self._destroyed = False
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._expirations = 0
        self._deduplicated = 0
        self._compute_errors = 0

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, size={len(self)}, "
            f"max_entries={self.policy.max_entries}, eviction={self.policy.eviction!r})"
        )

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def set(self, namespace: str, key: str, value: T, ttl: float | None = None) -> None:
        """
        Store ``value`` for ``ttl`` seconds, replacing any existing entry.

        Args:
            namespace: Logical partition, e.g. "leaderboard"
            key: Caller key encoding every parameter of the result
            value: Result to cache (kept by reference)
            ttl: Seconds until expiry; the policy default when None
        """
        ttl_seconds = self.policy.default_ttl_seconds if ttl is None else ttl
        now = self._clock()
        self._store[namespaced(namespace, key)] = CacheEntry(
            value=value,
            expires_at=now + ttl_seconds,
            last_accessed=now,
            sequence=next(self._sequence),
        )
        self._sets += 1

    def get(self, namespace: str, key: str, default: T | None = None) -> T | None:
        """Return the fresh value for ``(namespace, key)`` or ``default``."""
        entry = self._lookup(namespaced(namespace, key))
        if entry is None:
            self._misses += 1
            return default
        self._hits += 1
        return entry.value

    def has(self, namespace: str, key: str) -> bool:
        return self._lookup(namespaced(namespace, key), touch=False) is not None

    def delete(self, namespace: str, key: str) -> bool:
        """Remove one entry. Returns False when there was nothing to remove."""
        return self._store.pop(namespaced(namespace, key), None) is not None

    def size(self) -> int:
        return len(self._store)

    def keys(self, namespace: str | None = None) -> list[str]:
        """
        Fresh keys currently stored.

        With a namespace, returns the caller keys inside it; without one,
        returns full composite keys.
        """
        now = self._clock()
        live = [k for k, entry in self._store.items() if not entry.is_expired(now)]
        if namespace is None:
            return live
        prefix = namespace_prefix(namespace)
        return [k[len(prefix):] for k in live if k.startswith(prefix)]

    def _lookup(self, composite: str, *, touch: bool = True) -> CacheEntry[T] | None:
        entry = self._store.get(composite)
        if entry is None:
            return None
        now = self._clock()
        if entry.is_expired(now):
            del self._store[composite]
            self._expirations += 1
            return None
        if touch:
            entry.touch(now, next(self._sequence))
        return entry

    # ------------------------------------------------------------------
    # Memoized fetch
    # ------------------------------------------------------------------

    async def get_or_set(
        self,
        namespace: str,
        key: str,
        compute: Compute[T],
        ttl: float | None = None,
    ) -> T:
        """
        Return the cached value, computing and storing it on a miss.

        Concurrent misses for the same key share one compute: the first
        caller starts it, later callers await the same task. If the compute
        raises, nothing is stored and every waiter gets the same exception;
        the next call starts a fresh compute.

        The compute runs as its own task and is shielded from waiters, so
        cancelling a caller never cancels the compute.

        Args:
            namespace: Logical partition
            key: Caller key
            compute: Zero-argument callable returning the value or an awaitable
            ttl: Seconds until expiry; the policy default when None
        """
        composite = namespaced(namespace, key)
        entry = self._lookup(composite)
        if entry is not None:
            self._hits += 1
            return entry.value
        self._misses += 1

        # No await between the registry check and the insert below.
        task = self._pending.get(composite)
        if task is not None:
            self._deduplicated += 1
            self.logger.debug("Joining in-flight compute for %s in cache %s", composite, self.name)
            return await asyncio.shield(task)

        task = asyncio.get_running_loop().create_task(self._compute(namespace, key, compute, ttl))
        task.add_done_callback(_consume_outcome)
        self._pending[composite] = task
        return await asyncio.shield(task)

    async def _compute(
        self,
        namespace: str,
        key: str,
        compute: Compute[T],
        ttl: float | None,
    ) -> T:
        composite = namespaced(namespace, key)
        try:
            result = compute()
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self._compute_errors += 1
            self.logger.debug("Compute for %s in cache %s failed: %s", composite, self.name, exc)
            raise
        else:
            if not self._destroyed:
                self.set(namespace, key, result, ttl)
            return result
        finally:
            self._pending.pop(composite, None)

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def delete_namespace(self, namespace: str) -> int:
        """Remove every entry under ``namespace``. Returns the count removed."""
        prefix = namespace_prefix(namespace)
        return self._remove([k for k in self._store if k.startswith(prefix)])

    def delete_pattern(self, pattern: str | re.Pattern[str], namespace: str | None = None) -> int:
        """
        Remove entries whose key matches ``pattern`` (``re.search``).

        Inside a namespace the pattern sees caller keys only; across all
        namespaces it sees the full ``namespace:key`` composite.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        if namespace is None:
            victims = [k for k in self._store if regex.search(k)]
        else:
            prefix = namespace_prefix(namespace)
            victims = [
                k for k in self._store if k.startswith(prefix) and regex.search(k[len(prefix):])
            ]
        return self._remove(victims)

    def clear(self) -> None:
        self._store.clear()

    def _remove(self, composites: list[str]) -> int:
        for composite in composites:
            del self._store[composite]
        if composites:
            self.logger.debug("Invalidated %s entries in cache %s", len(composites), self.name)
        return len(composites)

    # ------------------------------------------------------------------
    # Expiry sweep and lifecycle
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Remove every expired entry. Returns the count removed."""
        now = self._clock()
        expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
        for composite in expired:
            del self._store[composite]
        self._expirations += len(expired)
        return len(expired)

    def start(self) -> None:
        """
        Start the periodic sweep on the running event loop.

        Calling it again while the sweep runs is a no-op. Must be paired with
        ``destroy`` at shutdown.
        """
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._destroyed = False
        self._sweeper = asyncio.get_running_loop().create_task(
            self._sweep_forever(), name=f"cache-sweep:{self.name}"
        )

    async def _sweep_forever(self) -> None:
        interval = self.policy.sweep_interval_seconds
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            if removed:
                self.logger.debug("Swept %s expired entries from cache %s", removed, self.name)

    def destroy(self) -> None:
        """
        Stop the sweep and drop all entries. Safe to call repeatedly.

        Computes already in flight still finish and reach their waiters, but
        their results are no longer stored.
        """
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is not None and not sweeper.done():
            sweeper.cancel()
        self._destroyed = True
        self.clear()

    @property
    def sweeping(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def stats(self) -> CacheStats:
        return CacheStats(
            hits=self._hits,
            misses=self._misses,
            sets=self._sets,
            evictions=self._store.evictions,
            expirations=self._expirations,
            deduplicated=self._deduplicated,
            compute_errors=self._compute_errors,
            size=len(self._store),
            max_entries=self.policy.max_entries,
            pending=len(self._pending),
        )


__all__ = ["NamespacedCache", "Clock", "Compute"]
