"""Invalidation helpers for mutation handlers.

Call these right after a write commits so readers see the change before the
TTL runs out. All of them scan the cache, which is fine at the configured
sizes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .cache import NamespacedCache
from .keys import SEPARATOR

# Sub-namespaces holding per-student reward data, keyed by student id
STUDENT_REWARD_NAMESPACES = ("points", "achievements", "level")

# Namespaces whose keys start with a class id
CLASS_NAMESPACES = ("class-data", "class-metrics")

LEADERBOARD_NAMESPACE = "leaderboard"


def invalidate_entity(cache: NamespacedCache, entity_id: str, namespaces: Iterable[str]) -> int:
    """Delete the entry keyed exactly ``entity_id`` in each namespace."""
    return sum(1 for namespace in namespaces if cache.delete(namespace, str(entity_id)))


def invalidate_student_rewards(cache: NamespacedCache, student_id: str) -> int:
    return invalidate_entity(cache, student_id, STUDENT_REWARD_NAMESPACES)


def invalidate_leaderboard(cache: NamespacedCache, entity_type: str, entity_id: str) -> int:
    """Drop every cached period and page of one leaderboard."""
    prefix = re.escape(f"{entity_type}{SEPARATOR}{entity_id}{SEPARATOR}")
    return cache.delete_pattern(f"^{prefix}", namespace=LEADERBOARD_NAMESPACE)


def invalidate_class(cache: NamespacedCache, class_id: str) -> int:
    """Drop every cached view of one class, whatever filters it was read with."""
    pattern = re.compile(f"^{re.escape(str(class_id))}(?:{SEPARATOR}|$)")
    return sum(cache.delete_pattern(pattern, namespace=ns) for ns in CLASS_NAMESPACES)


def invalidate_matching(
    cache: NamespacedCache,
    pattern: str | re.Pattern[str],
    namespace: str | None = None,
) -> int:
    return cache.delete_pattern(pattern, namespace=namespace)


__all__ = [
    "CLASS_NAMESPACES",
    "LEADERBOARD_NAMESPACE",
    "STUDENT_REWARD_NAMESPACES",
    "invalidate_class",
    "invalidate_entity",
    "invalidate_leaderboard",
    "invalidate_matching",
    "invalidate_student_rewards",
]
