"""Cache key builders.

Keys must encode every parameter that changes a result, so two different
queries can never share an entry. Builders here keep that deterministic:
parameters are sorted, and unset filters render as ``all``.
"""

from __future__ import annotations

import json
from typing import Any

SEPARATOR = ":"


def namespaced(namespace: str, key: str) -> str:
    """Composite key under which an entry is stored."""
    return f"{namespace}{SEPARATOR}{key}"


def namespace_prefix(namespace: str) -> str:
    return f"{namespace}{SEPARATOR}"


def query_key(prefix: str, params: dict[str, Any]) -> str:
    """
    Key for an arbitrary parameter set.

    JSON with sorted keys makes ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}``
    land on the same entry. Values JSON cannot encode fall back to ``str``.
    """
    return f"{prefix}_{json.dumps(params, sort_keys=True, default=str, separators=(',', ':'))}"


def leaderboard_key(
    entity_type: str,
    entity_id: str,
    period: str,
    limit: int,
    offset: int,
) -> str:
    # entity first so invalidate_leaderboard can prefix-match one board
    return SEPARATOR.join(
        [entity_type, str(entity_id), period.lower(), str(limit), str(offset)]
    )


def class_key(class_id: str, **filters: Any) -> str:
    parts = [str(class_id)]
    for name in sorted(filters):
        value = filters[name]
        parts.append(f"{name}={'all' if value is None else value}")
    return SEPARATOR.join(parts)


__all__ = [
    "SEPARATOR",
    "namespaced",
    "namespace_prefix",
    "query_key",
    "leaderboard_key",
    "class_key",
]
