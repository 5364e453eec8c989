"""
FastAPI admin routes for the cache registry.

Thin handlers over CacheRegistry: health, statistics and manual flushes.
The registry is injected from ``app.state`` so tests can swap it out.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from .cache import NamespacedCache
from .registry import CacheRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_registry(request: Request) -> CacheRegistry:
    return request.app.state.cache_registry


def _cache_or_404(registry: CacheRegistry, purpose: str) -> NamespacedCache[Any]:
    try:
        return registry.get(purpose)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown cache: {purpose}") from None


@router.get("/health")
async def health() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Dictionary with status and service name
    """
    return {"status": "ok", "service": "campus-cache"}


@router.get("/cache/stats")
async def cache_stats(registry: CacheRegistry = Depends(get_registry)) -> dict[str, Any]:
    """Counters for every configured cache, keyed by purpose."""
    return {purpose: stats.model_dump() for purpose, stats in registry.stats().items()}


@router.delete("/cache/{purpose}")
async def flush_cache(purpose: str, registry: CacheRegistry = Depends(get_registry)) -> dict[str, Any]:
    """
    Drop every entry of one cache.

    Raises:
        HTTPException: 404 when the purpose is not configured
    """
    cache = _cache_or_404(registry, purpose)
    removed = cache.size()
    cache.clear()
    logger.info("Flushed cache %s (%s entries)", purpose, removed)
    return {"purpose": purpose, "removed": removed}


@router.delete("/cache/{purpose}/namespaces/{namespace}")
async def flush_namespace(
    purpose: str,
    namespace: str,
    registry: CacheRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """
    Drop every entry under one namespace of one cache.

    Raises:
        HTTPException: 404 when the purpose is not configured
    """
    cache = _cache_or_404(registry, purpose)
    removed = cache.delete_namespace(namespace)
    logger.info("Flushed namespace %s of cache %s (%s entries)", namespace, purpose, removed)
    return {"purpose": purpose, "namespace": namespace, "removed": removed}
