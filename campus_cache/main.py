"""
FastAPI application entry point for the campus cache service.

Initializes logging, builds the cache registry during the lifespan and
registers the admin routes. The lifespan is the only place caches are
started and destroyed, so sweep tasks never outlive the application.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config_loader import config
from .registry import CacheRegistry
from .routes import router

# Configure logging for the application
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """
    FastAPI lifespan handler.

    Builds the registry (unless one was injected on ``app.state``), starts
    the sweepers on entry and destroys every cache on exit.
    """
    registry = getattr(app.state, "cache_registry", None)
    if registry is None:
        registry = CacheRegistry.from_config(config)
        app.state.cache_registry = registry
    logger.info("Starting campus cache service")
    logger.info(f"Server: {config.server_host}:{config.server_port}")
    registry.start()
    try:
        yield
    finally:
        registry.shutdown()
        logger.info("Shutting down campus cache service")


def create_app(registry: CacheRegistry | None = None) -> FastAPI:
    app = FastAPI(
        title="Campus Cache",
        version="1.0.0",
        description="Namespaced TTL cache registry for the campus backend",
        lifespan=app_lifespan,
    )
    if registry is not None:
        app.state.cache_registry = registry
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level.lower(),
    )
