"""Application lifespan: startup and shutdown.

The service container is built in create_app() (so tests can use the app
without running the lifespan); this only checks optional connections at
startup and closes every client on shutdown.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI

from aigency.core.config import get_settings
from aigency.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Ping Redis when it backs the scope lock, yield, then close the container."""
    settings = get_settings()
    container = app.state.container

    # ---- Startup ----
    if container.redis_client is not None:
        try:
            await container.redis_client.ping()
            logger.info("Redis connected: %s:%s", settings.redis_host, settings.redis_port)
        except (redis.ConnectionError, redis.TimeoutError) as e:
            # Propagation then fails per request and the refresh sweep repairs it later.
            logger.warning("Redis ping failed: %s. Scope lock will fail until it is reachable.", e)
    logger.info(
        "%s %s started (store=%s, scope lock=%s)",
        settings.app_name,
        settings.app_version,
        settings.database_backend,
        settings.scope_lock_backend,
    )

    yield

    # ---- Shutdown ----
    await container.aclose()
    logger.info("Shutdown complete")
