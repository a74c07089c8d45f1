"""FastAPI application entry point.

Wiring only: logging, service container, lifespan, exception handlers,
middleware, routers. See aigency.core.container for the backends.

Settings are loaded inside create_app() so tests can set env (and clear
the get_settings cache) before calling it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from aigency.api.v1 import api_router
from aigency.core.config import get_settings
from aigency.core.container import ServiceContainer, build_container
from aigency.core.exception_handlers import register_exception_handlers
from aigency.core.lifespan import create_lifespan
from aigency.core.limiter import limiter
from aigency.middleware import (
    CorrelationIDMiddleware,
    RequestIDMiddleware,
    TimeoutMiddleware,
)
from aigency.shared.telemetry.logging import setup_logging


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        container: Pre-built services (tests); built from settings when omitted.
    """
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.container = container if container is not None else build_container(settings)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # First added = innermost. Order from outside: timeout -> request ID -> correlation ID -> CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIDMiddleware, header_name=settings.correlation_id_header)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
