"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from discovinyl import __version__
from discovinyl.api.exception_handlers import register_exception_handlers
from discovinyl.api.routers import api_router
from discovinyl.config import Settings, get_settings
from discovinyl.infrastructure.lifecycle import lifespan
from discovinyl.infrastructure.observability import RequestLoggingMiddleware
from discovinyl.infrastructure.observability.middleware import CORRELATION_HEADER

logger = logging.getLogger(__name__)


# Hey future me - settings go onto app.state BEFORE the lifespan runs so tests can hand in a
# Settings object and skip .env entirely. Middleware order: Starlette runs the LAST added
# middleware first, so CORS wraps request logging and preflight OPTIONS never hits the routes.
def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="REST backend for the Disco vinyl collection",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_HEADER],
    )

    register_exception_handlers(app, expose_errors=not settings.is_production)
    app.include_router(api_router, prefix="/api")
    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "discovinyl.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
