"""FastAPI application factory.

create_app() returns a configured FastAPI instance. The lifespan checks
the database at startup and disposes the engine at shutdown. Middleware,
CORS, exception handlers, routers and the uploads mount are all
registered here; each concern lives in its own module.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from estatehub import __version__
from estatehub.api import api_router
from estatehub.config import Settings, get_settings
from estatehub.db.engine import Database
from estatehub.errors import register_exception_handlers
from estatehub.middleware.request_id import RequestIdMiddleware
from estatehub.services.storage import ImageStorage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "estatehub.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    try:
        await app.state.database.ping()
        logger.info("estatehub.database_connected")
    except Exception as e:
        # Requests will fail until the database is up; /api/health reports it
        logger.warning("estatehub.database_unavailable", error=str(e))

    ImageStorage(
        upload_dir=settings.upload_dir,
        max_bytes=settings.max_upload_bytes,
        max_files=settings.max_upload_files,
    ).ensure_dir()

    yield

    logger.info("estatehub.shutdown")
    await app.state.database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="EstateHub",
        description="Real-estate listings backend: properties, inquiries and viewings",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings.database_url, echo=settings.debug)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app, expose_internal_errors=settings.is_development)

    app.include_router(api_router)

    # The directory is created at startup or on the first upload
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


# Default app instance (used by uvicorn: estatehub.main:app)
app = create_app()
