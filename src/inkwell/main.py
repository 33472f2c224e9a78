"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inkwell.config import Settings, get_settings
from inkwell.core.context import RequestContextMiddleware, RequestIdMiddleware
from inkwell.core.database import Database
from inkwell.core.errors import register_exception_handlers
from inkwell.core.logging import RequestLoggingMiddleware, configure_logging
from inkwell.modules.rbac.seeding import seed_built_ins


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Connects the database handle and seeds the built-in catalog on
    startup, disconnects on shutdown.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )
    await database.connect()

    if settings.seed_on_startup:
        try:
            async with database.session() as session:
                await seed_built_ins(session)
                await session.commit()
        except Exception as e:
            logger.warning("built_in_seed_failed", error=str(e))

    yield

    logger.info("application_shutdown")
    await database.disconnect()


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use, defaults to the cached environment settings
        database: Database handle, defaults to one built from the settings

    Returns:
        Configured FastAPI application instance.
    """
    from inkwell.api import get_api_router  # noqa: PLC0415

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant content platform backend",
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )
    app.state.settings = settings
    app.state.database = database or Database(
        settings.async_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID", "X-User-ID", "X-Tenant-ID"],
    )

    # Middleware added last runs first: request id, then identity, then logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(get_api_router())

    return app
