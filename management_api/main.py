"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, management_api.api, management_api.observability, management_api.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from management_api.api import api_router
from management_api.api.deps import get_service_cache
from management_api.boundary.db.connection import create_all_tables
from management_api.configs import Settings, get_settings
from management_api.observability.logger import configure_logging
from management_api.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


def warn_on_default_cursor_secret(settings: Settings) -> bool:
    """
    Log a warning when cursors would be signed with the default key.

    Returns:
        bool: True when the default key is in use
    """
    if not settings.documents.uses_default_cursor_secret:
        return False
    logger.warning(
        "DOCUMENTS_CURSOR_SECRET is not set; pagination cursors are signed with the default key",
        extra={"environment": settings.environment},
    )
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging and the SQL schema on startup; stops the deletion
    reconciler on shutdown.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")
    warn_on_default_cursor_secret(settings)

    if settings.documents.record_store_backend.lower() == "sql":
        try:
            await create_all_tables()
            logger.info("Document tables ready")
        except Exception as e:
            logger.exception(
                "Failed to initialize document tables",
                extra={"error": str(e)},
            )
            raise

    yield

    # Shutdown
    await get_service_cache().shutdown()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Document Management API",
        description="Document lifecycle tracking with status-partitioned listing",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "management_api.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
