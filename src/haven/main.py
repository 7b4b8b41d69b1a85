"""
Haven FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling middleware and exception handlers
- Router registration
- Metrics endpoint

This is the production entry point for the Haven portal backend.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from haven.config import get_settings
from haven.config.logging_config import configure_logging, get_logger
from haven.infrastructure.database import get_db_manager
from haven.infrastructure.metrics import metrics_router, update_system_info
from haven.infrastructure.monitoring import init_sentry
from haven.services.bootstrap import seed_database
from haven.api.v1.router import api_router
from haven.api.middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers

# Initialize settings and logging
settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of all services.
    """
    logger.info(
        "Starting Haven application",
        env=settings.env,
        version="0.1.0",
    )

    try:
        init_sentry(settings.sentry_dsn, environment=settings.env)
        update_system_info(settings.env)

        db = get_db_manager()
        await db.initialize()
        logger.info("Database connection initialized")

        if settings.seed_on_startup:
            async with db.session() as session:
                await seed_database(session)

        yield

    finally:
        logger.info("Shutting down Haven application")

        db = get_db_manager()
        await db.close()

        logger.info("Haven application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Haven API",
        description="Clinical record and communication portal - Backend API",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add error handling middleware
    app.add_middleware(ErrorHandlerMiddleware)
    register_exception_handlers(app)

    # Register API routers
    app.include_router(
        api_router,
        prefix=f"/api/{settings.api_version}",
    )
    app.include_router(metrics_router)

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint - basic info."""
        return {
            "name": "Haven API",
            "version": "0.1.0",
            "status": "operational",
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "haven.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
