"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import AsyncConnectionPool

from src.adapters.repository.postgres import PostgresAdminRepository, run_migrations
from src.api.dependencies import build_email_sender
from src.api.errors import register_exception_handlers
from src.api.routes import admin_router, public_router
from src.config.settings import Settings, get_settings
from src.domain.auth import AdminAuthService
from src.domain.exceptions import ConflictError

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "registration",
        "description": "Student registration and payment proof upload",
    },
    {
        "name": "admin",
        "description": "Admin login and registration review (approve / reject)",
    },
]


async def bootstrap_admin(settings: Settings, pool: AsyncConnectionPool) -> None:
    """Create the configured bootstrap admin if it does not exist yet."""
    if not (settings.bootstrap_admin_username and settings.bootstrap_admin_password):
        return

    auth = AdminAuthService(
        repository=PostgresAdminRepository(pool),
        secret_key=settings.secret_key,
        bcrypt_cost=settings.bcrypt_cost,
    )
    try:
        await auth.register_admin(settings.bootstrap_admin_username, settings.bootstrap_admin_password)
    except ConflictError:
        logger.info("Bootstrap admin %s already exists", settings.bootstrap_admin_username)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Loads settings once (fails fast on missing DATABASE_URL / SECRET_KEY)
    - Creates database connection pool and runs migrations on startup
    - Selects the mail adapter and creates the bootstrap admin
    - Closes connection pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    # Create connection pool with explicit sizing
    pool = AsyncConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=False,
    )
    await pool.open()

    logger.info("Running database migrations...")
    await run_migrations(pool)

    # Store shared state for dependency injection
    app.state.settings = settings
    app.state.pool = pool
    app.state.email_sender = build_email_sender(settings)
    logger.info("Mail backend: %s", settings.mail_backend)

    await bootstrap_admin(settings, pool)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="eventreg",
    description="Event Registration API - Student submissions with admin approval workflow",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)
app.include_router(public_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    async with pool.connection() as conn:
        await conn.execute("SELECT 1")

    return {"status": "healthy"}


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured port."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
