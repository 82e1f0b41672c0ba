"""User Directory API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map UserManagementError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and schema migrated in the lifespan, before any request;
      a failed migration aborts startup (the app never serves a half-migrated store)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from usermanagement.api.error_handlers import register_error_handlers
from usermanagement.api.routes import health, users
from usermanagement.config import get_settings
from usermanagement.infrastructure.database import close_db, init_db
from usermanagement.infrastructure.observability import setup_logging
from usermanagement.infrastructure.schema_migrator import SchemaMigrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.migrate_on_startup:
        await SchemaMigrator(manager.engine).run()
    logger.info("User Directory API started")
    yield
    await close_db()
    logger.info("User Directory API shutting down")


app = FastAPI(
    title="User Directory API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)

register_error_handlers(app)
