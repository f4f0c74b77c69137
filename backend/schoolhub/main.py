"""SchoolHub API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SchoolHubError → {"error": ...} JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolhub import __version__
from schoolhub.api.error_handlers import register_error_handlers
from schoolhub.api.routes import (
    class_subjects, classes, directory, fee_structures, health, invoices,
    parent_children, parent_students, sections, students,
)
from schoolhub.config import get_settings
from schoolhub.infrastructure import database
from schoolhub.infrastructure.observability import (
    access_log_middleware, setup_logging,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout_seconds,
        pool_recycle=settings.database_pool_recycle_seconds,
    )
    logger.info("SchoolHub API started")
    yield
    logger.info("SchoolHub API shutting down")
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(title="SchoolHub API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(access_log_middleware)

app.include_router(health.router)
app.include_router(classes.router)
app.include_router(class_subjects.router)
app.include_router(sections.router)
app.include_router(fee_structures.router)
app.include_router(invoices.router)
app.include_router(directory.router)
app.include_router(students.router)
app.include_router(parent_children.router)
app.include_router(parent_students.router)

register_error_handlers(app)
