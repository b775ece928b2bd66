"""STMADB Portal API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, all under /api
    - Global error handlers map PortalError → envelope responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event
    - Error handlers live in api.error_handlers and are registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.api.error_handlers import register_error_handlers
from portal.api.routes import (
    attendance, auth, classes, health, journals, schedules, students, subjects,
    teachers, users,
)
from portal.config import get_settings
from portal.core.envelope import success
from portal.infrastructure import database
from portal.infrastructure.observability import log_requests, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    if database.db_manager is None:
        database.init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    logger.info(f"{settings.app_name} started ({settings.environment})")
    yield
    if database.db_manager is not None:
        await database.db_manager.dispose()
    logger.info(f"{settings.app_name} shutting down")


settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(teachers.router)
app.include_router(students.router)
app.include_router(classes.router)
app.include_router(subjects.router)
app.include_router(schedules.router)
app.include_router(journals.router)
app.include_router(attendance.router)

register_error_handlers(app)


@app.get("/api", tags=["meta"])
async def api_info():
    return success("STMADB Portal API", {
        "name": settings.app_name,
        "version": settings.app_version,
        "endpoints": [
            "/api/auth", "/api/users", "/api/teachers", "/api/students",
            "/api/classes", "/api/subjects", "/api/schedules", "/api/journals",
            "/api/attendance", "/api/health",
        ],
    })
