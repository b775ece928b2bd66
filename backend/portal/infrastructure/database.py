"""Database Session Manager — async engine, request sessions and readiness ping.

Invariants:
    - A session that raises is rolled back before the error leaves the context
    - PortalError propagates unchanged; raw SQLAlchemy errors never reach a route
    - Unique violations → DataIntegrityError (409), foreign-key violations →
      BusinessRuleError "Invalid input data" (400), anything else → DatabaseError (503)

Design Decisions:
    - Module-level db_manager set by the FastAPI lifespan, read by get_db and the
      readiness probe
    - expire_on_commit=False: services serialize rows after commit without a reload
    - Pool sizing only applies to server databases; sqlite (tests) keeps its own pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from portal.core.errors import BusinessRuleError, DatabaseError, DataIntegrityError, PortalError

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY" in str(orig).upper()


def translate_db_error(exc: SQLAlchemyError) -> PortalError:
    """Map a SQLAlchemy failure onto the portal error hierarchy."""
    if isinstance(exc, IntegrityError):
        if _is_foreign_key_violation(exc):
            logger.info(f"Foreign key violation: {exc.orig}")
            return BusinessRuleError("Invalid input data")
        logger.info(f"Unique constraint violation: {exc.orig}")
        return DataIntegrityError()
    if isinstance(exc, OperationalError):
        logger.error(f"Database unavailable: {exc}")
        return DatabaseError("Connection or operational error", "execute")
    logger.error(f"Database error: {exc}")
    return DatabaseError("Database operation failed", "query")


class DatabaseSessionManager:
    """Owns the engine and hands out one AsyncSession per request."""

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        options = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options.update(pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600)
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except PortalError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            raise translate_db_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session; False on any failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self):
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
