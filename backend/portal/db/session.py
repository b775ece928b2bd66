"""Script Sessions — engine and session factory for code running outside FastAPI.

Invariants:
    - The engine is disposed when the context exits, even if the body raises
    - Sessions keep attributes after commit, same as DatabaseSessionManager
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine


@asynccontextmanager
async def script_sessions(database_url: str) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Yield a session factory bound to a short-lived engine for database_url."""
    engine = create_async_engine(database_url, echo=False)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()
