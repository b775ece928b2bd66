"""Query Helpers — lookup-or-404, paginated fetch and text search.

Invariants:
    - get_or_404 always refreshes the identity-map copy (populate_existing), so
      a row re-fetched after a write carries the requested relationships
    - paginate counts over the filtered statement without loader options
"""

from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import ResourceNotFoundError
from portal.core.pagination import Pagination


async def get_or_404(
    db: AsyncSession, model, entity_id: int, resource_type: str, *options,
):
    stmt = (
        select(model)
        .where(model.id == entity_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    obj = (await db.execute(stmt)).scalar_one_or_none()
    if obj is None:
        raise ResourceNotFoundError(resource_type, entity_id)
    return obj


async def find_one(db: AsyncSession, stmt: Select) -> Any | None:
    return (await db.execute(stmt.limit(1))).scalars().first()


async def count(db: AsyncSession, stmt: Select) -> int:
    return await db.scalar(
        select(func.count()).select_from(stmt.order_by(None).subquery()),
    ) or 0


async def paginate(
    db: AsyncSession, stmt: Select, pagination: Pagination, *options,
) -> tuple[list, Pagination]:
    """Run stmt for one page; return (rows, pagination with total)."""
    total = await count(db, stmt)
    page_stmt = stmt.options(*options).offset(pagination.offset).limit(pagination.limit)
    rows = (await db.execute(page_stmt)).scalars().all()
    return list(rows), pagination.with_total(total)


def contains_any(term: str, *columns):
    """Case-insensitive substring match on any of columns."""
    pattern = f"%{term.strip()}%"
    return or_(*(column.ilike(pattern) for column in columns))
