"""User Service — account CRUD, activation toggle and role statistics.

Invariants:
    - username unique (checked here, enforced by the table)
    - Passwords hashed with bcrypt before they reach the session
    - A user with a teacher or student profile cannot be deleted
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.config import get_settings
from portal.core.domain_types import Role
from portal.core.errors import BusinessRuleError, DuplicateResourceError
from portal.core.pagination import Pagination
from portal.infrastructure.security import hash_password
from portal.models import User
from portal.schemas.user import UserCreate
from portal.services.queries import contains_any, find_one, get_or_404, paginate
from portal.services.serializers import serialize_user

logger = logging.getLogger(__name__)

_PROFILES = (selectinload(User.teacher), selectinload(User.student))


async def _check_username_free(db: AsyncSession, username: str, exclude_id: int | None = None):
    stmt = select(User.id).where(User.username == username)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError("Username already exists", "username")


async def list_users(
    db: AsyncSession,
    pagination: Pagination,
    search: str | None = None,
    role: Role | None = None,
    is_active: bool | None = None,
) -> tuple[list[dict], Pagination]:
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    if search:
        stmt = stmt.where(contains_any(search, User.username))
    if role:
        stmt = stmt.where(User.role == role.value)
    if is_active is not None:
        stmt = stmt.where(User.is_active == is_active)
    users, page = await paginate(db, stmt, pagination, *_PROFILES)
    return [serialize_user(u) for u in users], page


async def get_user(db: AsyncSession, user_id: int) -> dict:
    return serialize_user(await get_or_404(db, User, user_id, "User", *_PROFILES))


async def create_user(db: AsyncSession, data: UserCreate) -> dict:
    await _check_username_free(db, data.username)
    user = User(
        username=data.username,
        password_hash=hash_password(data.password, get_settings().bcrypt_rounds),
        role=data.role.value,
        is_active=data.is_active,
    )
    db.add(user)
    await db.commit()
    logger.info(f"User created: {user.username}", extra={"user_id": user.id})
    return await get_user(db, user.id)


async def update_user(db: AsyncSession, user_id: int, patch: dict) -> dict:
    user = await get_or_404(db, User, user_id, "User")
    if "username" in patch and patch["username"] != user.username:
        await _check_username_free(db, patch["username"], exclude_id=user_id)
    for field, value in patch.items():
        if value is None:
            continue
        setattr(user, field, value.value if isinstance(value, Role) else value)
    await db.commit()
    return await get_user(db, user_id)


async def delete_user(db: AsyncSession, user_id: int) -> None:
    user = await get_or_404(db, User, user_id, "User", *_PROFILES)
    if user.teacher is not None or user.student is not None:
        raise BusinessRuleError("Cannot delete user with associated teacher or student profile")
    await db.delete(user)
    await db.commit()
    logger.info("User deleted", extra={"user_id": user_id})


async def toggle_user_status(db: AsyncSession, user_id: int) -> dict:
    user = await get_or_404(db, User, user_id, "User")
    user.is_active = not user.is_active
    await db.commit()
    return await get_user(db, user_id)


async def user_stats(db: AsyncSession) -> dict:
    total = await db.scalar(select(func.count(User.id))) or 0
    active = await db.scalar(select(func.count(User.id)).where(User.is_active.is_(True))) or 0
    by_role_rows = (
        await db.execute(select(User.role, func.count(User.id)).group_by(User.role))
    ).all()
    by_role = {role.value: 0 for role in Role}
    by_role.update({role: n for role, n in by_role_rows})
    return {
        "total": total,
        "active": active,
        "inactive": total - active,
        "byRole": by_role,
    }
