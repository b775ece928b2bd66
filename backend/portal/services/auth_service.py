"""Auth Service — login, token refresh, password change and profile lookup.

Invariants:
    - Unknown username, inactive account and wrong password are indistinguishable
      to the client (all "Invalid credentials", 401)
    - Successful login stamps last_login
    - Refresh only accepts refresh-type tokens and re-checks the account is active
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.config import get_settings
from portal.core.errors import AuthenticationError, BusinessRuleError
from portal.db.base import utcnow
from portal.infrastructure.security import (
    REFRESH, create_access_token, create_refresh_token, decode_token,
    extract_user_id, hash_password, token_payload, verify_password,
)
from portal.models import Student, User
from portal.services.queries import find_one, get_or_404
from portal.services.serializers import (
    serialize_student, serialize_teacher, serialize_user,
)

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> dict:
    settings = get_settings()
    payload = token_payload(user)
    return {
        "accessToken": create_access_token(
            payload, settings.jwt_secret, settings.jwt_access_expires_minutes,
        ),
        "refreshToken": create_refresh_token(
            payload, settings.jwt_refresh_secret, settings.jwt_refresh_expires_days,
        ),
    }


async def login(db: AsyncSession, username: str, password: str) -> dict:
    user = await find_one(
        db,
        select(User)
        .where(User.username == username)
        .options(selectinload(User.teacher), selectinload(User.student)),
    )
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        logger.warning(f"Login failed for username: {username}")
        raise AuthenticationError("Invalid credentials")

    user.last_login = utcnow()
    await db.commit()
    logger.info(f"User {username} logged in", extra={"user_id": user.id})
    return {"user": serialize_user(user), "tokens": issue_tokens(user)}


async def refresh(db: AsyncSession, refresh_token: str) -> dict:
    claims = decode_token(refresh_token, get_settings().jwt_refresh_secret, REFRESH)
    user = await db.get(User, extract_user_id(claims))
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid or expired refresh token")
    return issue_tokens(user)


async def change_password(
    db: AsyncSession, user_id: int, current_password: str, new_password: str,
) -> None:
    user = await get_or_404(db, User, user_id, "User")
    if not verify_password(current_password, user.password_hash):
        raise BusinessRuleError("Current password is incorrect")
    user.password_hash = hash_password(new_password, get_settings().bcrypt_rounds)
    await db.commit()
    logger.info("Password changed", extra={"user_id": user_id})


async def get_profile(db: AsyncSession, user_id: int) -> dict:
    user = await get_or_404(
        db, User, user_id, "User",
        selectinload(User.teacher),
        selectinload(User.student).selectinload(Student.current_class),
    )
    profile = serialize_user(user)
    if user.teacher is not None:
        profile["teacher"] = serialize_teacher(user.teacher)
    if user.student is not None:
        profile["student"] = serialize_student(user.student)
    return profile
