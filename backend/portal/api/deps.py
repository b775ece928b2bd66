"""Route Dependencies — bearer authentication, role gates and pagination params.

Invariants:
    - Missing bearer token → 401 "Access token required"
    - Bad, expired or refresh-type token, or unknown/inactive user → 401
    - Authenticated user outside the allowed roles → 403
    - page >= 1, 1 <= limit <= MAX_LIMIT (FastAPI validates, 400 on violation)
"""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import get_settings
from portal.core.domain_types import Role
from portal.core.errors import AuthenticationError, ErrorContext, PermissionDeniedError
from portal.core.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Pagination
from portal.infrastructure.database import get_db
from portal.infrastructure.security import decode_token, extract_user_id
from portal.models import User

bearer_scheme = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    db: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    claims = decode_token(credentials.credentials, get_settings().jwt_secret)
    user = await db.get(User, extract_user_id(claims))
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid or expired token")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: Role):
    """Dependency factory: allow only users whose role is in roles."""
    allowed = {role.value for role in roles}

    async def checker(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise PermissionDeniedError(context=ErrorContext(
                user_id=user.id,
                debug_info={"role": user.role, "allowed": sorted(allowed)},
            ))
        return user

    return checker


AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]
AdminOrTeacher = Annotated[User, Depends(require_roles(Role.ADMIN, Role.TEACHER))]
TeacherUser = Annotated[User, Depends(require_roles(Role.TEACHER))]


def get_pagination(
    page: Annotated[int, Query(ge=1)] = DEFAULT_PAGE,
    limit: Annotated[int, Query(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
) -> Pagination:
    return Pagination(page, limit)


PageParams = Annotated[Pagination, Depends(get_pagination)]
