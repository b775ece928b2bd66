"""User Routes — account management (admin only)."""

from fastapi import APIRouter, status

from portal.api.deps import AdminUser, DbSession, PageParams
from portal.core.domain_types import Role
from portal.core.envelope import success
from portal.schemas.user import UserCreate, UserUpdate
from portal.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/stats")
async def user_stats(_: AdminUser, db: DbSession):
    return success("User statistics retrieved successfully", await user_service.user_stats(db))


@router.get("")
async def list_users(
    _: AdminUser,
    db: DbSession,
    pagination: PageParams,
    search: str | None = None,
    role: Role | None = None,
    is_active: bool | None = None,
):
    users, page = await user_service.list_users(db, pagination, search, role, is_active)
    return success("Users retrieved successfully", users, page.to_meta())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate, _: AdminUser, db: DbSession):
    return success("User created successfully", await user_service.create_user(db, body))


@router.get("/{user_id}")
async def get_user(user_id: int, _: AdminUser, db: DbSession):
    return success("User retrieved successfully", await user_service.get_user(db, user_id))


@router.put("/{user_id}")
async def update_user(user_id: int, body: UserUpdate, _: AdminUser, db: DbSession):
    user = await user_service.update_user(db, user_id, body.to_patch())
    return success("User updated successfully", user)


@router.delete("/{user_id}")
async def delete_user(user_id: int, _: AdminUser, db: DbSession):
    await user_service.delete_user(db, user_id)
    return success("User deleted successfully")


@router.patch("/{user_id}/toggle-status")
async def toggle_user_status(user_id: int, _: AdminUser, db: DbSession):
    user = await user_service.toggle_user_status(db, user_id)
    state = "activated" if user["is_active"] else "deactivated"
    return success(f"User {state} successfully", user)
