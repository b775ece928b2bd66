"""Auth Routes — login, token refresh, logout, password change and profile.

Invariants:
    - login and refresh are the only unauthenticated endpoints besides health
    - logout is stateless: tokens are not revoked, the client discards them
"""

import logging

from fastapi import APIRouter

from portal.api.deps import CurrentUser, DbSession
from portal.core.envelope import success
from portal.schemas.auth import ChangePasswordRequest, LoginRequest, RefreshRequest
from portal.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, db: DbSession):
    return success("Login successful", await auth_service.login(db, body.username, body.password))


@router.post("/refresh")
async def refresh(body: RefreshRequest, db: DbSession):
    tokens = await auth_service.refresh(db, body.refresh_token)
    return success("Token refreshed successfully", {"tokens": tokens})


@router.post("/logout")
async def logout(user: CurrentUser):
    logger.info("User logged out", extra={"user_id": user.id})
    return success("Logout successful")


@router.put("/change-password")
async def change_password(body: ChangePasswordRequest, user: CurrentUser, db: DbSession):
    await auth_service.change_password(db, user.id, body.current_password, body.new_password)
    return success("Password changed successfully")


@router.get("/profile")
async def profile(user: CurrentUser, db: DbSession):
    return success("Profile retrieved successfully", await auth_service.get_profile(db, user.id))
