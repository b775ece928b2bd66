"""User Schemas — account create/update bodies."""

from pydantic import BaseModel, Field

from portal.core.domain_types import Role
from portal.schemas.common import PatchModel


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    role: Role
    is_active: bool = True


class UserUpdate(PatchModel):
    username: str | None = Field(None, min_length=3, max_length=100)
    role: Role | None = None
    is_active: bool | None = None
