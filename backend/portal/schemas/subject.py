"""Subject Schemas."""

from pydantic import BaseModel, Field

from portal.schemas.common import PatchModel


class SubjectCreate(BaseModel):
    subject_code: str = Field(min_length=1, max_length=20)
    subject_name: str = Field(min_length=1, max_length=255)


class SubjectUpdate(PatchModel):
    subject_code: str | None = Field(None, min_length=1, max_length=20)
    subject_name: str | None = Field(None, min_length=1, max_length=255)
