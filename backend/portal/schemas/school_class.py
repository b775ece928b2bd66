"""Class Schemas — class create/update and student assignment bodies."""

from pydantic import BaseModel, Field

from portal.schemas.common import EntityId, PatchModel


class ClassCreate(BaseModel):
    class_name: str = Field(min_length=1, max_length=100)
    grade_level: int = Field(ge=1, le=12)
    major: str | None = Field(None, max_length=100)
    homeroom_teacher_id: EntityId | None = None
    counselor_id: EntityId | None = None


class ClassUpdate(PatchModel):
    class_name: str | None = Field(None, min_length=1, max_length=100)
    grade_level: int | None = Field(None, ge=1, le=12)
    major: str | None = Field(None, max_length=100)
    homeroom_teacher_id: EntityId | None = None
    counselor_id: EntityId | None = None


class AssignStudentRequest(BaseModel):
    student_id: EntityId
