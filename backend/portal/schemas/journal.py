"""Teaching Journal Schemas."""

from datetime import date

from pydantic import BaseModel, Field

from portal.schemas.common import EntityId, PatchModel


class JournalCreate(BaseModel):
    schedule_id: EntityId
    teaching_date: date
    topic: str = Field(min_length=1, max_length=5000)
    student_attendance_summary: str | None = Field(None, max_length=5000)
    notes: str | None = Field(None, max_length=5000)


class JournalUpdate(PatchModel):
    teaching_date: date | None = None
    topic: str | None = Field(None, min_length=1, max_length=5000)
    student_attendance_summary: str | None = Field(None, max_length=5000)
    notes: str | None = Field(None, max_length=5000)
