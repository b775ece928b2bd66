"""Attendance Schemas — record, bulk and update bodies.

Invariants:
    - status is Masuk or Pulang
    - timestamp is optional on staff-recorded bodies; absent means "now" (server clock)
    - Self-service bodies carry no timestamp: the server always stamps them
    - A timestamp without an offset is wall-clock time in the school time zone
    - a bulk item names exactly the person its type requires
"""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, model_validator

from portal.core.domain_types import AttendanceStatus
from portal.schemas.common import EntityId, PatchModel


class AttendanceFields(BaseModel):
    status: AttendanceStatus
    location_coordinates: str | None = Field(None, max_length=100)
    photo_path: str | None = Field(None, max_length=255)


class AttendanceRecordRequest(AttendanceFields):
    timestamp: datetime | None = None


class StudentAttendanceRequest(AttendanceRecordRequest):
    schedule_id: EntityId = Field(
        validation_alias=AliasChoices("schedule_id", "scheduleId"),
    )


class MyAttendanceRequest(AttendanceFields):
    schedule_id: EntityId | None = Field(
        None, validation_alias=AliasChoices("schedule_id", "scheduleId"),
    )


class BulkAttendanceItem(AttendanceRecordRequest):
    type: Literal["teacher", "student"]
    teacher_id: EntityId | None = None
    student_id: EntityId | None = None
    schedule_id: EntityId | None = Field(
        None, validation_alias=AliasChoices("schedule_id", "scheduleId"),
    )

    @model_validator(mode="after")
    def check_person(self) -> "BulkAttendanceItem":
        if self.type == "teacher" and self.teacher_id is None:
            raise ValueError("teacher_id is required for teacher attendance")
        if self.type == "student" and (self.student_id is None or self.schedule_id is None):
            raise ValueError("student_id and schedule_id are required for student attendance")
        return self


class BulkAttendanceRequest(BaseModel):
    records: list[BulkAttendanceItem] = Field(min_length=1, max_length=500)


class AttendanceUpdate(PatchModel):
    status: AttendanceStatus | None = None
    timestamp: datetime | None = None
    location_coordinates: str | None = Field(None, max_length=100)
    photo_path: str | None = Field(None, max_length=255)
