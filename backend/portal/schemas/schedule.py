"""Schedule Schemas — weekly slot bodies with time parsing and ordering checks.

Invariants:
    - start_time/end_time accepted as "HH:MM" or "HH:MM:SS"
    - start_time < end_time whenever both are present in one body
    - day_of_week is one of Senin..Minggu

Design Decisions:
    - Times parsed with core.serialization.parse_time: one format rule for
      bodies and responses
    - Update ordering against the stored row is checked in the service after merge
"""

from datetime import time

from pydantic import Field, field_validator, model_validator

from portal.core.domain_types import DayOfWeek
from portal.core.serialization import parse_time
from portal.schemas.common import EntityId, PatchModel


class _SlotBody(PatchModel):
    """Shared time handling for every schedule body."""

    @field_validator("start_time", "end_time", mode="before", check_fields=False)
    @classmethod
    def parse_times(cls, v):
        if isinstance(v, str):
            return parse_time(v)
        return v

    @model_validator(mode="after")
    def check_time_order(self):
        start = getattr(self, "start_time", None)
        end = getattr(self, "end_time", None)
        if start is not None and end is not None and start >= end:
            raise ValueError("End time must be after start time")
        return self


class ScheduleCreate(_SlotBody):
    class_id: EntityId
    subject_id: EntityId
    teacher_id: EntityId
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    room: str | None = Field(None, max_length=50)


class ScheduleUpdate(_SlotBody):
    class_id: EntityId | None = None
    subject_id: EntityId | None = None
    teacher_id: EntityId | None = None
    day_of_week: DayOfWeek | None = None
    start_time: time | None = None
    end_time: time | None = None
    room: str | None = Field(None, max_length=50)


class ConflictCheckRequest(_SlotBody):
    """Candidate slot for a dry-run conflict check (subject is irrelevant)."""
    class_id: EntityId
    teacher_id: EntityId
    subject_id: EntityId | None = None
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    room: str | None = Field(None, max_length=50)
