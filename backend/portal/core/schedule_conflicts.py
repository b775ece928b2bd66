"""Schedule Conflict Detection — pure overlap rules for weekly timetable slots.

Invariants:
    - Intervals are half-open: [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1
    - Back-to-back slots (e1 == s2) never conflict
    - Only slots on the same day_of_week are compared
    - Check order is teacher → class → room; the first hit is reported
    - Room conflicts only apply when the candidate names a non-blank room
    - The slot whose id equals exclude_id is ignored (the row being updated)

Design Decisions:
    - Pure function over already-loaded slots; the shell decides which rows to load
      and holds the transaction that makes check + write atomic
"""

from dataclasses import dataclass
from datetime import time
from typing import Iterable

from portal.core.domain_types import DayOfWeek


@dataclass(frozen=True)
class ScheduleSlot:
    """A weekly slot, either a candidate or an existing schedule row."""
    class_id: int
    teacher_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    room: str | None = None
    id: int | None = None
    class_name: str | None = None
    subject_name: str | None = None
    teacher_name: str | None = None


@dataclass(frozen=True)
class ScheduleConflict:
    kind: str  # "teacher" | "class" | "room"
    schedule_id: int | None
    message: str


def intervals_overlap(s1: time, e1: time, s2: time, e2: time) -> bool:
    return s1 < e2 and s2 < e1


def normalize_room(room: str | None) -> str | None:
    if room is None:
        return None
    room = room.strip()
    return room or None


def _same_slot_window(candidate: ScheduleSlot, other: ScheduleSlot) -> bool:
    return DayOfWeek(other.day_of_week) == DayOfWeek(candidate.day_of_week) and intervals_overlap(
        candidate.start_time, candidate.end_time, other.start_time, other.end_time,
    )


def _teacher_message(other: ScheduleSlot) -> str:
    return (
        "Teacher conflict detected. Teacher already has schedule at this time "
        f"for {other.class_name or 'another class'} - {other.subject_name or 'another subject'}"
    )


def _class_message(other: ScheduleSlot) -> str:
    return (
        "Class conflict detected. Class already has schedule at this time "
        f"with {other.teacher_name or 'another teacher'} for {other.subject_name or 'another subject'}"
    )


def _room_message(room: str, other: ScheduleSlot) -> str:
    return (
        f"Room conflict detected. Room {room} is already booked at this time "
        f"for {other.class_name or 'another class'}"
    )


def find_conflict(
    candidate: ScheduleSlot,
    existing: Iterable[ScheduleSlot],
    exclude_id: int | None = None,
) -> ScheduleConflict | None:
    """Return the first conflict of candidate against existing, or None."""
    overlapping = [
        slot for slot in existing
        if (exclude_id is None or slot.id != exclude_id)
        and _same_slot_window(candidate, slot)
    ]

    for slot in overlapping:
        if slot.teacher_id == candidate.teacher_id:
            return ScheduleConflict("teacher", slot.id, _teacher_message(slot))

    for slot in overlapping:
        if slot.class_id == candidate.class_id:
            return ScheduleConflict("class", slot.id, _class_message(slot))

    room = normalize_room(candidate.room)
    if room:
        for slot in overlapping:
            if normalize_room(slot.room) == room:
                return ScheduleConflict("room", slot.id, _room_message(room, slot))

    return None
