"""Schedule Service — weekly timetable CRUD with atomic conflict detection.

Invariants:
    - No two schedules on the same day overlap for the same teacher, class or
      (non-blank) room; checked by core.schedule_conflicts.find_conflict
    - Conflict check and write share one transaction; on PostgreSQL the
      transaction first takes an advisory lock for the target day, so
      concurrent writers for that day run one after another
    - Update merges the patch over the stored row and ignores the row itself
    - Referenced class, subject and teacher must exist (404 otherwise)

Design Decisions:
    - Lock granularity is the day of week: every conflict is confined to one day,
      and a day-level lock is a single integer key
    - SQL prefilter (same day, overlapping, shares teacher/class/room) keeps the
      candidate set small; the pure function decides which conflict is reported
"""

import logging

from sqlalchemy import case, func, or_, select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.domain_types import WEEK_ORDER, DayOfWeek
from portal.core.errors import BusinessRuleError, ScheduleConflictError
from portal.core.pagination import Pagination
from portal.core.schedule_conflicts import ScheduleSlot, find_conflict, normalize_room
from portal.models import Schedule, SchoolClass, Subject, Teacher, TeachingJournal
from portal.schemas.schedule import ScheduleCreate
from portal.services.queries import count, get_or_404, paginate
from portal.services.serializers import loaded, serialize_schedule

logger = logging.getLogger(__name__)

SCHEDULE_LOCK_NAMESPACE = 7301
TOP_N = 10

_DETAIL = (
    selectinload(Schedule.school_class),
    selectinload(Schedule.subject),
    selectinload(Schedule.teacher),
)

_DAY_RANK = case(
    {day.value: index for index, day in enumerate(WEEK_ORDER)},
    value=Schedule.day_of_week,
    else_=len(WEEK_ORDER),
)


# ─── Conflict detection ─────────────────────────────────────────

def _to_slot(schedule: Schedule) -> ScheduleSlot:
    school_class = loaded(schedule, "school_class")
    subject = loaded(schedule, "subject")
    teacher = loaded(schedule, "teacher")
    return ScheduleSlot(
        id=schedule.id,
        class_id=schedule.class_id,
        teacher_id=schedule.teacher_id,
        day_of_week=DayOfWeek(schedule.day_of_week),
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        room=schedule.room,
        class_name=school_class.class_name if school_class else None,
        subject_name=subject.subject_name if subject else None,
        teacher_name=teacher.full_name if teacher else None,
    )


async def lock_day(db: AsyncSession, day: DayOfWeek) -> None:
    """Serialize schedule writers for one day (PostgreSQL only, released on commit)."""
    if db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(
        text("SELECT pg_advisory_xact_lock(:namespace, :day)"),
        {"namespace": SCHEDULE_LOCK_NAMESPACE, "day": WEEK_ORDER.index(day)},
    )


async def check_conflicts(
    db: AsyncSession, candidate: ScheduleSlot, exclude_id: int | None = None,
) -> None:
    """Raise ScheduleConflictError if candidate collides with a stored schedule."""
    sharing = [
        Schedule.teacher_id == candidate.teacher_id,
        Schedule.class_id == candidate.class_id,
    ]
    room = normalize_room(candidate.room)
    if room:
        sharing.append(func.trim(Schedule.room) == room)

    stmt = (
        select(Schedule)
        .where(
            Schedule.day_of_week == DayOfWeek(candidate.day_of_week).value,
            Schedule.start_time < candidate.end_time,
            Schedule.end_time > candidate.start_time,
            or_(*sharing),
        )
        .options(*_DETAIL)
    )
    if exclude_id is not None:
        stmt = stmt.where(Schedule.id != exclude_id)

    existing = [_to_slot(s) for s in (await db.execute(stmt)).scalars().all()]
    conflict = find_conflict(candidate, existing, exclude_id)
    if conflict:
        logger.info(
            f"Schedule conflict ({conflict.kind})",
            extra={"schedule_id": conflict.schedule_id},
        )
        raise ScheduleConflictError(conflict.message, conflict.kind, conflict.schedule_id)


async def _check_references(
    db: AsyncSession,
    class_id: int | None = None,
    subject_id: int | None = None,
    teacher_id: int | None = None,
) -> None:
    if class_id is not None:
        await get_or_404(db, SchoolClass, class_id, "Class")
    if subject_id is not None:
        await get_or_404(db, Subject, subject_id, "Subject")
    if teacher_id is not None:
        await get_or_404(db, Teacher, teacher_id, "Teacher")


# ─── CRUD ────────────────────────────────────────────────────────

async def get_schedule(db: AsyncSession, schedule_id: int) -> dict:
    return serialize_schedule(await get_or_404(db, Schedule, schedule_id, "Schedule", *_DETAIL))


async def create_schedule(db: AsyncSession, data: ScheduleCreate) -> dict:
    await _check_references(db, data.class_id, data.subject_id, data.teacher_id)
    await lock_day(db, data.day_of_week)
    await check_conflicts(db, ScheduleSlot(
        class_id=data.class_id,
        teacher_id=data.teacher_id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        room=data.room,
    ))
    schedule = Schedule(
        class_id=data.class_id,
        subject_id=data.subject_id,
        teacher_id=data.teacher_id,
        day_of_week=data.day_of_week.value,
        start_time=data.start_time,
        end_time=data.end_time,
        room=normalize_room(data.room),
    )
    db.add(schedule)
    await db.commit()
    logger.info("Schedule created", extra={"schedule_id": schedule.id})
    return await get_schedule(db, schedule.id)


async def update_schedule(db: AsyncSession, schedule_id: int, patch: dict) -> dict:
    schedule = await get_or_404(db, Schedule, schedule_id, "Schedule")

    merged = {
        "class_id": schedule.class_id,
        "subject_id": schedule.subject_id,
        "teacher_id": schedule.teacher_id,
        "day_of_week": DayOfWeek(schedule.day_of_week),
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "room": schedule.room,
    }
    for field, value in patch.items():
        if value is not None or field == "room":
            merged[field] = value
    if merged["start_time"] >= merged["end_time"]:
        raise BusinessRuleError("End time must be after start time")

    await _check_references(
        db,
        patch.get("class_id"),
        patch.get("subject_id"),
        patch.get("teacher_id"),
    )
    await lock_day(db, merged["day_of_week"])
    await check_conflicts(
        db,
        ScheduleSlot(
            class_id=merged["class_id"],
            teacher_id=merged["teacher_id"],
            day_of_week=merged["day_of_week"],
            start_time=merged["start_time"],
            end_time=merged["end_time"],
            room=merged["room"],
        ),
        exclude_id=schedule_id,
    )

    schedule.class_id = merged["class_id"]
    schedule.subject_id = merged["subject_id"]
    schedule.teacher_id = merged["teacher_id"]
    schedule.day_of_week = merged["day_of_week"].value
    schedule.start_time = merged["start_time"]
    schedule.end_time = merged["end_time"]
    schedule.room = normalize_room(merged["room"])
    await db.commit()
    logger.info("Schedule updated", extra={"schedule_id": schedule_id})
    return await get_schedule(db, schedule_id)


async def delete_schedule(db: AsyncSession, schedule_id: int) -> None:
    schedule = await get_or_404(db, Schedule, schedule_id, "Schedule")
    if await count(db, select(TeachingJournal.id).where(TeachingJournal.schedule_id == schedule_id)):
        raise BusinessRuleError("Cannot delete schedule with teaching journals")
    await db.delete(schedule)
    await db.commit()
    logger.info("Schedule deleted", extra={"schedule_id": schedule_id})


async def preview_conflicts(
    db: AsyncSession, candidate: ScheduleSlot, exclude_id: int | None = None,
) -> None:
    """Dry-run conflict check; raises like create/update would."""
    await check_conflicts(db, candidate, exclude_id)


# ─── Listings ────────────────────────────────────────────────────

_SORT_COLUMNS = {
    "day_of_week": (_DAY_RANK, Schedule.start_time),
    "time": (Schedule.start_time, _DAY_RANK),
    "class_name": (SchoolClass.class_name, _DAY_RANK, Schedule.start_time),
    "subject_name": (Subject.subject_name, _DAY_RANK, Schedule.start_time),
    "teacher_name": (Teacher.full_name, _DAY_RANK, Schedule.start_time),
}


async def list_schedules(
    db: AsyncSession,
    pagination: Pagination,
    class_id: int | None = None,
    teacher_id: int | None = None,
    subject_id: int | None = None,
    day_of_week: DayOfWeek | None = None,
    room: str | None = None,
    sort_by: str = "day_of_week",
    sort_order: str = "asc",
) -> tuple[list[dict], Pagination]:
    columns = _SORT_COLUMNS.get(sort_by, _SORT_COLUMNS["day_of_week"])
    ordering = [c.desc() if sort_order == "desc" else c.asc() for c in columns]
    stmt = (
        select(Schedule)
        .join(Schedule.school_class)
        .join(Schedule.subject)
        .join(Schedule.teacher)
        .order_by(*ordering, Schedule.id)
    )
    if class_id:
        stmt = stmt.where(Schedule.class_id == class_id)
    if teacher_id:
        stmt = stmt.where(Schedule.teacher_id == teacher_id)
    if subject_id:
        stmt = stmt.where(Schedule.subject_id == subject_id)
    if day_of_week:
        stmt = stmt.where(Schedule.day_of_week == day_of_week.value)
    if room:
        stmt = stmt.where(Schedule.room.ilike(f"%{room.strip()}%"))
    schedules, page = await paginate(db, stmt, pagination, *_DETAIL)
    return [serialize_schedule(s) for s in schedules], page


async def _ordered(db: AsyncSession, *criteria) -> list[Schedule]:
    stmt = (
        select(Schedule)
        .where(*criteria)
        .order_by(_DAY_RANK, Schedule.start_time, Schedule.id)
        .options(*_DETAIL)
    )
    return list((await db.execute(stmt)).scalars().all())


async def schedules_by_class(db: AsyncSession, class_id: int) -> list[dict]:
    await get_or_404(db, SchoolClass, class_id, "Class")
    return [serialize_schedule(s) for s in await _ordered(db, Schedule.class_id == class_id)]


async def schedules_by_teacher(db: AsyncSession, teacher_id: int) -> list[dict]:
    await get_or_404(db, Teacher, teacher_id, "Teacher")
    return [serialize_schedule(s) for s in await _ordered(db, Schedule.teacher_id == teacher_id)]


async def weekly_schedule(
    db: AsyncSession, class_id: int | None = None, teacher_id: int | None = None,
) -> dict[str, list[dict]]:
    """All matching schedules keyed by day name, Monday first."""
    criteria = []
    if class_id:
        criteria.append(Schedule.class_id == class_id)
    if teacher_id:
        criteria.append(Schedule.teacher_id == teacher_id)
    week: dict[str, list[dict]] = {day.value: [] for day in WEEK_ORDER}
    for schedule in await _ordered(db, *criteria):
        week[schedule.day_of_week].append(serialize_schedule(schedule))
    return week


# ─── Statistics ──────────────────────────────────────────────────

async def schedule_stats(db: AsyncSession) -> dict:
    n = func.count(Schedule.id)
    by_day = dict((await db.execute(
        select(Schedule.day_of_week, n).group_by(Schedule.day_of_week),
    )).all())
    by_class = (await db.execute(
        select(SchoolClass, n)
        .join(Schedule, Schedule.class_id == SchoolClass.id)
        .group_by(SchoolClass.id)
        .order_by(n.desc(), SchoolClass.class_name)
        .limit(TOP_N),
    )).all()
    by_teacher = (await db.execute(
        select(Teacher, n)
        .join(Schedule, Schedule.teacher_id == Teacher.id)
        .group_by(Teacher.id)
        .order_by(n.desc(), Teacher.full_name)
        .limit(TOP_N),
    )).all()
    by_subject = (await db.execute(
        select(Subject, n)
        .join(Schedule, Schedule.subject_id == Subject.id)
        .group_by(Subject.id)
        .order_by(n.desc(), Subject.subject_name)
        .limit(TOP_N),
    )).all()
    rooms = (await db.execute(
        select(Schedule.room, n)
        .where(Schedule.room.is_not(None))
        .group_by(Schedule.room)
        .order_by(n.desc(), Schedule.room)
        .limit(TOP_N),
    )).all()

    return {
        "total": await count(db, select(Schedule.id)),
        "byDay": [
            {"day": day.value, "count": by_day.get(day.value, 0)} for day in WEEK_ORDER
        ],
        "byClass": [
            {
                "class_id": str(c.id),
                "class_name": c.class_name,
                "grade_level": c.grade_level,
                "major": c.major,
                "count": total,
            }
            for c, total in by_class
        ],
        "byTeacher": [
            {"teacher_id": str(t.id), "full_name": t.full_name, "nip": t.nip, "count": total}
            for t, total in by_teacher
        ],
        "bySubject": [
            {
                "subject_id": str(s.id),
                "subject_name": s.subject_name,
                "subject_code": s.subject_code,
                "count": total,
            }
            for s, total in by_subject
        ],
        "roomUsage": [{"room": room, "count": total} for room, total in rooms],
    }
