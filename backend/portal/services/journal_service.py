"""Teaching Journal Service — per-lesson journal CRUD, listings and counts.

Invariants:
    - One journal per (schedule, teaching_date)
    - When an owner teacher id is given, the journal's schedule must belong to
      that teacher (admins pass None and may touch any journal)
    - "today" and "this month" are computed in the school time zone
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.config import get_settings
from portal.core.errors import DuplicateResourceError, PermissionDeniedError
from portal.core.pagination import Pagination
from portal.models import Schedule, SchoolClass, Subject, TeachingJournal
from portal.schemas.journal import JournalCreate
from portal.services.queries import contains_any, count, find_one, get_or_404, paginate
from portal.services.serializers import serialize_journal

logger = logging.getLogger(__name__)

_DETAIL = (
    selectinload(TeachingJournal.schedule).options(
        selectinload(Schedule.school_class),
        selectinload(Schedule.subject),
        selectinload(Schedule.teacher),
    ),
)

_SORTABLE = {
    "teaching_date": TeachingJournal.teaching_date,
    "created_at": TeachingJournal.created_at,
    "topic": TeachingJournal.topic,
}


def _today() -> date:
    return datetime.now(get_settings().tz).date()


async def _check_slot_free(
    db: AsyncSession, schedule_id: int, teaching_date: date, exclude_id: int | None = None,
):
    stmt = select(TeachingJournal.id).where(
        TeachingJournal.schedule_id == schedule_id,
        TeachingJournal.teaching_date == teaching_date,
    )
    if exclude_id is not None:
        stmt = stmt.where(TeachingJournal.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError(
            "Teaching journal for this schedule and date already exists", "teaching_date",
        )


def _check_owner(schedule: Schedule, owner_teacher_id: int | None):
    if owner_teacher_id is not None and schedule.teacher_id != owner_teacher_id:
        raise PermissionDeniedError("You can only manage journals for your own schedules")


def _filtered(
    teacher_id: int | None = None,
    class_id: int | None = None,
    subject_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    search: str | None = None,
):
    stmt = (
        select(TeachingJournal)
        .join(TeachingJournal.schedule)
        .join(Schedule.school_class)
        .join(Schedule.subject)
    )
    if teacher_id:
        stmt = stmt.where(Schedule.teacher_id == teacher_id)
    if class_id:
        stmt = stmt.where(Schedule.class_id == class_id)
    if subject_id:
        stmt = stmt.where(Schedule.subject_id == subject_id)
    if date_from:
        stmt = stmt.where(TeachingJournal.teaching_date >= date_from)
    if date_to:
        stmt = stmt.where(TeachingJournal.teaching_date <= date_to)
    if search:
        stmt = stmt.where(contains_any(
            search,
            TeachingJournal.topic,
            TeachingJournal.notes,
            Subject.subject_name,
            SchoolClass.class_name,
        ))
    return stmt


async def list_journals(
    db: AsyncSession,
    pagination: Pagination,
    sort_by: str = "teaching_date",
    sort_order: str = "desc",
    **filters,
) -> tuple[list[dict], Pagination]:
    column = _SORTABLE.get(sort_by, TeachingJournal.teaching_date)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    stmt = _filtered(**filters).order_by(ordering, TeachingJournal.id.desc())
    journals, page = await paginate(db, stmt, pagination, *_DETAIL)
    return [serialize_journal(j) for j in journals], page


async def get_journal(db: AsyncSession, journal_id: int) -> dict:
    return serialize_journal(
        await get_or_404(db, TeachingJournal, journal_id, "Teaching journal", *_DETAIL),
    )


async def create_journal(
    db: AsyncSession, data: JournalCreate, owner_teacher_id: int | None = None,
) -> dict:
    schedule = await get_or_404(db, Schedule, data.schedule_id, "Schedule")
    _check_owner(schedule, owner_teacher_id)
    await _check_slot_free(db, data.schedule_id, data.teaching_date)
    journal = TeachingJournal(**data.model_dump())
    db.add(journal)
    await db.commit()
    logger.info("Teaching journal created", extra={"schedule_id": data.schedule_id})
    return await get_journal(db, journal.id)


async def update_journal(
    db: AsyncSession, journal_id: int, patch: dict, owner_teacher_id: int | None = None,
) -> dict:
    journal = await get_or_404(
        db, TeachingJournal, journal_id, "Teaching journal",
        selectinload(TeachingJournal.schedule),
    )
    _check_owner(journal.schedule, owner_teacher_id)
    new_date = patch.get("teaching_date")
    if new_date and new_date != journal.teaching_date:
        await _check_slot_free(db, journal.schedule_id, new_date, exclude_id=journal_id)
    for field, value in patch.items():
        if field in ("teaching_date", "topic") and value is None:
            continue
        setattr(journal, field, value)
    await db.commit()
    return await get_journal(db, journal_id)


async def delete_journal(
    db: AsyncSession, journal_id: int, owner_teacher_id: int | None = None,
) -> None:
    journal = await get_or_404(
        db, TeachingJournal, journal_id, "Teaching journal",
        selectinload(TeachingJournal.schedule),
    )
    _check_owner(journal.schedule, owner_teacher_id)
    await db.delete(journal)
    await db.commit()
    logger.info("Teaching journal deleted", extra={"schedule_id": journal.schedule_id})


async def journal_stats(db: AsyncSession, **filters) -> dict:
    today = _today()
    month_start = today.replace(day=1)
    base = _filtered(**filters)
    return {
        "total": await count(db, base),
        "this_month": await count(db, base.where(TeachingJournal.teaching_date >= month_start)),
        "today": await count(db, base.where(TeachingJournal.teaching_date == today)),
    }
