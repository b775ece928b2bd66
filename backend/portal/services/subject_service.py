"""Subject Service — subject CRUD and usage statistics."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import BusinessRuleError, DuplicateResourceError
from portal.core.pagination import Pagination
from portal.models import Schedule, Subject
from portal.schemas.subject import SubjectCreate
from portal.services.queries import contains_any, count, find_one, get_or_404, paginate
from portal.services.serializers import serialize_subject

logger = logging.getLogger(__name__)

TOP_SUBJECTS = 5


async def _check_code_free(db: AsyncSession, code: str, exclude_id: int | None = None):
    stmt = select(Subject.id).where(Subject.subject_code == code)
    if exclude_id is not None:
        stmt = stmt.where(Subject.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError("Subject code already exists", "subject_code")


async def list_subjects(
    db: AsyncSession, pagination: Pagination, search: str | None = None,
) -> tuple[list[dict], Pagination]:
    stmt = select(Subject).order_by(Subject.subject_name, Subject.id)
    if search:
        stmt = stmt.where(contains_any(search, Subject.subject_name, Subject.subject_code))
    subjects, page = await paginate(db, stmt, pagination)
    return [serialize_subject(s) for s in subjects], page


async def get_subject(db: AsyncSession, subject_id: int) -> dict:
    return serialize_subject(await get_or_404(db, Subject, subject_id, "Subject"))


async def create_subject(db: AsyncSession, data: SubjectCreate) -> dict:
    await _check_code_free(db, data.subject_code)
    subject = Subject(subject_code=data.subject_code, subject_name=data.subject_name)
    db.add(subject)
    await db.commit()
    logger.info(f"Subject created: {subject.subject_code}")
    return serialize_subject(subject)


async def update_subject(db: AsyncSession, subject_id: int, patch: dict) -> dict:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    code = patch.get("subject_code")
    if code and code != subject.subject_code:
        await _check_code_free(db, code, exclude_id=subject_id)
    for field, value in patch.items():
        if value is not None:
            setattr(subject, field, value)
    await db.commit()
    return serialize_subject(subject)


async def delete_subject(db: AsyncSession, subject_id: int) -> None:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    if await count(db, select(Schedule.id).where(Schedule.subject_id == subject_id)):
        raise BusinessRuleError("Cannot delete subject that has associated schedules")
    await db.delete(subject)
    await db.commit()
    logger.info(f"Subject deleted: {subject.subject_code}")


async def subject_stats(db: AsyncSession) -> dict:
    schedule_count = func.count(Schedule.id)
    rows = (
        await db.execute(
            select(Subject, schedule_count)
            .outerjoin(Schedule, Schedule.subject_id == Subject.id)
            .group_by(Subject.id)
            .order_by(schedule_count.desc(), Subject.subject_name)
            .limit(TOP_SUBJECTS),
        )
    ).all()
    return {
        "total": await count(db, select(Subject.id)),
        "subjectsWithMostSchedules": [
            {**serialize_subject(subject), "scheduleCount": n} for subject, n in rows
        ],
    }
