"""Teacher Service — teacher profile CRUD, search, statistics and signature path.

Invariants:
    - A user has at most one teacher profile; nip and nik unique when set
    - A teacher who is a homeroom teacher, counselor or has schedules cannot be deleted
    - search returns at most SEARCH_LIMIT rows
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.domain_types import EmploymentStatus, Role
from portal.core.errors import BusinessRuleError, DuplicateResourceError
from portal.core.pagination import Pagination
from portal.models import Schedule, SchoolClass, Teacher, User
from portal.schemas.teacher import TeacherCreate
from portal.services.queries import contains_any, count, find_one, get_or_404, paginate
from portal.services.serializers import serialize_teacher, user_brief

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

_DETAIL = (selectinload(Teacher.user), selectinload(Teacher.homeroom_classes))


async def _check_unique(
    db: AsyncSession, field: str, value: str | None, label: str, exclude_id: int | None = None,
):
    if not value:
        return
    column = getattr(Teacher, field)
    stmt = select(Teacher.id).where(column == value)
    if exclude_id is not None:
        stmt = stmt.where(Teacher.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError(f"{label} already exists", field)


def _search_clause(term: str):
    return contains_any(
        term, Teacher.full_name, Teacher.nip, Teacher.nik, Teacher.phone_number, User.username,
    )


async def list_teachers(
    db: AsyncSession,
    pagination: Pagination,
    search: str | None = None,
    employment_status: EmploymentStatus | None = None,
) -> tuple[list[dict], Pagination]:
    stmt = select(Teacher).join(Teacher.user).order_by(Teacher.full_name, Teacher.id)
    if search:
        stmt = stmt.where(_search_clause(search))
    if employment_status:
        stmt = stmt.where(Teacher.employment_status == employment_status.value)
    teachers, page = await paginate(db, stmt, pagination, *_DETAIL)
    return [serialize_teacher(t) for t in teachers], page


async def get_teacher(db: AsyncSession, teacher_id: int) -> dict:
    return serialize_teacher(await get_or_404(db, Teacher, teacher_id, "Teacher", *_DETAIL))


async def create_teacher(db: AsyncSession, data: TeacherCreate) -> dict:
    user = await get_or_404(db, User, data.user_id, "User", selectinload(User.teacher))
    if user.teacher is not None:
        raise DuplicateResourceError("User already has a teacher profile", "user_id")
    await _check_unique(db, "nip", data.nip, "NIP")
    await _check_unique(db, "nik", data.nik, "NIK")

    teacher = Teacher(
        user_id=data.user_id,
        nip=data.nip,
        nik=data.nik,
        full_name=data.full_name,
        phone_number=data.phone_number,
        employment_status=data.employment_status.value,
    )
    db.add(teacher)
    await db.commit()
    logger.info(f"Teacher created: {teacher.full_name}", extra={"user_id": data.user_id})
    return await get_teacher(db, teacher.id)


async def update_teacher(db: AsyncSession, teacher_id: int, patch: dict) -> dict:
    teacher = await get_or_404(db, Teacher, teacher_id, "Teacher")
    if patch.get("nip") and patch["nip"] != teacher.nip:
        await _check_unique(db, "nip", patch["nip"], "NIP", exclude_id=teacher_id)
    if patch.get("nik") and patch["nik"] != teacher.nik:
        await _check_unique(db, "nik", patch["nik"], "NIK", exclude_id=teacher_id)
    for field, value in patch.items():
        if field in ("full_name", "employment_status") and value is None:
            continue
        setattr(teacher, field, value.value if isinstance(value, EmploymentStatus) else value)
    await db.commit()
    return await get_teacher(db, teacher_id)


async def delete_teacher(db: AsyncSession, teacher_id: int) -> None:
    await get_or_404(db, Teacher, teacher_id, "Teacher")
    if await count(db, select(SchoolClass.id).where(SchoolClass.homeroom_teacher_id == teacher_id)):
        raise BusinessRuleError("Cannot delete teacher who is assigned as homeroom teacher")
    if await count(db, select(SchoolClass.id).where(SchoolClass.counselor_id == teacher_id)):
        raise BusinessRuleError("Cannot delete teacher who is assigned as counselor")
    if await count(db, select(Schedule.id).where(Schedule.teacher_id == teacher_id)):
        raise BusinessRuleError("Cannot delete teacher who has teaching schedules")
    teacher = await db.get(Teacher, teacher_id)
    await db.delete(teacher)
    await db.commit()
    logger.info("Teacher deleted", extra={"user_id": teacher.user_id})


async def set_signature(db: AsyncSession, teacher_id: int, path: str) -> dict:
    teacher = await get_or_404(db, Teacher, teacher_id, "Teacher")
    teacher.signature_image_path = path
    await db.commit()
    return await get_teacher(db, teacher_id)


async def teacher_stats(db: AsyncSession) -> dict:
    total = await count(db, select(Teacher.id))
    active = await count(
        db, select(Teacher.id).join(Teacher.user).where(User.is_active.is_(True)),
    )
    with_classes = await count(
        db,
        select(Teacher.id).where(
            or_(Teacher.homeroom_classes.any(), Teacher.counselor_classes.any()),
        ),
    )
    with_schedules = await count(db, select(Teacher.id).where(Teacher.schedules.any()))
    distribution = (
        await db.execute(
            select(Teacher.employment_status, func.count(Teacher.id))
            .group_by(Teacher.employment_status)
            .order_by(Teacher.employment_status),
        )
    ).all()
    return {
        "total": total,
        "active": active,
        "inactive": total - active,
        "withClasses": with_classes,
        "withSchedules": with_schedules,
        "employmentDistribution": [
            {"employment_status": status, "count": n} for status, n in distribution
        ],
    }


async def available_users(db: AsyncSession) -> list[dict]:
    """Users that could receive a teacher profile."""
    stmt = (
        select(User)
        .where(
            ~User.teacher.has(),
            ~User.student.has(),
            User.role.in_([Role.TEACHER.value, Role.ADMIN.value]),
        )
        .order_by(User.username)
    )
    return [user_brief(u) for u in (await db.execute(stmt)).scalars().all()]


async def search_teachers(db: AsyncSession, query: str) -> list[dict]:
    stmt = (
        select(Teacher)
        .join(Teacher.user)
        .where(_search_clause(query))
        .order_by(Teacher.full_name)
        .options(*_DETAIL)
        .limit(SEARCH_LIMIT)
    )
    return [serialize_teacher(t) for t in (await db.execute(stmt)).scalars().all()]


async def teacher_for_user(db: AsyncSession, user_id: int) -> Teacher | None:
    return await find_one(db, select(Teacher).where(Teacher.user_id == user_id))
