"""Student Service — student profile CRUD, class placement, search and statistics.

Invariants:
    - A user has at most one student profile and may not also be a teacher
    - nis, nisn and rfid_uid unique when set
    - A student with attendance records cannot be deleted
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.domain_types import Gender, Role, StudentStatus
from portal.core.errors import BusinessRuleError, DuplicateResourceError
from portal.core.pagination import Pagination
from portal.models import SchoolClass, Student, StudentAttendance, User
from portal.schemas.student import StudentCreate
from portal.services.queries import contains_any, count, find_one, get_or_404, paginate
from portal.services.serializers import serialize_student, user_brief

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20

_DETAIL = (selectinload(Student.user), selectinload(Student.current_class))
_UNIQUE_LABELS = {"nis": "NIS", "nisn": "NISN", "rfid_uid": "RFID UID"}


async def _check_unique(
    db: AsyncSession, field: str, value: str | None, exclude_id: int | None = None,
):
    if not value:
        return
    stmt = select(Student.id).where(getattr(Student, field) == value)
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError(f"{_UNIQUE_LABELS[field]} already exists", field)


def _search_clause(term: str):
    return contains_any(
        term, Student.full_name, Student.nis, Student.nisn, Student.phone_number, User.username,
    )


async def list_students(
    db: AsyncSession,
    pagination: Pagination,
    search: str | None = None,
    status: StudentStatus | None = None,
    class_id: int | None = None,
    gender: Gender | None = None,
) -> tuple[list[dict], Pagination]:
    stmt = select(Student).join(Student.user).order_by(Student.full_name, Student.id)
    if search:
        stmt = stmt.where(_search_clause(search))
    if status:
        stmt = stmt.where(Student.status == status.value)
    if class_id:
        stmt = stmt.where(Student.current_class_id == class_id)
    if gender:
        stmt = stmt.where(Student.gender == gender.value)
    students, page = await paginate(db, stmt, pagination, *_DETAIL)
    return [serialize_student(s) for s in students], page


async def get_student(db: AsyncSession, student_id: int) -> dict:
    return serialize_student(await get_or_404(db, Student, student_id, "Student", *_DETAIL))


async def create_student(db: AsyncSession, data: StudentCreate) -> dict:
    user = await get_or_404(
        db, User, data.user_id, "User",
        selectinload(User.student), selectinload(User.teacher),
    )
    if user.student is not None:
        raise DuplicateResourceError("User already has a student profile", "user_id")
    if user.teacher is not None:
        raise BusinessRuleError("User already has a teacher profile")
    for field in _UNIQUE_LABELS:
        await _check_unique(db, field, getattr(data, field))
    if data.current_class_id:
        await get_or_404(db, SchoolClass, data.current_class_id, "Class")

    student = Student(
        user_id=data.user_id,
        current_class_id=data.current_class_id,
        nis=data.nis,
        nisn=data.nisn,
        full_name=data.full_name,
        gender=data.gender.value,
        address=data.address,
        phone_number=data.phone_number,
        status=data.status.value,
        rfid_uid=data.rfid_uid,
    )
    db.add(student)
    await db.commit()
    logger.info(f"Student created: {student.full_name}", extra={"user_id": data.user_id})
    return await get_student(db, student.id)


async def update_student(db: AsyncSession, student_id: int, patch: dict) -> dict:
    student = await get_or_404(db, Student, student_id, "Student")
    for field in _UNIQUE_LABELS:
        value = patch.get(field)
        if value and value != getattr(student, field):
            await _check_unique(db, field, value, exclude_id=student_id)
    if patch.get("current_class_id"):
        await get_or_404(db, SchoolClass, patch["current_class_id"], "Class")
    for field, value in patch.items():
        if field in ("nis", "full_name", "gender", "status") and value is None:
            continue
        setattr(student, field, getattr(value, "value", value))
    await db.commit()
    return await get_student(db, student_id)


async def delete_student(db: AsyncSession, student_id: int) -> None:
    student = await get_or_404(db, Student, student_id, "Student")
    if await count(db, select(StudentAttendance.id).where(StudentAttendance.student_id == student_id)):
        raise BusinessRuleError("Cannot delete student with attendance records")
    await db.delete(student)
    await db.commit()
    logger.info("Student deleted", extra={"user_id": student.user_id})


async def assign_to_class(db: AsyncSession, student_id: int, class_id: int) -> dict:
    student = await get_or_404(db, Student, student_id, "Student")
    await get_or_404(db, SchoolClass, class_id, "Class")
    student.current_class_id = class_id
    await db.commit()
    return await get_student(db, student_id)


async def remove_from_class(db: AsyncSession, student_id: int) -> dict:
    student = await get_or_404(db, Student, student_id, "Student")
    student.current_class_id = None
    await db.commit()
    return await get_student(db, student_id)


async def students_by_class(db: AsyncSession, class_id: int) -> list[dict]:
    await get_or_404(db, SchoolClass, class_id, "Class")
    stmt = (
        select(Student)
        .where(Student.current_class_id == class_id)
        .order_by(Student.full_name)
        .options(*_DETAIL)
    )
    return [serialize_student(s) for s in (await db.execute(stmt)).scalars().all()]


async def student_stats(db: AsyncSession) -> dict:
    total = await count(db, select(Student.id))
    with_class = await count(db, select(Student.id).where(Student.current_class_id.is_not(None)))
    with_rfid = await count(db, select(Student.id).where(Student.rfid_uid.is_not(None)))

    async def distribution(column):
        rows = await db.execute(
            select(column, func.count(Student.id))
            .where(column.is_not(None))
            .group_by(column)
            .order_by(column),
        )
        return rows.all()

    return {
        "total": total,
        "withClass": with_class,
        "withoutClass": total - with_class,
        "withRFID": with_rfid,
        "withoutRFID": total - with_rfid,
        "statusDistribution": [
            {"status": s, "count": n} for s, n in await distribution(Student.status)
        ],
        "genderDistribution": [
            {"gender": g, "count": n} for g, n in await distribution(Student.gender)
        ],
        "classDistribution": [
            {"class_id": str(c), "count": n}
            for c, n in await distribution(Student.current_class_id)
        ],
    }


async def available_users(db: AsyncSession) -> list[dict]:
    """Users that could receive a student profile."""
    stmt = (
        select(User)
        .where(
            ~User.teacher.has(),
            ~User.student.has(),
            User.role.in_([Role.STUDENT.value, Role.ADMIN.value]),
        )
        .order_by(User.username)
    )
    return [user_brief(u) for u in (await db.execute(stmt)).scalars().all()]


async def search_students(db: AsyncSession, query: str) -> list[dict]:
    stmt = (
        select(Student)
        .join(Student.user)
        .where(_search_clause(query))
        .order_by(Student.full_name)
        .options(*_DETAIL)
        .limit(SEARCH_LIMIT)
    )
    return [serialize_student(s) for s in (await db.execute(stmt)).scalars().all()]


async def student_for_user(db: AsyncSession, user_id: int) -> Student | None:
    return await find_one(db, select(Student).where(Student.user_id == user_id))
