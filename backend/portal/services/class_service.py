"""Class Service — class CRUD, homeroom/counselor references and student placement.

Invariants:
    - (class_name, grade_level) unique
    - homeroom_teacher_id / counselor_id must reference existing teachers
    - A class with students or schedules cannot be deleted
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.core.errors import BusinessRuleError, DuplicateResourceError, ResourceNotFoundError
from portal.core.pagination import Pagination
from portal.models import Schedule, SchoolClass, Student, Teacher
from portal.schemas.school_class import ClassCreate
from portal.services.queries import contains_any, count, find_one, get_or_404, paginate
from portal.services.serializers import serialize_class, serialize_student, serialize_teacher

logger = logging.getLogger(__name__)

_SUMMARY = (selectinload(SchoolClass.homeroom_teacher), selectinload(SchoolClass.counselor))
_DETAIL = (*_SUMMARY, selectinload(SchoolClass.students))


async def _check_name_free(
    db: AsyncSession, class_name: str, grade_level: int, exclude_id: int | None = None,
):
    stmt = select(SchoolClass.id).where(
        SchoolClass.class_name == class_name, SchoolClass.grade_level == grade_level,
    )
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateResourceError("Class with this name and grade level already exists", "class_name")


async def _check_teacher(db: AsyncSession, teacher_id: int | None, label: str):
    if teacher_id and await db.get(Teacher, teacher_id) is None:
        raise ResourceNotFoundError(label, teacher_id)


async def list_classes(
    db: AsyncSession,
    pagination: Pagination,
    search: str | None = None,
    grade_level: int | None = None,
    major: str | None = None,
    homeroom_teacher_id: int | None = None,
    has_homeroom_teacher: bool | None = None,
) -> tuple[list[dict], Pagination]:
    stmt = select(SchoolClass).order_by(
        SchoolClass.grade_level, SchoolClass.class_name, SchoolClass.id,
    )
    if search:
        stmt = stmt.where(contains_any(search, SchoolClass.class_name, SchoolClass.major))
    if grade_level:
        stmt = stmt.where(SchoolClass.grade_level == grade_level)
    if major:
        stmt = stmt.where(contains_any(major, SchoolClass.major))
    if homeroom_teacher_id:
        stmt = stmt.where(SchoolClass.homeroom_teacher_id == homeroom_teacher_id)
    if has_homeroom_teacher is True:
        stmt = stmt.where(SchoolClass.homeroom_teacher_id.is_not(None))
    elif has_homeroom_teacher is False:
        stmt = stmt.where(SchoolClass.homeroom_teacher_id.is_(None))
    classes, page = await paginate(db, stmt, pagination, *_SUMMARY)
    return [serialize_class(c) for c in classes], page


async def get_class(db: AsyncSession, class_id: int) -> dict:
    return serialize_class(await get_or_404(db, SchoolClass, class_id, "Class", *_DETAIL))


async def create_class(db: AsyncSession, data: ClassCreate) -> dict:
    await _check_name_free(db, data.class_name, data.grade_level)
    await _check_teacher(db, data.homeroom_teacher_id, "Homeroom teacher")
    await _check_teacher(db, data.counselor_id, "Counselor")
    school_class = SchoolClass(**data.model_dump())
    db.add(school_class)
    await db.commit()
    logger.info(f"Class created: {school_class.class_name}")
    return await get_class(db, school_class.id)


async def update_class(db: AsyncSession, class_id: int, patch: dict) -> dict:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    name = patch.get("class_name") or school_class.class_name
    grade = patch.get("grade_level") or school_class.grade_level
    if (name, grade) != (school_class.class_name, school_class.grade_level):
        await _check_name_free(db, name, grade, exclude_id=class_id)
    await _check_teacher(db, patch.get("homeroom_teacher_id"), "Homeroom teacher")
    await _check_teacher(db, patch.get("counselor_id"), "Counselor")
    for field, value in patch.items():
        if field in ("class_name", "grade_level") and value is None:
            continue
        setattr(school_class, field, value)
    await db.commit()
    return await get_class(db, class_id)


async def delete_class(db: AsyncSession, class_id: int) -> None:
    school_class = await get_or_404(db, SchoolClass, class_id, "Class")
    if await count(db, select(Student.id).where(Student.current_class_id == class_id)):
        raise BusinessRuleError("Cannot delete class with enrolled students")
    if await count(db, select(Schedule.id).where(Schedule.class_id == class_id)):
        raise BusinessRuleError("Cannot delete class with existing schedules")
    await db.delete(school_class)
    await db.commit()
    logger.info(f"Class deleted: {school_class.class_name}")


async def class_stats(db: AsyncSession) -> dict:
    total, average = (
        await db.execute(select(func.count(SchoolClass.id), func.avg(SchoolClass.grade_level)))
    ).one()
    grades = (
        await db.execute(
            select(SchoolClass.grade_level, func.count(SchoolClass.id))
            .group_by(SchoolClass.grade_level)
            .order_by(SchoolClass.grade_level),
        )
    ).all()
    majors = (
        await db.execute(
            select(SchoolClass.major, func.count(SchoolClass.id))
            .where(SchoolClass.major.is_not(None))
            .group_by(SchoolClass.major)
            .order_by(SchoolClass.major),
        )
    ).all()
    return {
        "total": total,
        "averageGradeLevel": float(average) if average is not None else None,
        "gradeDistribution": [{"grade_level": g, "count": n} for g, n in grades],
        "majorDistribution": [{"major": m, "count": n} for m, n in majors],
    }


async def available_teachers(db: AsyncSession) -> list[dict]:
    """Teachers who are neither homeroom teacher nor counselor of any class."""
    stmt = (
        select(Teacher)
        .where(~or_(Teacher.homeroom_classes.any(), Teacher.counselor_classes.any()))
        .order_by(Teacher.full_name)
        .options(selectinload(Teacher.user))
    )
    return [serialize_teacher(t) for t in (await db.execute(stmt)).scalars().all()]


async def assign_student(db: AsyncSession, class_id: int, student_id: int) -> dict:
    await get_or_404(db, SchoolClass, class_id, "Class")
    student = await get_or_404(db, Student, student_id, "Student")
    if student.current_class_id == class_id:
        raise BusinessRuleError("Student is already assigned to this class")
    student.current_class_id = class_id
    await db.commit()
    student = await get_or_404(
        db, Student, student_id, "Student",
        selectinload(Student.user), selectinload(Student.current_class),
    )
    return serialize_student(student)


async def remove_student(db: AsyncSession, class_id: int, student_id: int) -> dict:
    await get_or_404(db, SchoolClass, class_id, "Class")
    student = await get_or_404(db, Student, student_id, "Student")
    if student.current_class_id != class_id:
        raise BusinessRuleError("Student is not assigned to this class")
    student.current_class_id = None
    await db.commit()
    student = await get_or_404(
        db, Student, student_id, "Student",
        selectinload(Student.user), selectinload(Student.current_class),
    )
    return serialize_student(student)
