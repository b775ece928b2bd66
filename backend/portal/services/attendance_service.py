"""Attendance Service — check-in/check-out recording with a per-day dedup guard.

Invariants:
    - At most one record per (person, status, school-calendar day)
    - The pre-check gives the friendly 409; the unique constraint on
      (person_id, status, attendance_date) rejects concurrent duplicates, and its
      IntegrityError is mapped to the same DuplicateAttendanceError
    - attendance_date always equals local_date(timestamp) in the school time zone
    - A student may only be recorded against a schedule of their current class

Design Decisions:
    - Each record commits on its own so a bulk request keeps its successes when
      one item fails
    - "my" endpoints resolve the caller's own teacher/student profile
"""

import logging
from datetime import date, datetime, timezone
from typing import Literal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from portal.config import get_settings
from portal.core.attendance_rules import (
    as_aware, build_today_status, count_by_status, date_range_bounds, day_bounds,
    group_attendance, local_date,
)
from portal.core.domain_types import AttendanceGrouping, AttendanceSubject, Role
from portal.core.errors import (
    BusinessRuleError, DuplicateAttendanceError, PermissionDeniedError, PortalError,
    ResourceNotFoundError,
)
from portal.core.pagination import Pagination
from portal.db.base import utcnow
from portal.models import Schedule, Student, StudentAttendance, Teacher, TeacherAttendance, User
from portal.schemas.attendance import AttendanceRecordRequest, BulkAttendanceItem, MyAttendanceRequest
from portal.services.queries import find_one, get_or_404, paginate
from portal.services.serializers import serialize_student_attendance, serialize_teacher_attendance
from portal.services.student_service import student_for_user
from portal.services.teacher_service import teacher_for_user

logger = logging.getLogger(__name__)

AttendanceKind = Literal["teacher", "student"]

_TEACHER_DETAIL = (selectinload(TeacherAttendance.teacher).selectinload(Teacher.user),)
_STUDENT_DETAIL = (
    selectinload(StudentAttendance.student).options(
        selectinload(Student.user), selectinload(Student.current_class),
    ),
)


def _moment(timestamp: datetime | None) -> datetime:
    """Request timestamp as UTC; naive values are school wall-clock time."""
    if timestamp is None:
        return utcnow()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=get_settings().tz)
    return timestamp.astimezone(timezone.utc)


async def _reject_duplicate(
    db: AsyncSession, model, person_column, person_id: int, status: str,
    moment: datetime, person: str, exclude_id: int | None = None,
):
    start, next_start = day_bounds(moment, get_settings().tz)
    stmt = select(model.id).where(
        person_column == person_id,
        model.status == status,
        model.timestamp >= start,
        model.timestamp < next_start,
    )
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)
    if await find_one(db, stmt) is not None:
        raise DuplicateAttendanceError(person, status)


async def _commit_record(db: AsyncSession, person: str, status: str, person_id: int):
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(
            f"Concurrent duplicate {person.lower()} attendance rejected",
            extra={"person_id": person_id},
        )
        raise DuplicateAttendanceError(person, status)


# ─── Recording ──────────────────────────────────────────────────

async def record_teacher_attendance(
    db: AsyncSession, teacher_id: int, data: AttendanceRecordRequest,
) -> dict:
    await get_or_404(db, Teacher, teacher_id, "Teacher")
    status = data.status.value
    moment = _moment(data.timestamp)
    await _reject_duplicate(
        db, TeacherAttendance, TeacherAttendance.teacher_id, teacher_id, status, moment, "Teacher",
    )
    record = TeacherAttendance(
        teacher_id=teacher_id,
        timestamp=moment,
        attendance_date=local_date(moment, get_settings().tz),
        status=status,
        location_coordinates=data.location_coordinates,
        photo_path=data.photo_path,
    )
    db.add(record)
    await _commit_record(db, "Teacher", status, teacher_id)
    logger.info(f"Teacher attendance recorded: {status}", extra={"person_id": teacher_id})
    return serialize_teacher_attendance(await get_or_404(
        db, TeacherAttendance, record.id, "Attendance record", *_TEACHER_DETAIL,
    ))


async def record_student_attendance(
    db: AsyncSession, student_id: int, schedule_id: int, data: AttendanceRecordRequest,
) -> dict:
    student = await get_or_404(db, Student, student_id, "Student")
    schedule = await get_or_404(db, Schedule, schedule_id, "Schedule")
    if student.current_class_id != schedule.class_id:
        raise BusinessRuleError("Student does not belong to this class")
    status = data.status.value
    moment = _moment(data.timestamp)
    await _reject_duplicate(
        db, StudentAttendance, StudentAttendance.student_id, student_id, status, moment, "Student",
    )
    record = StudentAttendance(
        student_id=student_id,
        schedule_id=schedule_id,
        timestamp=moment,
        attendance_date=local_date(moment, get_settings().tz),
        status=status,
        location_coordinates=data.location_coordinates,
    )
    db.add(record)
    await _commit_record(db, "Student", status, student_id)
    logger.info(f"Student attendance recorded: {status}", extra={"person_id": student_id})
    return serialize_student_attendance(await get_or_404(
        db, StudentAttendance, record.id, "Attendance record", *_STUDENT_DETAIL,
    ))


async def bulk_record(db: AsyncSession, items: list[BulkAttendanceItem]) -> list[dict]:
    """Record each item independently; report per-item success or failure."""
    results = []
    for item in items:
        echo = item.model_dump(mode="json", exclude_none=True)
        try:
            if item.type == "teacher":
                data = await record_teacher_attendance(db, item.teacher_id, item)
            else:
                data = await record_student_attendance(db, item.student_id, item.schedule_id, item)
            results.append({**echo, "success": True, "data": data})
        except PortalError as e:
            await db.rollback()
            results.append({**echo, "success": False, "error": e.message})
    return results


# ─── Listing ────────────────────────────────────────────────────

def _in_range(stmt, model, date_from: date | None, date_to: date | None):
    lower, upper = date_range_bounds(date_from, date_to, get_settings().tz)
    if lower is not None:
        stmt = stmt.where(model.timestamp >= lower)
    if upper is not None:
        stmt = stmt.where(model.timestamp < upper)
    return stmt


def _teacher_query(
    teacher_id: int | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    stmt = select(TeacherAttendance)
    if teacher_id:
        stmt = stmt.where(TeacherAttendance.teacher_id == teacher_id)
    if status:
        stmt = stmt.where(TeacherAttendance.status == status)
    return _in_range(stmt, TeacherAttendance, date_from, date_to)


def _student_query(
    student_id: int | None = None,
    class_id: int | None = None,
    status: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    stmt = select(StudentAttendance)
    if student_id:
        stmt = stmt.where(StudentAttendance.student_id == student_id)
    if class_id:
        stmt = stmt.join(StudentAttendance.student).where(Student.current_class_id == class_id)
    if status:
        stmt = stmt.where(StudentAttendance.status == status)
    return _in_range(stmt, StudentAttendance, date_from, date_to)


async def list_teacher_attendance(
    db: AsyncSession, pagination: Pagination, **filters,
) -> tuple[list[dict], Pagination]:
    stmt = _teacher_query(**filters).order_by(
        TeacherAttendance.timestamp.desc(), TeacherAttendance.id.desc(),
    )
    records, page = await paginate(db, stmt, pagination, *_TEACHER_DETAIL)
    return [serialize_teacher_attendance(r) for r in records], page


async def list_student_attendance(
    db: AsyncSession, pagination: Pagination, **filters,
) -> tuple[list[dict], Pagination]:
    stmt = _student_query(**filters).order_by(
        StudentAttendance.timestamp.desc(), StudentAttendance.id.desc(),
    )
    records, page = await paginate(db, stmt, pagination, *_STUDENT_DETAIL)
    return [serialize_student_attendance(r) for r in records], page


# ─── Summaries & reports ────────────────────────────────────────

async def _status_counts(db: AsyncSession, stmt) -> dict:
    rows = await db.execute(select(stmt.subquery().c.status))
    return count_by_status(rows.scalars().all())


async def attendance_summary(
    db: AsyncSession, day: date, subject: AttendanceSubject = AttendanceSubject.ALL,
) -> dict:
    """masuk/pulang counts for one school-calendar day."""
    summary = {}
    if subject in (AttendanceSubject.TEACHER, AttendanceSubject.ALL):
        summary["teachers"] = await _status_counts(
            db, _teacher_query(date_from=day, date_to=day),
        )
    if subject in (AttendanceSubject.STUDENT, AttendanceSubject.ALL):
        summary["students"] = await _status_counts(
            db, _student_query(date_from=day, date_to=day),
        )
    return summary


async def attendance_stats(
    db: AsyncSession, date_from: date | None = None, date_to: date | None = None,
) -> dict:
    """masuk/pulang counts over a date range for teachers and students."""
    return {
        "teachers": await _status_counts(
            db, _teacher_query(date_from=date_from, date_to=date_to),
        ),
        "students": await _status_counts(
            db, _student_query(date_from=date_from, date_to=date_to),
        ),
    }


async def attendance_report(
    db: AsyncSession,
    kind: AttendanceKind = "student",
    group_by: AttendanceGrouping = AttendanceGrouping.DAY,
    teacher_id: int | None = None,
    student_id: int | None = None,
    class_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> list[dict]:
    tz = get_settings().tz
    if kind == "teacher":
        stmt = _teacher_query(teacher_id=teacher_id, date_from=date_from, date_to=date_to)
        stmt = stmt.order_by(TeacherAttendance.timestamp).options(*_TEACHER_DETAIL)
        serialize = serialize_teacher_attendance
    else:
        stmt = _student_query(
            student_id=student_id, class_id=class_id, date_from=date_from, date_to=date_to,
        )
        stmt = stmt.order_by(StudentAttendance.timestamp).options(*_STUDENT_DETAIL)
        serialize = serialize_student_attendance
    records = (await db.execute(stmt)).scalars().all()
    return group_attendance(records, group_by, tz, serialize)


async def daily_report(db: AsyncSession, day: date) -> dict:
    teachers = await db.execute(
        _teacher_query(date_from=day, date_to=day)
        .order_by(TeacherAttendance.timestamp)
        .options(*_TEACHER_DETAIL),
    )
    students = await db.execute(
        _student_query(date_from=day, date_to=day)
        .order_by(StudentAttendance.timestamp)
        .options(*_STUDENT_DETAIL),
    )
    return {
        "date": day.isoformat(),
        "summary": await attendance_summary(db, day),
        "teachers": [serialize_teacher_attendance(r) for r in teachers.scalars().all()],
        "students": [serialize_student_attendance(r) for r in students.scalars().all()],
    }


# ─── Current user ───────────────────────────────────────────────

def _acts_as_teacher(user: User) -> bool:
    return user.role in (Role.TEACHER.value, Role.ADMIN.value)


async def my_status(db: AsyncSession, user: User) -> dict:
    """Today's check-in/check-out flags for the caller's own profile."""
    tz = get_settings().tz
    today = local_date(utcnow(), tz)
    if _acts_as_teacher(user):
        teacher = await teacher_for_user(db, user.id)
        if teacher is None:
            return build_today_status([])
        stmt = _teacher_query(teacher_id=teacher.id, date_from=today, date_to=today)
        order = TeacherAttendance.timestamp
    elif user.role == Role.STUDENT.value:
        student = await student_for_user(db, user.id)
        if student is None:
            return build_today_status([])
        stmt = _student_query(student_id=student.id, date_from=today, date_to=today)
        order = StudentAttendance.timestamp
    else:
        return build_today_status([])
    records = (await db.execute(stmt.order_by(order))).scalars().all()
    return build_today_status(records)


async def my_attendance(
    db: AsyncSession, user: User, pagination: Pagination, **filters,
) -> tuple[dict | list[dict], Pagination | None]:
    """Caller's own records; admins see both teacher and student lists."""
    if user.role == Role.ADMIN.value:
        teachers, teacher_page = await list_teacher_attendance(db, pagination, **filters)
        students, student_page = await list_student_attendance(db, pagination, **filters)
        return {
            "teachers": {"data": teachers, **teacher_page.to_meta()},
            "students": {"data": students, **student_page.to_meta()},
        }, None
    if user.role == Role.TEACHER.value:
        teacher = await teacher_for_user(db, user.id)
        if teacher is None:
            raise ResourceNotFoundError("Teacher profile")
        return await list_teacher_attendance(db, pagination, teacher_id=teacher.id, **filters)
    if user.role == Role.STUDENT.value:
        student = await student_for_user(db, user.id)
        if student is None:
            raise ResourceNotFoundError("Student profile")
        return await list_student_attendance(db, pagination, student_id=student.id, **filters)
    raise BusinessRuleError("Invalid user role for attendance")


async def record_my_attendance(db: AsyncSession, user: User, data: MyAttendanceRequest) -> dict:
    """Record for the caller's own profile, stamped with the server clock."""
    stamped = AttendanceRecordRequest(
        **data.model_dump(include={"status", "location_coordinates", "photo_path"}),
    )
    if _acts_as_teacher(user):
        teacher = await teacher_for_user(db, user.id)
        if teacher is None:
            raise ResourceNotFoundError("Teacher profile")
        return await record_teacher_attendance(db, teacher.id, stamped)
    if user.role == Role.STUDENT.value:
        student = await student_for_user(db, user.id)
        if student is None:
            raise ResourceNotFoundError("Student profile")
        if data.schedule_id is None:
            raise BusinessRuleError("schedule_id is required for student attendance")
        return await record_student_attendance(db, student.id, data.schedule_id, stamped)
    raise BusinessRuleError("Invalid user role for attendance")


# ─── Corrections ────────────────────────────────────────────────

_MODELS = {
    "teacher": (TeacherAttendance, "teacher_id", "Teacher", _TEACHER_DETAIL, serialize_teacher_attendance),
    "student": (StudentAttendance, "student_id", "Student", _STUDENT_DETAIL, serialize_student_attendance),
}


async def update_attendance(
    db: AsyncSession, kind: AttendanceKind, record_id: int, patch: dict,
    owner_teacher_id: int | None = None,
) -> dict:
    model, person_field, person, detail, serialize = _MODELS[kind]
    record = await get_or_404(db, model, record_id, "Attendance record")
    if kind == "teacher" and owner_teacher_id is not None and record.teacher_id != owner_teacher_id:
        raise PermissionDeniedError("You can only update your own attendance records")

    status = patch.get("status")
    status = status.value if status is not None else record.status
    moment = _moment(patch["timestamp"]) if patch.get("timestamp") else as_aware(record.timestamp)
    person_id = getattr(record, person_field)
    await _reject_duplicate(
        db, model, getattr(model, person_field), person_id, status, moment, person,
        exclude_id=record_id,
    )

    record.status = status
    record.timestamp = moment
    record.attendance_date = local_date(moment, get_settings().tz)
    if "location_coordinates" in patch:
        record.location_coordinates = patch["location_coordinates"]
    if kind == "teacher" and "photo_path" in patch:
        record.photo_path = patch["photo_path"]
    await _commit_record(db, person, status, person_id)
    return serialize(await get_or_404(db, model, record_id, "Attendance record", *detail))


async def delete_attendance(db: AsyncSession, kind: AttendanceKind, record_id: int) -> None:
    model = _MODELS[kind][0]
    record = await get_or_404(db, model, record_id, "Attendance record")
    await db.delete(record)
    await db.commit()
    logger.info(f"{kind.capitalize()} attendance deleted", extra={"person_id": record_id})
