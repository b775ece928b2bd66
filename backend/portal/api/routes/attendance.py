"""Attendance Routes — check-in/check-out recording, listings and reports.

Invariants:
    - Record endpoints answer 409 DUPLICATE_ATTENDANCE when the person already
      has a record with the same status on the same school day
    - my-* endpoints are open to any authenticated user and act on the caller's
      own profile
    - Deleting a record is admin only
"""

from datetime import date
from typing import Annotated, Literal

from fastapi import APIRouter, Query, status

from portal.api.deps import AdminOrTeacher, AdminUser, CurrentUser, DbSession, PageParams
from portal.core.domain_types import AttendanceGrouping, AttendanceStatus, AttendanceSubject, Role
from portal.core.envelope import success
from portal.core.errors import ResourceNotFoundError
from portal.schemas.attendance import (
    AttendanceRecordRequest, AttendanceUpdate, BulkAttendanceRequest, MyAttendanceRequest,
    StudentAttendanceRequest,
)
from portal.services import attendance_service
from portal.services.teacher_service import teacher_for_user

router = APIRouter(prefix="/api/attendance", tags=["attendance"])

Kind = Literal["teacher", "student"]


# ─── Current user ───────────────────────────────────────────────

@router.get("/my-status")
async def my_status(user: CurrentUser, db: DbSession):
    return success(
        "Today's attendance status retrieved successfully",
        await attendance_service.my_status(db, user),
    )


@router.get("/my-attendance")
async def my_attendance(
    user: CurrentUser,
    db: DbSession,
    pagination: PageParams,
    status: AttendanceStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    data, page = await attendance_service.my_attendance(
        db, user, pagination,
        status=status.value if status else None, date_from=date_from, date_to=date_to,
    )
    return success(
        "Attendance records retrieved successfully", data, page.to_meta() if page else None,
    )


@router.post("/my-attendance", status_code=status.HTTP_201_CREATED)
async def record_my_attendance(body: MyAttendanceRequest, user: CurrentUser, db: DbSession):
    record = await attendance_service.record_my_attendance(db, user, body)
    return success("Attendance recorded successfully", record)


# ─── Reports ────────────────────────────────────────────────────

@router.get("/summary")
async def attendance_summary(
    _: AdminOrTeacher,
    db: DbSession,
    day: Annotated[date, Query(alias="date")],
    subject: Annotated[AttendanceSubject, Query(alias="type")] = AttendanceSubject.ALL,
):
    summary = await attendance_service.attendance_summary(db, day, subject)
    return success("Attendance summary retrieved successfully", summary)


@router.get("/report")
async def attendance_report(
    _: AdminOrTeacher,
    db: DbSession,
    kind: Annotated[Kind, Query(alias="type")] = "student",
    group_by: AttendanceGrouping = AttendanceGrouping.DAY,
    teacher_id: int | None = None,
    student_id: int | None = None,
    class_id: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    report = await attendance_service.attendance_report(
        db, kind, group_by,
        teacher_id=teacher_id, student_id=student_id, class_id=class_id,
        date_from=date_from, date_to=date_to,
    )
    return success("Attendance report generated successfully", report)


@router.get("/stats")
async def attendance_stats(
    _: AdminOrTeacher, db: DbSession, date_from: date | None = None, date_to: date | None = None,
):
    stats = await attendance_service.attendance_stats(db, date_from, date_to)
    return success("Attendance statistics retrieved successfully", stats)


@router.get("/daily-report/{day}")
async def daily_report(day: date, _: AdminOrTeacher, db: DbSession):
    return success(
        "Daily attendance report retrieved successfully",
        await attendance_service.daily_report(db, day),
    )


# ─── Listings ───────────────────────────────────────────────────

@router.get("/teachers")
async def list_teacher_attendance(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    teacher_id: int | None = None,
    status: AttendanceStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    records, page = await attendance_service.list_teacher_attendance(
        db, pagination, teacher_id=teacher_id,
        status=status.value if status else None, date_from=date_from, date_to=date_to,
    )
    return success("Teacher attendance retrieved successfully", records, page.to_meta())


@router.get("/students")
async def list_student_attendance(
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    student_id: int | None = None,
    class_id: int | None = None,
    status: AttendanceStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
):
    records, page = await attendance_service.list_student_attendance(
        db, pagination, student_id=student_id, class_id=class_id,
        status=status.value if status else None, date_from=date_from, date_to=date_to,
    )
    return success("Student attendance retrieved successfully", records, page.to_meta())


@router.get("/teachers/{teacher_id}")
async def teacher_attendance(
    teacher_id: int,
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    date_from: date | None = None,
    date_to: date | None = None,
):
    records, page = await attendance_service.list_teacher_attendance(
        db, pagination, teacher_id=teacher_id, date_from=date_from, date_to=date_to,
    )
    return success("Teacher attendance retrieved successfully", records, page.to_meta())


@router.get("/students/{student_id}")
async def student_attendance(
    student_id: int,
    _: AdminOrTeacher,
    db: DbSession,
    pagination: PageParams,
    date_from: date | None = None,
    date_to: date | None = None,
):
    records, page = await attendance_service.list_student_attendance(
        db, pagination, student_id=student_id, date_from=date_from, date_to=date_to,
    )
    return success("Student attendance retrieved successfully", records, page.to_meta())


# ─── Recording ──────────────────────────────────────────────────

@router.post("/bulk-record", status_code=status.HTTP_201_CREATED)
async def bulk_record(body: BulkAttendanceRequest, _: AdminOrTeacher, db: DbSession):
    results = await attendance_service.bulk_record(db, body.records)
    succeeded = sum(1 for r in results if r["success"])
    return success(
        "Bulk attendance recording completed",
        results,
        {"summary": {"total": len(results), "succeeded": succeeded, "failed": len(results) - succeeded}},
    )


@router.post("/record/teacher/{teacher_id}", status_code=status.HTTP_201_CREATED)
async def record_teacher(
    teacher_id: int, body: AttendanceRecordRequest, _: AdminOrTeacher, db: DbSession,
):
    record = await attendance_service.record_teacher_attendance(db, teacher_id, body)
    return success("Teacher attendance recorded successfully", record)


@router.post("/record/student/{student_id}", status_code=status.HTTP_201_CREATED)
async def record_student(
    student_id: int, body: StudentAttendanceRequest, _: AdminOrTeacher, db: DbSession,
):
    record = await attendance_service.record_student_attendance(
        db, student_id, body.schedule_id, body,
    )
    return success("Student attendance recorded successfully", record)


# ─── Corrections ────────────────────────────────────────────────

@router.put("/{kind}/{attendance_id}")
async def update_attendance(
    kind: Kind, attendance_id: int, body: AttendanceUpdate, user: AdminOrTeacher, db: DbSession,
):
    owner = None
    if kind == "teacher" and user.role == Role.TEACHER.value:
        teacher = await teacher_for_user(db, user.id)
        if teacher is None:
            raise ResourceNotFoundError("Teacher profile")
        owner = teacher.id
    record = await attendance_service.update_attendance(
        db, kind, attendance_id, body.to_patch(), owner_teacher_id=owner,
    )
    return success("Attendance updated successfully", record)


@router.delete("/{kind}/{attendance_id}")
async def delete_attendance(kind: Kind, attendance_id: int, _: AdminUser, db: DbSession):
    await attendance_service.delete_attendance(db, kind, attendance_id)
    return success("Attendance deleted successfully")
