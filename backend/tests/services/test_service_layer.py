"""Service layer — seeding, the schedule day lock and bulk attendance isolation.

Invariants:
    - Seeding twice leaves exactly one admin
    - lock_day is a no-op outside PostgreSQL
    - A failing bulk item does not undo the items recorded before it
"""

from datetime import datetime, timezone

from sqlalchemy import func, select

from portal.core.domain_types import AttendanceStatus, DayOfWeek
from portal.models import Schedule, Teacher, TeacherAttendance, User
from portal.schemas.attendance import BulkAttendanceItem
from portal.seed import ADMIN_USERNAME, _seed
from portal.services import attendance_service, schedule_service


async def test_seed_is_idempotent(test_session_factory, test_db):
    await _seed(test_session_factory, rounds=4)
    await _seed(test_session_factory, rounds=4)
    admins = await test_db.scalar(
        select(func.count(User.id)).where(User.username == ADMIN_USERNAME),
    )
    assert admins == 1
    assert await test_db.scalar(select(func.count(Schedule.id))) == 1


async def test_lock_day_is_noop_on_sqlite(test_db):
    await schedule_service.lock_day(test_db, DayOfWeek.FRIDAY)


async def test_bulk_failure_keeps_earlier_records(test_session_factory, test_db):
    await _seed(test_session_factory, rounds=4)
    teacher_id = await test_db.scalar(select(Teacher.id))
    moment = datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)
    items = [
        BulkAttendanceItem(type="teacher", teacher_id=teacher_id, status=AttendanceStatus.CHECK_IN, timestamp=moment),
        BulkAttendanceItem(type="teacher", teacher_id=teacher_id, status=AttendanceStatus.CHECK_IN, timestamp=moment),
        BulkAttendanceItem(type="teacher", teacher_id=teacher_id, status=AttendanceStatus.CHECK_OUT, timestamp=moment),
    ]
    async with test_session_factory() as db:
        results = await attendance_service.bulk_record(db, items)

    assert [r["success"] for r in results] == [True, False, True]
    stored = await test_db.scalar(select(func.count(TeacherAttendance.id)))
    assert stored == 2
