"""Attendance routes — recording with per-day dedup, my-* views, bulk and reports.

School time zone in tests is Asia/Jakarta (UTC+7): 2026-03-02T01:00Z is 08:00
on Monday 2 March locally, 2026-03-02T18:00Z is already 01:00 on 3 March.

Invariants:
    - Same person, same status, same local day → 409 DUPLICATE_ATTENDANCE
    - The other status on the same day, or the same status on the next local
      day, is accepted
    - When the pre-check is bypassed the unique constraint still yields 409
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from portal.core.attendance_rules import local_date
from portal.services import attendance_service

CHECK_IN = "Masuk"
CHECK_OUT = "Pulang"


async def _record_teacher(client, school, status=CHECK_IN, timestamp="2026-03-02T01:00:00Z", teacher=None):
    teacher = teacher or school.teacher
    return await client.post(
        f"/api/attendance/record/teacher/{teacher.id}",
        json={"status": status, "timestamp": timestamp},
        headers=school.admin_headers,
    )


async def _record_student(client, school, schedule_id, status=CHECK_IN, timestamp="2026-03-02T01:00:00Z"):
    return await client.post(
        f"/api/attendance/record/student/{school.student.id}",
        json={"status": status, "timestamp": timestamp, "scheduleId": schedule_id},
        headers=school.teacher_headers,
    )


# -- teacher recording ----------------------------------------------------------

async def test_record_teacher_attendance(client, school):
    res = await _record_teacher(client, school)
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Teacher attendance recorded successfully"
    assert body["data"]["teacher_id"] == str(school.teacher.id)
    assert body["data"]["attendance_date"] == "2026-03-02"
    assert body["data"]["teacher"]["full_name"] == "Budi Santoso"
    assert body["data"]["teacher"]["user"] == {"username": "guru1"}


async def test_same_status_same_day_is_409(client, school):
    await _record_teacher(client, school)
    res = await _record_teacher(client, school, timestamp="2026-03-02T09:00:00Z")
    assert res.status_code == 409
    body = res.json()
    assert body["error"]["code"] == "DUPLICATE_ATTENDANCE"
    assert body["message"] == "Teacher already recorded masuk attendance today"


async def test_same_local_day_across_utc_midnight_is_409(client, school):
    await _record_teacher(client, school)
    # 2026-03-01T17:30Z is 00:30 on 2 March in Jakarta
    res = await _record_teacher(client, school, timestamp="2026-03-01T17:30:00Z")
    assert res.status_code == 409


async def test_other_status_same_day_is_accepted(client, school):
    await _record_teacher(client, school)
    res = await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T09:00:00Z")
    assert res.status_code == 201


async def test_next_local_day_is_accepted(client, school):
    await _record_teacher(client, school)
    res = await _record_teacher(client, school, timestamp="2026-03-02T18:00:00Z")
    assert res.status_code == 201
    assert res.json()["data"]["attendance_date"] == "2026-03-03"


async def test_other_teacher_same_day_is_accepted(client, school):
    await _record_teacher(client, school)
    res = await _record_teacher(client, school, teacher=school.other_teacher)
    assert res.status_code == 201


async def test_unique_constraint_catches_duplicates_past_the_precheck(client, school, monkeypatch):
    async def skip_precheck(*args, **kwargs):
        return None

    await _record_teacher(client, school)
    monkeypatch.setattr(attendance_service, "_reject_duplicate", skip_precheck)
    res = await _record_teacher(client, school, timestamp="2026-03-02T05:00:00Z")
    assert res.status_code == 409
    assert res.json()["error"]["code"] == "DUPLICATE_ATTENDANCE"


async def test_unknown_teacher_is_404(client, school):
    res = await client.post(
        "/api/attendance/record/teacher/99999",
        json={"status": CHECK_IN},
        headers=school.admin_headers,
    )
    assert res.status_code == 404


async def test_naive_timestamp_is_school_wall_clock(client, school):
    # 20:00 in Jakarta on 2 March, sent without an offset
    res = await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T20:00:00")
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["attendance_date"] == "2026-03-02"
    assert data["timestamp"] == "2026-03-02T13:00:00+00:00"


async def test_naive_evening_timestamp_dedups_against_same_local_day(client, school):
    await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T09:00:00Z")
    res = await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T21:30:00")
    assert res.status_code == 409


async def test_invalid_status_is_400(client, school):
    res = await client.post(
        f"/api/attendance/record/teacher/{school.teacher.id}",
        json={"status": "Izin"},
        headers=school.admin_headers,
    )
    assert res.status_code == 400


# -- student recording ----------------------------------------------------------

async def test_record_student_attendance(client, school, monday_slot):
    res = await _record_student(client, school, monday_slot.id)
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["schedule_id"] == str(monday_slot.id)
    assert data["student"]["class"] == {"class_name": "X RPL 1"}

    dup = await _record_student(client, school, monday_slot.id, timestamp="2026-03-02T03:00:00Z")
    assert dup.status_code == 409
    assert dup.json()["message"] == "Student already recorded masuk attendance today"


async def test_student_outside_schedule_class_is_400(client, school, monday_slot, test_db):
    school.student.current_class_id = school.class_b.id
    test_db.add(school.student)
    await test_db.commit()
    res = await _record_student(client, school, monday_slot.id)
    assert res.status_code == 400
    assert res.json()["message"] == "Student does not belong to this class"


async def test_student_record_unknown_schedule_is_404(client, school):
    res = await _record_student(client, school, 99999)
    assert res.status_code == 404
    assert res.json()["message"] == "Schedule not found"


# -- my-* -------------------------------------------------------------------------

async def test_my_status_before_and_after_check_in(client, school):
    res = await client.get("/api/attendance/my-status", headers=school.teacher_headers)
    assert res.json()["data"] == {
        "hasCheckedIn": False, "hasCheckedOut": False, "checkInTime": None, "checkOutTime": None,
    }
    recorded = await client.post(
        "/api/attendance/my-attendance", json={"status": CHECK_IN}, headers=school.teacher_headers,
    )
    assert recorded.status_code == 201
    res = await client.get("/api/attendance/my-status", headers=school.teacher_headers)
    status = res.json()["data"]
    assert status["hasCheckedIn"] is True
    assert status["hasCheckedOut"] is False
    assert status["checkInTime"] is not None


async def test_my_attendance_lists_only_own_records(client, school):
    await _record_teacher(client, school)
    await _record_teacher(client, school, teacher=school.other_teacher)
    res = await client.get("/api/attendance/my-attendance", headers=school.teacher_headers)
    assert res.status_code == 200
    body = res.json()
    assert [r["teacher_id"] for r in body["data"]] == [str(school.teacher.id)]
    assert body["meta"]["pagination"]["total"] == 1


async def test_student_my_attendance_requires_schedule(client, school):
    res = await client.post(
        "/api/attendance/my-attendance", json={"status": CHECK_IN}, headers=school.student_headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "schedule_id is required for student attendance"


async def test_my_attendance_ignores_client_timestamp(client, school, monday_slot):
    res = await client.post(
        "/api/attendance/my-attendance",
        json={"status": CHECK_IN, "timestamp": "2020-01-06T00:00:00Z", "scheduleId": monday_slot.id},
        headers=school.student_headers,
    )
    assert res.status_code == 201
    data = res.json()["data"]
    today = local_date(datetime.now(timezone.utc), ZoneInfo("Asia/Jakarta"))
    assert data["attendance_date"] == today.isoformat()
    assert not data["timestamp"].startswith("2020-")


# -- bulk ---------------------------------------------------------------------------

async def test_bulk_record_reports_each_item(client, school, monday_slot):
    res = await client.post(
        "/api/attendance/bulk-record",
        json={"records": [
            {"type": "teacher", "teacher_id": school.teacher.id, "status": CHECK_IN,
             "timestamp": "2026-03-02T01:00:00Z"},
            {"type": "teacher", "teacher_id": school.teacher.id, "status": CHECK_IN,
             "timestamp": "2026-03-02T02:00:00Z"},
            {"type": "student", "student_id": school.student.id, "schedule_id": monday_slot.id,
             "status": CHECK_IN, "timestamp": "2026-03-02T01:00:00Z"},
        ]},
        headers=school.admin_headers,
    )
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Bulk attendance recording completed"
    assert [r["success"] for r in body["data"]] == [True, False, True]
    assert body["data"][1]["error"] == "Teacher already recorded masuk attendance today"
    assert body["meta"]["summary"] == {"total": 3, "succeeded": 2, "failed": 1}


async def test_bulk_item_missing_person_is_400(client, school):
    res = await client.post(
        "/api/attendance/bulk-record",
        json={"records": [{"type": "student", "status": CHECK_IN}]},
        headers=school.admin_headers,
    )
    assert res.status_code == 400


# -- reports ------------------------------------------------------------------------

async def test_summary_counts_one_local_day(client, school):
    await _record_teacher(client, school)
    await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T09:00:00Z")
    await _record_teacher(client, school, timestamp="2026-03-02T18:00:00Z")
    res = await client.get(
        "/api/attendance/summary?date=2026-03-02&type=teacher", headers=school.admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"] == {"teachers": {"masuk": 1, "pulang": 1}}


async def test_report_groups_by_month(client, school):
    await _record_teacher(client, school)
    await _record_teacher(client, school, timestamp="2026-03-10T01:00:00Z")
    res = await client.get(
        "/api/attendance/report?type=teacher&group_by=month", headers=school.admin_headers,
    )
    assert res.status_code == 200
    groups = res.json()["data"]
    assert len(groups) == 1
    assert groups[0]["date"] == "2026-03"
    assert groups[0]["masuk"] == 2
    assert len(groups[0]["records"]) == 2


async def test_daily_report(client, school, monday_slot):
    await _record_teacher(client, school)
    await _record_student(client, school, monday_slot.id)
    res = await client.get("/api/attendance/daily-report/2026-03-02", headers=school.teacher_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["date"] == "2026-03-02"
    assert data["summary"]["teachers"]["masuk"] == 1
    assert data["summary"]["students"]["masuk"] == 1
    assert len(data["teachers"]) == 1
    assert len(data["students"]) == 1


# -- corrections ----------------------------------------------------------------------

@pytest.fixture
async def check_in_and_out(client, school):
    check_in = await _record_teacher(client, school)
    check_out = await _record_teacher(client, school, status=CHECK_OUT, timestamp="2026-03-02T09:00:00Z")
    return check_in.json()["data"], check_out.json()["data"]


async def test_update_into_duplicate_is_409(client, school, check_in_and_out):
    _, check_out = check_in_and_out
    res = await client.put(
        f"/api/attendance/teacher/{check_out['id']}",
        json={"status": CHECK_IN},
        headers=school.admin_headers,
    )
    assert res.status_code == 409


async def test_update_moves_attendance_date(client, school, check_in_and_out):
    check_in, _ = check_in_and_out
    res = await client.put(
        f"/api/attendance/teacher/{check_in['id']}",
        json={"timestamp": "2026-03-04T01:00:00Z"},
        headers=school.admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["attendance_date"] == "2026-03-04"


async def test_teacher_cannot_update_other_teachers_record(client, school, check_in_and_out):
    check_in, _ = check_in_and_out
    res = await client.put(
        f"/api/attendance/teacher/{check_in['id']}",
        json={"location_coordinates": "-6.2,106.8"},
        headers=school.other_teacher_headers,
    )
    assert res.status_code == 403


async def test_delete_is_admin_only(client, school, check_in_and_out):
    check_in, _ = check_in_and_out
    res = await client.delete(
        f"/api/attendance/teacher/{check_in['id']}", headers=school.teacher_headers,
    )
    assert res.status_code == 403
    res = await client.delete(
        f"/api/attendance/teacher/{check_in['id']}", headers=school.admin_headers,
    )
    assert res.status_code == 200
    again = await _record_teacher(client, school)
    assert again.status_code == 201
