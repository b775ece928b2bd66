"""Domain Types — enum values are the stored/wire strings.

Tests:
    - Week order is Monday first, seven days
    - Attendance statuses are exactly Masuk/Pulang
    - Enums serialize to their string value
"""

from portal.core.domain_types import (
    WEEK_ORDER, AttendanceStatus, DayOfWeek, EmploymentStatus, Role, StudentStatus,
)


def test_week_order_is_monday_first():
    assert [d.value for d in WEEK_ORDER] == [
        "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu",
    ]


def test_attendance_status_has_two_values():
    assert {s.value for s in AttendanceStatus} == {"Masuk", "Pulang"}


def test_roles():
    assert {r.value for r in Role} == {"admin", "teacher", "student", "staff"}


def test_enums_compare_equal_to_their_strings():
    assert DayOfWeek.FRIDAY == "Jumat"
    assert EmploymentStatus.TETAP == "Tetap"
    assert StudentStatus("LULUS") is StudentStatus.GRADUATED
