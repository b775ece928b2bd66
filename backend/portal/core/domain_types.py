"""Domain Types — enums and value types shared by models, schemas and services.

Invariants:
    - All valid states encoded as Enums; services never match raw strings
    - Enum values are the exact strings stored in the database and sent over the wire

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - DayOfWeek uses Indonesian day names; WEEK_ORDER fixes Monday-first ordering
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """User roles used for authorization."""
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    STAFF = "staff"


class EmploymentStatus(str, Enum):
    ASN = "ASN"
    GTT = "GTT"
    PTT = "PTT"
    TETAP = "Tetap"


class Gender(str, Enum):
    MALE = "L"
    FEMALE = "P"


class StudentStatus(str, Enum):
    ACTIVE = "AKTIF"
    GRADUATED = "LULUS"
    TRANSFERRED = "PINDAH"
    DROPPED_OUT = "DO"


class DayOfWeek(str, Enum):
    """Day a weekly schedule slot recurs on."""
    MONDAY = "Senin"
    TUESDAY = "Selasa"
    WEDNESDAY = "Rabu"
    THURSDAY = "Kamis"
    FRIDAY = "Jumat"
    SATURDAY = "Sabtu"
    SUNDAY = "Minggu"


WEEK_ORDER: tuple[DayOfWeek, ...] = tuple(DayOfWeek)


class AttendanceStatus(str, Enum):
    """Check-in (Masuk) or check-out (Pulang)."""
    CHECK_IN = "Masuk"
    CHECK_OUT = "Pulang"


class AttendanceGrouping(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class AttendanceSubject(str, Enum):
    """Whose attendance a report or summary covers."""
    TEACHER = "teacher"
    STUDENT = "student"
    ALL = "all"
