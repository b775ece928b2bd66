"""Attendance Rules — pure calendar-day logic for check-in/check-out records.

Invariants:
    - A person has at most one record per AttendanceStatus per local calendar day
    - Day bounds are [start-of-day, start-of-next-day) in the school time zone
    - Naive datetimes read back from storage are UTC (SQLite drops tzinfo on read)
    - No IO: callers pass records in, plain dicts come out

Design Decisions:
    - Week buckets start on Sunday, keyed by that Sunday's ISO date
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Protocol
from zoneinfo import ZoneInfo

from portal.core.domain_types import AttendanceGrouping, AttendanceStatus


class AttendanceRecordLike(Protocol):
    timestamp: datetime
    status: str


def as_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def local_date(moment: datetime, tz: ZoneInfo) -> date:
    """Calendar date of moment as seen in tz."""
    return as_aware(moment).astimezone(tz).date()


def day_bounds(moment: datetime | date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return [start-of-day, start-of-next-day) around moment, as UTC datetimes."""
    day = moment if not isinstance(moment, datetime) else local_date(moment, tz)
    start = datetime.combine(day, time.min, tzinfo=tz)
    next_start = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(timezone.utc), next_start.astimezone(timezone.utc)


def date_range_bounds(
    date_from: date | None, date_to: date | None, tz: ZoneInfo,
) -> tuple[datetime | None, datetime | None]:
    """Inclusive local date range → [lower, upper) UTC bounds (either may be None)."""
    lower = day_bounds(date_from, tz)[0] if date_from else None
    upper = day_bounds(date_to, tz)[1] if date_to else None
    return lower, upper


def build_today_status(records: Iterable[AttendanceRecordLike]) -> dict:
    """Summarize one day's records into check-in/check-out flags."""
    status = {
        "hasCheckedIn": False,
        "hasCheckedOut": False,
        "checkInTime": None,
        "checkOutTime": None,
    }
    for record in records:
        moment = as_aware(record.timestamp).isoformat()
        if record.status == AttendanceStatus.CHECK_IN.value:
            status["hasCheckedIn"] = True
            status["checkInTime"] = moment
        elif record.status == AttendanceStatus.CHECK_OUT.value:
            status["hasCheckedOut"] = True
            status["checkOutTime"] = moment
    return status


def count_by_status(statuses: Iterable[str]) -> dict:
    counts = {"masuk": 0, "pulang": 0}
    for status in statuses:
        if status == AttendanceStatus.CHECK_IN.value:
            counts["masuk"] += 1
        elif status == AttendanceStatus.CHECK_OUT.value:
            counts["pulang"] += 1
    return counts


def group_key(moment: datetime, group_by: AttendanceGrouping, tz: ZoneInfo) -> str:
    day = local_date(moment, tz)
    if group_by == AttendanceGrouping.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if group_by == AttendanceGrouping.WEEK:
        # date.weekday(): Monday=0 … Sunday=6
        sunday = day - timedelta(days=(day.weekday() + 1) % 7)
        return sunday.isoformat()
    return day.isoformat()


def group_attendance(
    records: Iterable[AttendanceRecordLike],
    group_by: AttendanceGrouping,
    tz: ZoneInfo,
    serialize=None,
) -> list[dict]:
    """Bucket records by day/week/month, counting masuk/pulang per bucket."""
    grouped: dict[str, dict] = {}
    for record in records:
        key = group_key(record.timestamp, group_by, tz)
        bucket = grouped.setdefault(
            key, {"date": key, "masuk": 0, "pulang": 0, "records": []},
        )
        if record.status == AttendanceStatus.CHECK_IN.value:
            bucket["masuk"] += 1
        elif record.status == AttendanceStatus.CHECK_OUT.value:
            bucket["pulang"] += 1
        bucket["records"].append(serialize(record) if serialize else record)
    return [grouped[key] for key in sorted(grouped)]
