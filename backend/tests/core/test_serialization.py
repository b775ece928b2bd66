"""Serialization helpers and the response envelope."""

from datetime import date, datetime, time, timezone

import pytest

from portal.core.envelope import error, success
from portal.core.serialization import (
    parse_time, serialize_date, serialize_datetime, serialize_id, serialize_time,
)


def test_ids_become_strings():
    assert serialize_id(42) == "42"
    assert serialize_id(None) is None


def test_wire_formats():
    assert serialize_time(time(7, 5)) == "07:05:00"
    assert serialize_date(date(2026, 3, 2)) == "2026-03-02"
    assert serialize_datetime(datetime(2026, 3, 2, 1, 0)) == "2026-03-02T01:00:00+00:00"
    assert serialize_datetime(datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)) == "2026-03-02T01:00:00+00:00"


@pytest.mark.parametrize("raw, expected", [
    ("07:30", time(7, 30)),
    ("07:30:15", time(7, 30, 15)),
    (" 13:00 ", time(13, 0)),
])
def test_parse_time(raw, expected):
    assert parse_time(raw) == expected


@pytest.mark.parametrize("raw", ["7.30", "25:00", "noon", ""])
def test_parse_time_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_time(raw)


def test_success_envelope():
    body = success("Done", {"id": "1"}, {"pagination": {"page": 1}})
    assert body["success"] is True
    assert body["message"] == "Done"
    assert body["data"] == {"id": "1"}
    assert body["meta"] == {"pagination": {"page": 1}}
    assert "timestamp" in body


def test_success_without_meta_omits_key():
    assert "meta" not in success("Done")


def test_error_envelope():
    body = error("Nope")
    assert body["success"] is False
    assert body["data"] is None
