"""Error Hierarchy — status codes, codes and the error envelope."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from portal.api.deps import require_roles
from portal.core.domain_types import Role
from portal.core.errors import (
    AuthenticationError, BusinessRuleError, DatabaseError, DataIntegrityError, ErrorContext,
    DuplicateAttendanceError, DuplicateResourceError, PermissionDeniedError, PortalError,
    ResourceNotFoundError, ScheduleConflictError,
)
from portal.infrastructure.database import translate_db_error
from portal.models import User


@pytest.mark.parametrize("exc, status, code", [
    (BusinessRuleError("nope"), 400, "BUSINESS_RULE_VIOLATION"),
    (AuthenticationError(), 401, "AUTHENTICATION_FAILED"),
    (PermissionDeniedError(), 403, "PERMISSION_DENIED"),
    (ResourceNotFoundError("Teacher", 9), 404, "RESOURCE_NOT_FOUND"),
    (DuplicateResourceError("Username already exists", "username"), 409, "DUPLICATE_RESOURCE"),
    (ScheduleConflictError("clash", "room", 3), 409, "SCHEDULE_CONFLICT"),
    (DuplicateAttendanceError("Teacher", "Masuk"), 409, "DUPLICATE_ATTENDANCE"),
])
def test_status_and_code(exc, status, code):
    assert isinstance(exc, PortalError)
    assert exc.http_status == status
    assert exc.code == code


def test_not_found_message_and_context():
    exc = ResourceNotFoundError("Teacher", 9)
    assert exc.message == "Teacher not found"
    assert exc.context.resource_id == "9"


def test_duplicate_attendance_message_lowercases_status():
    assert DuplicateAttendanceError("Student", "Pulang").message == (
        "Student already recorded pulang attendance today"
    )


def test_envelope_includes_details_when_present():
    body = ScheduleConflictError("clash", "teacher", 12).to_response()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"] == {
        "code": "SCHEDULE_CONFLICT",
        "category": "conflict",
        "severity": "error",
        "details": [{"conflict": "teacher", "schedule_id": "12"}],
    }


def test_envelope_omits_empty_details():
    body = BusinessRuleError("nope").to_response()
    assert "details" not in body["error"]
    assert body["message"] == "nope"


# -- database error translation -------------------------------------------------------

def _integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, Exception(message))


def test_unique_violation_becomes_409():
    exc = translate_db_error(_integrity("UNIQUE constraint failed: users.username"))
    assert isinstance(exc, DataIntegrityError)
    assert exc.http_status == 409


def test_foreign_key_violation_becomes_400():
    exc = translate_db_error(_integrity("FOREIGN KEY constraint failed"))
    assert isinstance(exc, BusinessRuleError)
    assert exc.message == "Invalid input data"


def test_operational_error_becomes_503():
    exc = translate_db_error(OperationalError("SELECT 1", {}, Exception("connection refused")))
    assert isinstance(exc, DatabaseError)
    assert exc.http_status == 503


# -- log context --------------------------------------------------------------------

def test_log_context_keeps_only_set_fields():
    exc = ResourceNotFoundError("Schedule", 12)
    assert exc.log_context() == {"resource_type": "Schedule", "resource_id": "12"}


def test_log_context_is_not_sent_to_client():
    exc = PermissionDeniedError(context=ErrorContext(user_id=7, debug_info={"role": "student"}))
    body = exc.to_response()
    assert "7" not in str(body["error"])
    assert exc.log_context() == {"user_id": 7, "debug_info": {"role": "student"}}


async def test_role_gate_records_who_was_refused():
    checker = require_roles(Role.ADMIN, Role.TEACHER)
    with pytest.raises(PermissionDeniedError) as info:
        await checker(User(id=42, username="siswa9", role=Role.STUDENT.value))
    assert info.value.context.user_id == 42
    assert info.value.context.debug_info == {"role": "student", "allowed": ["admin", "teacher"]}
