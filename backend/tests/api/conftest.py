"""API test fixtures — FastAPI test client and a small seeded school.

Invariants:
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the readiness probe sees the test engine
    - `school` seeds admin/teacher/student accounts plus two classes, a subject
      and bearer headers for each role
"""

from datetime import time
from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient

import portal.infrastructure.database as db_module
from portal.core.domain_types import DayOfWeek, EmploymentStatus, Gender, Role
from portal.infrastructure.database import DatabaseSessionManager, get_db
from portal.infrastructure.security import hash_password
from portal.main import app
from portal.models import Schedule, SchoolClass, Student, Subject, Teacher, User
from portal.services.auth_service import issue_tokens

PASSWORD = "secret123"


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory

    async def override_get_db():
        async with manager.session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    original_manager = db_module.db_manager
    db_module.db_manager = manager

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_tokens(user)['accessToken']}"}


def make_user(username: str, role: Role, is_active: bool = True) -> User:
    return User(
        username=username,
        password_hash=hash_password(PASSWORD, rounds=4),
        role=role.value,
        is_active=is_active,
    )


@pytest.fixture
async def school(test_db):
    """Admin, two teachers, one student, two classes and a subject."""
    admin = make_user("admin", Role.ADMIN)
    teacher_user = make_user("guru1", Role.TEACHER)
    other_teacher_user = make_user("guru2", Role.TEACHER)
    student_user = make_user("siswa1", Role.STUDENT)
    staff = make_user("staff1", Role.STAFF)
    test_db.add_all([admin, teacher_user, other_teacher_user, student_user, staff])
    await test_db.flush()

    teacher = Teacher(
        user_id=teacher_user.id, full_name="Budi Santoso",
        employment_status=EmploymentStatus.ASN.value,
    )
    other_teacher = Teacher(
        user_id=other_teacher_user.id, full_name="Ani Wijaya",
        employment_status=EmploymentStatus.GTT.value,
    )
    test_db.add_all([teacher, other_teacher])
    await test_db.flush()

    class_a = SchoolClass(class_name="X RPL 1", grade_level=10, major="RPL")
    class_b = SchoolClass(class_name="X TKJ 1", grade_level=10, major="TKJ")
    subject = Subject(subject_code="MTK", subject_name="Matematika")
    test_db.add_all([class_a, class_b, subject])
    await test_db.flush()

    student = Student(
        user_id=student_user.id, current_class_id=class_a.id, nis="2024001",
        full_name="Siti Aminah", gender=Gender.FEMALE.value,
    )
    test_db.add(student)
    await test_db.commit()

    return SimpleNamespace(
        admin=admin,
        teacher_user=teacher_user,
        other_teacher_user=other_teacher_user,
        student_user=student_user,
        staff=staff,
        teacher=teacher,
        other_teacher=other_teacher,
        student=student,
        class_a=class_a,
        class_b=class_b,
        subject=subject,
        password=PASSWORD,
        admin_headers=bearer(admin),
        teacher_headers=bearer(teacher_user),
        other_teacher_headers=bearer(other_teacher_user),
        student_headers=bearer(student_user),
        staff_headers=bearer(staff),
    )


@pytest.fixture
async def monday_slot(test_db, school):
    """Monday 07:00-08:30 in room R101: teacher → class A."""
    schedule = Schedule(
        class_id=school.class_a.id,
        subject_id=school.subject.id,
        teacher_id=school.teacher.id,
        day_of_week=DayOfWeek.MONDAY.value,
        start_time=time(7, 0),
        end_time=time(8, 30),
        room="R101",
    )
    test_db.add(schedule)
    await test_db.commit()
    return schedule
