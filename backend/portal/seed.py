"""Seed Script — creates an admin account and a small sample school.

Run after migrations:  python -m portal.seed

Invariants:
    - Idempotent: does nothing if the admin user already exists
    - Passwords are hashed with the configured bcrypt cost
"""

import asyncio
import logging
from datetime import time

from sqlalchemy import select

from portal.config import get_settings
from portal.core.domain_types import DayOfWeek, EmploymentStatus, Gender, Role
from portal.db.session import script_sessions
from portal.infrastructure.observability import setup_logging
from portal.infrastructure.security import hash_password
from portal.models import Schedule, SchoolClass, Student, Subject, Teacher, User

logger = logging.getLogger("portal.seed")

ADMIN_USERNAME = "admin"
DEFAULT_PASSWORD = "password123"


def _user(username: str, role: Role, rounds: int) -> User:
    return User(
        username=username,
        password_hash=hash_password(DEFAULT_PASSWORD, rounds),
        role=role.value,
        is_active=True,
    )


async def _seed(session_factory, rounds: int) -> None:
    async with session_factory() as db:
        existing = await db.scalar(select(User.id).where(User.username == ADMIN_USERNAME))
        if existing is not None:
            logger.info("Seed skipped: admin user already exists")
            return

        admin = _user(ADMIN_USERNAME, Role.ADMIN, rounds)
        teacher_user = _user("guru1", Role.TEACHER, rounds)
        student_user = _user("siswa1", Role.STUDENT, rounds)
        db.add_all([admin, teacher_user, student_user])
        await db.flush()

        teacher = Teacher(
            user_id=teacher_user.id,
            full_name="Budi Santoso",
            employment_status=EmploymentStatus.ASN.value,
        )
        db.add(teacher)
        await db.flush()

        school_class = SchoolClass(
            class_name="X RPL 1", grade_level=10, major="RPL", homeroom_teacher_id=teacher.id,
        )
        subject = Subject(subject_code="MTK", subject_name="Matematika")
        db.add_all([school_class, subject])
        await db.flush()

        db.add(Student(
            user_id=student_user.id,
            current_class_id=school_class.id,
            nis="2024001",
            full_name="Siti Aminah",
            gender=Gender.FEMALE.value,
        ))
        db.add(Schedule(
            class_id=school_class.id,
            subject_id=subject.id,
            teacher_id=teacher.id,
            day_of_week=DayOfWeek.MONDAY.value,
            start_time=time(7, 0),
            end_time=time(8, 30),
            room="R101",
        ))
        await db.commit()
        logger.info("Seed data created")


async def seed() -> None:
    settings = get_settings()
    async with script_sessions(settings.database_url) as session_factory:
        await _seed(session_factory, settings.bcrypt_rounds)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
