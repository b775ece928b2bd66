"""User ORM — login accounts; teachers and students hang a profile off a user.

Invariants:
    - username is unique
    - password_hash is a bcrypt hash, never the plain password
    - role is one of Role (admin/teacher/student/staff)
    - a user has at most one teacher profile and at most one student profile
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.domain_types import Role
from portal.db.base import Base, BigIntId, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.STUDENT.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    teacher: Mapped["Teacher | None"] = relationship(
        "Teacher", back_populates="user", uselist=False,
    )
    student: Mapped["Student | None"] = relationship(
        "Student", back_populates="user", uselist=False,
    )
