"""Student ORM — pupil profile attached to a user account.

Invariants:
    - user_id, nis, nisn and rfid_uid are each unique (nisn/rfid_uid nullable)
    - status is one of StudentStatus, gender one of Gender
    - current_class_id is null for students not placed in a class
"""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.domain_types import StudentStatus
from portal.db.base import Base, BigIntId, TimestampMixin


class Student(TimestampMixin, Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id"), nullable=False, unique=True,
    )
    current_class_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("classes.id"), nullable=True, index=True,
    )
    nis: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    nisn: Mapped[str | None] = mapped_column(String(10), nullable=True, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(1), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=StudentStatus.ACTIVE.value,
    )
    rfid_uid: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)

    user: Mapped["User"] = relationship("User", back_populates="student")
    current_class: Mapped["SchoolClass | None"] = relationship(
        "SchoolClass", back_populates="students",
    )
    attendances: Mapped[list["StudentAttendance"]] = relationship(
        "StudentAttendance", back_populates="student",
    )
