"""Attendance ORM — check-in (Masuk) / check-out (Pulang) events for teachers and students.

Invariants:
    - timestamp stored timezone-aware (UTC)
    - attendance_date is the calendar date of timestamp in the school time zone
    - (person_id, status, attendance_date) is unique: at most one record per
      status per person per day, even under concurrent inserts

Design Decisions:
    - attendance_date denormalized from timestamp so the database can enforce the
      per-day rule with a plain unique constraint
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId


class TeacherAttendance(Base):
    __tablename__ = "teacher_attendances"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id", "status", "attendance_date",
            name="uq_teacher_attendance_daily_status",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    teacher_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("teachers.id"), nullable=False, index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    location_coordinates: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_path: Mapped[str | None] = mapped_column(String(255), nullable=True)

    teacher: Mapped["Teacher"] = relationship("Teacher")


class StudentAttendance(Base):
    __tablename__ = "student_attendances"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "status", "attendance_date",
            name="uq_student_attendance_daily_status",
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("students.id"), nullable=False, index=True,
    )
    schedule_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("schedules.id"), nullable=True,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    attendance_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    location_coordinates: Mapped[str | None] = mapped_column(String(100), nullable=True)

    student: Mapped["Student"] = relationship("Student", back_populates="attendances")
    schedule: Mapped["Schedule | None"] = relationship("Schedule")
