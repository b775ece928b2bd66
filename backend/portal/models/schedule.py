"""Schedule ORM — a recurring weekly slot binding class, subject and teacher.

Invariants:
    - start_time < end_time (CHECK constraint)
    - day_of_week is one of DayOfWeek
    - No two rows overlap for the same teacher, class or (non-blank) room on the
      same day; enforced by services/schedule_service.py, not by the table

Design Decisions:
    - (day_of_week, teacher_id) and (day_of_week, class_id) indexed: the conflict
      check always loads one day's rows for a teacher/class/room
"""

from datetime import time

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId, TimestampMixin


class Schedule(TimestampMixin, Base):
    __tablename__ = "schedules"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_schedules_time_order"),
        Index("ix_schedules_day_teacher", "day_of_week", "teacher_id"),
        Index("ix_schedules_day_class", "day_of_week", "class_id"),
        Index("ix_schedules_day_room", "day_of_week", "room"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("classes.id"), nullable=False)
    subject_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("subjects.id"), nullable=False)
    teacher_id: Mapped[int] = mapped_column(BigIntId, ForeignKey("teachers.id"), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)

    school_class: Mapped["SchoolClass"] = relationship("SchoolClass", back_populates="schedules")
    subject: Mapped["Subject"] = relationship("Subject", back_populates="schedules")
    teacher: Mapped["Teacher"] = relationship("Teacher", back_populates="schedules")
    journals: Mapped[list["TeachingJournal"]] = relationship(
        "TeachingJournal", back_populates="schedule",
    )
