"""TeachingJournal ORM — what was taught in one session of a schedule.

Invariants:
    - (schedule_id, teaching_date) is unique: one journal per lesson
"""

from datetime import date

from sqlalchemy import Date, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId, TimestampMixin


class TeachingJournal(TimestampMixin, Base):
    __tablename__ = "teaching_journals"
    __table_args__ = (
        UniqueConstraint("schedule_id", "teaching_date", name="uq_journals_schedule_date"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    schedule_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("schedules.id"), nullable=False, index=True,
    )
    teaching_date: Mapped[date] = mapped_column(Date, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    student_attendance_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    schedule: Mapped["Schedule"] = relationship("Schedule", back_populates="journals")
