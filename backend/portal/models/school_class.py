"""Class ORM — a homeroom group of students (table `classes`).

Invariants:
    - (class_name, grade_level) is unique
    - grade_level in 1..12 (validated at the schema boundary)
    - homeroom_teacher_id / counselor_id reference teachers when set
"""

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId, TimestampMixin


class SchoolClass(TimestampMixin, Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("class_name", "grade_level", name="uq_classes_name_grade"),
    )

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    class_name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade_level: Mapped[int] = mapped_column(Integer, nullable=False)
    major: Mapped[str | None] = mapped_column(String(100), nullable=True)
    homeroom_teacher_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("teachers.id"), nullable=True,
    )
    counselor_id: Mapped[int | None] = mapped_column(
        BigIntId, ForeignKey("teachers.id"), nullable=True,
    )

    homeroom_teacher: Mapped["Teacher | None"] = relationship(
        "Teacher", back_populates="homeroom_classes", foreign_keys=[homeroom_teacher_id],
    )
    counselor: Mapped["Teacher | None"] = relationship(
        "Teacher", back_populates="counselor_classes", foreign_keys=[counselor_id],
    )
    students: Mapped[list["Student"]] = relationship("Student", back_populates="current_class")
    schedules: Mapped[list["Schedule"]] = relationship("Schedule", back_populates="school_class")
