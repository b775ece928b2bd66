"""Teacher ORM — staff profile attached to a user account.

Invariants:
    - user_id, nip and nik are each unique (nip/nik nullable)
    - employment_status is one of EmploymentStatus
    - signature_image_path is a stored path string, not file content
"""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId, TimestampMixin


class Teacher(TimestampMixin, Base):
    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntId, ForeignKey("users.id"), nullable=False, unique=True,
    )
    nip: Mapped[str | None] = mapped_column(String(18), nullable=True, unique=True)
    nik: Mapped[str | None] = mapped_column(String(16), nullable=True, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    employment_status: Mapped[str] = mapped_column(String(10), nullable=False)
    signature_image_path: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="teacher")
    schedules: Mapped[list["Schedule"]] = relationship("Schedule", back_populates="teacher")
    homeroom_classes: Mapped[list["SchoolClass"]] = relationship(
        "SchoolClass", back_populates="homeroom_teacher",
        foreign_keys="SchoolClass.homeroom_teacher_id",
    )
    counselor_classes: Mapped[list["SchoolClass"]] = relationship(
        "SchoolClass", back_populates="counselor",
        foreign_keys="SchoolClass.counselor_id",
    )
