"""Subject ORM — a taught subject identified by a unique code."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.db.base import Base, BigIntId, TimestampMixin


class Subject(TimestampMixin, Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    subject_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    subject_name: Mapped[str] = mapped_column(String(255), nullable=False)

    schedules: Mapped[list["Schedule"]] = relationship("Schedule", back_populates="subject")
