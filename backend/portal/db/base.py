"""SQLAlchemy Declarative Base — shared base class and column types for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Primary/foreign keys are BIGINT on PostgreSQL (INTEGER on sqlite so autoincrement works)

Design Decisions:
    - Separate file for Base: avoids circular imports between models
    - Timestamps use Python-side defaults: values are present on the instance right
      after flush, no refresh round-trip needed in async code
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

BigIntId = BigInteger().with_variant(Integer, "sqlite")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all portal ORM models."""
    pass


class TimestampMixin:
    """created_at / updated_at set on insert and update."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
