"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Numeric primary keys; serialized as strings at the API boundary

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from portal.models.user import User  # noqa: F401
from portal.models.teacher import Teacher  # noqa: F401
from portal.models.school_class import SchoolClass  # noqa: F401
from portal.models.student import Student  # noqa: F401
from portal.models.subject import Subject  # noqa: F401
from portal.models.schedule import Schedule  # noqa: F401
from portal.models.teaching_journal import TeachingJournal  # noqa: F401
from portal.models.attendance import StudentAttendance, TeacherAttendance  # noqa: F401
