"""Initial schema — users, profiles, classes, subjects, schedules, journals, attendance.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "teachers",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("nip", sa.String(18), nullable=True, unique=True),
        sa.Column("nik", sa.String(16), nullable=True, unique=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("employment_status", sa.String(10), nullable=False),
        sa.Column("signature_image_path", sa.String(255), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "classes",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("class_name", sa.String(100), nullable=False),
        sa.Column("grade_level", sa.Integer, nullable=False),
        sa.Column("major", sa.String(100), nullable=True),
        sa.Column("homeroom_teacher_id", sa.BigInteger, sa.ForeignKey("teachers.id"), nullable=True),
        sa.Column("counselor_id", sa.BigInteger, sa.ForeignKey("teachers.id"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("class_name", "grade_level", name="uq_classes_name_grade"),
    )

    op.create_table(
        "students",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("current_class_id", sa.BigInteger, sa.ForeignKey("classes.id"), nullable=True),
        sa.Column("nis", sa.String(16), nullable=False, unique=True),
        sa.Column("nisn", sa.String(10), nullable=True, unique=True),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("gender", sa.String(1), nullable=False),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="AKTIF"),
        sa.Column("rfid_uid", sa.String(100), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_students_current_class_id", "students", ["current_class_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("subject_code", sa.String(20), nullable=False, unique=True),
        sa.Column("subject_name", sa.String(255), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "schedules",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("class_id", sa.BigInteger, sa.ForeignKey("classes.id"), nullable=False),
        sa.Column("subject_id", sa.BigInteger, sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("teacher_id", sa.BigInteger, sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("day_of_week", sa.String(10), nullable=False),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("end_time", sa.Time, nullable=False),
        sa.Column("room", sa.String(50), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("start_time < end_time", name="ck_schedules_time_order"),
    )
    op.create_index("ix_schedules_day_teacher", "schedules", ["day_of_week", "teacher_id"])
    op.create_index("ix_schedules_day_class", "schedules", ["day_of_week", "class_id"])
    op.create_index("ix_schedules_day_room", "schedules", ["day_of_week", "room"])

    op.create_table(
        "teaching_journals",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("schedule_id", sa.BigInteger, sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("teaching_date", sa.Date, nullable=False),
        sa.Column("topic", sa.Text, nullable=False),
        sa.Column("student_attendance_summary", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("schedule_id", "teaching_date", name="uq_journals_schedule_date"),
    )
    op.create_index("ix_teaching_journals_schedule_id", "teaching_journals", ["schedule_id"])

    op.create_table(
        "teacher_attendances",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("teacher_id", sa.BigInteger, sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attendance_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("location_coordinates", sa.String(100), nullable=True),
        sa.Column("photo_path", sa.String(255), nullable=True),
        sa.UniqueConstraint(
            "teacher_id", "status", "attendance_date",
            name="uq_teacher_attendance_daily_status",
        ),
    )
    op.create_index("ix_teacher_attendances_teacher_id", "teacher_attendances", ["teacher_id"])
    op.create_index("ix_teacher_attendances_attendance_date", "teacher_attendances", ["attendance_date"])

    op.create_table(
        "student_attendances",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.BigInteger, sa.ForeignKey("students.id"), nullable=False),
        sa.Column("schedule_id", sa.BigInteger, sa.ForeignKey("schedules.id"), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attendance_date", sa.Date, nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("location_coordinates", sa.String(100), nullable=True),
        sa.UniqueConstraint(
            "student_id", "status", "attendance_date",
            name="uq_student_attendance_daily_status",
        ),
    )
    op.create_index("ix_student_attendances_student_id", "student_attendances", ["student_id"])
    op.create_index("ix_student_attendances_attendance_date", "student_attendances", ["attendance_date"])


def downgrade() -> None:
    op.drop_table("student_attendances")
    op.drop_table("teacher_attendances")
    op.drop_table("teaching_journals")
    op.drop_table("schedules")
    op.drop_table("subjects")
    op.drop_table("students")
    op.drop_table("classes")
    op.drop_table("teachers")
    op.drop_table("users")
