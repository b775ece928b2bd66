"""Entity Serializers — ORM rows to JSON-ready dicts with stringified ids.

Invariants:
    - Every id and foreign key leaves as a string (or null)
    - Only relationships already loaded on the instance are embedded; an
      unloaded relationship is rendered as absent/null, never lazy-loaded
      (async sessions cannot lazy-load)
    - password_hash never appears in any output
"""

from sqlalchemy import inspect

from portal.core.serialization import (
    serialize_date, serialize_datetime, serialize_id, serialize_time,
)


def loaded(obj, attr: str):
    """Return obj.attr if it is already loaded, else None."""
    if obj is None or attr in inspect(obj).unloaded:
        return None
    return getattr(obj, attr)


def _timestamps(obj) -> dict:
    return {
        "created_at": serialize_datetime(obj.created_at),
        "updated_at": serialize_datetime(obj.updated_at),
    }


# ─── Users ───────────────────────────────────────────────────────

def user_brief(user) -> dict | None:
    if user is None:
        return None
    return {
        "id": serialize_id(user.id),
        "username": user.username,
        "role": user.role,
        "is_active": user.is_active,
    }


def serialize_user(user) -> dict:
    data = {
        **user_brief(user),
        "last_login": serialize_datetime(user.last_login),
        **_timestamps(user),
    }
    unloaded = inspect(user).unloaded
    if "teacher" not in unloaded:
        data["teacher"] = teacher_brief(user.teacher)
    if "student" not in unloaded:
        data["student"] = student_brief(user.student)
    return data


# ─── Teachers ────────────────────────────────────────────────────

def teacher_brief(teacher) -> dict | None:
    if teacher is None:
        return None
    return {
        "id": serialize_id(teacher.id),
        "full_name": teacher.full_name,
        "nip": teacher.nip,
        "employment_status": teacher.employment_status,
    }


def serialize_teacher(teacher) -> dict:
    data = {
        "id": serialize_id(teacher.id),
        "user_id": serialize_id(teacher.user_id),
        "nip": teacher.nip,
        "nik": teacher.nik,
        "full_name": teacher.full_name,
        "phone_number": teacher.phone_number,
        "employment_status": teacher.employment_status,
        "signature_image_path": teacher.signature_image_path,
        **_timestamps(teacher),
        "user": user_brief(loaded(teacher, "user")),
    }
    homeroom = loaded(teacher, "homeroom_classes")
    if homeroom is not None:
        data["homeroom_classes"] = [class_brief(c) for c in homeroom]
    return data


# ─── Classes ─────────────────────────────────────────────────────

def class_brief(school_class) -> dict | None:
    if school_class is None:
        return None
    return {
        "id": serialize_id(school_class.id),
        "class_name": school_class.class_name,
        "grade_level": school_class.grade_level,
        "major": school_class.major,
    }


def serialize_class(school_class) -> dict:
    data = {
        **class_brief(school_class),
        "homeroom_teacher_id": serialize_id(school_class.homeroom_teacher_id),
        "counselor_id": serialize_id(school_class.counselor_id),
        **_timestamps(school_class),
        "homeroom_teacher": teacher_brief(loaded(school_class, "homeroom_teacher")),
        "counselor": teacher_brief(loaded(school_class, "counselor")),
    }
    students = loaded(school_class, "students")
    if students is not None:
        data["students"] = [student_brief(s) for s in students]
        data["student_count"] = len(students)
    return data


# ─── Students ────────────────────────────────────────────────────

def student_brief(student) -> dict | None:
    if student is None:
        return None
    return {
        "id": serialize_id(student.id),
        "full_name": student.full_name,
        "nis": student.nis,
        "status": student.status,
    }


def serialize_student(student) -> dict:
    return {
        "id": serialize_id(student.id),
        "user_id": serialize_id(student.user_id),
        "current_class_id": serialize_id(student.current_class_id),
        "nis": student.nis,
        "nisn": student.nisn,
        "full_name": student.full_name,
        "gender": student.gender,
        "address": student.address,
        "phone_number": student.phone_number,
        "status": student.status,
        "rfid_uid": student.rfid_uid,
        **_timestamps(student),
        "user": user_brief(loaded(student, "user")),
        "current_class": class_brief(loaded(student, "current_class")),
    }


# ─── Subjects ────────────────────────────────────────────────────

def subject_brief(subject) -> dict | None:
    if subject is None:
        return None
    return {
        "id": serialize_id(subject.id),
        "subject_code": subject.subject_code,
        "subject_name": subject.subject_name,
    }


def serialize_subject(subject) -> dict:
    return {**subject_brief(subject), **_timestamps(subject)}


# ─── Schedules & Journals ────────────────────────────────────────

def serialize_schedule(schedule) -> dict:
    return {
        "id": serialize_id(schedule.id),
        "class_id": serialize_id(schedule.class_id),
        "subject_id": serialize_id(schedule.subject_id),
        "teacher_id": serialize_id(schedule.teacher_id),
        "day_of_week": schedule.day_of_week,
        "start_time": serialize_time(schedule.start_time),
        "end_time": serialize_time(schedule.end_time),
        "room": schedule.room,
        **_timestamps(schedule),
        "class": class_brief(loaded(schedule, "school_class")),
        "subject": subject_brief(loaded(schedule, "subject")),
        "teacher": teacher_brief(loaded(schedule, "teacher")),
    }


def serialize_journal(journal) -> dict:
    schedule = loaded(journal, "schedule")
    return {
        "id": serialize_id(journal.id),
        "schedule_id": serialize_id(journal.schedule_id),
        "teaching_date": serialize_date(journal.teaching_date),
        "topic": journal.topic,
        "student_attendance_summary": journal.student_attendance_summary,
        "notes": journal.notes,
        **_timestamps(journal),
        "schedule": serialize_schedule(schedule) if schedule is not None else None,
    }


# ─── Attendance ──────────────────────────────────────────────────

def serialize_teacher_attendance(record) -> dict:
    teacher = loaded(record, "teacher")
    return {
        "id": serialize_id(record.id),
        "teacher_id": serialize_id(record.teacher_id),
        "timestamp": serialize_datetime(record.timestamp),
        "attendance_date": serialize_date(record.attendance_date),
        "status": record.status,
        "location_coordinates": record.location_coordinates,
        "photo_path": record.photo_path,
        "teacher": None if teacher is None else {
            "id": serialize_id(teacher.id),
            "nip": teacher.nip,
            "full_name": teacher.full_name,
            "user": _username(loaded(teacher, "user")),
        },
    }


def serialize_student_attendance(record) -> dict:
    student = loaded(record, "student")
    return {
        "id": serialize_id(record.id),
        "student_id": serialize_id(record.student_id),
        "schedule_id": serialize_id(record.schedule_id),
        "timestamp": serialize_datetime(record.timestamp),
        "attendance_date": serialize_date(record.attendance_date),
        "status": record.status,
        "location_coordinates": record.location_coordinates,
        "student": None if student is None else {
            "id": serialize_id(student.id),
            "nis": student.nis,
            "full_name": student.full_name,
            "class": _class_name(loaded(student, "current_class")),
            "user": _username(loaded(student, "user")),
        },
    }


def _username(user) -> dict | None:
    return None if user is None else {"username": user.username}


def _class_name(school_class) -> dict | None:
    return None if school_class is None else {"class_name": school_class.class_name}
