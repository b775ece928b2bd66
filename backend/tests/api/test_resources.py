"""Users, teachers, students, classes, subjects, health and the 404 envelope."""

import pytest


async def _create_user(client, school, username, role="teacher"):
    res = await client.post(
        "/api/users",
        json={"username": username, "password": "secret123", "role": role},
        headers=school.admin_headers,
    )
    assert res.status_code == 201
    return res.json()["data"]


# -- infrastructure -----------------------------------------------------------------

async def test_health(client):
    res = await client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert "timestamp" in body


async def test_ready(client):
    res = await client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.json()["data"]["checks"] == {"database": "healthy"}


async def test_unknown_route_uses_error_envelope(client):
    res = await client.get("/api/nope")
    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Route /api/nope not found"


# -- users --------------------------------------------------------------------------

async def test_create_user_hides_password(client, school):
    data = await _create_user(client, school, "guru3")
    assert isinstance(data["id"], str)
    assert data["role"] == "teacher"
    assert "password_hash" not in data
    assert "password" not in data


async def test_duplicate_username_is_409(client, school):
    res = await client.post(
        "/api/users",
        json={"username": "guru1", "password": "secret123", "role": "teacher"},
        headers=school.admin_headers,
    )
    assert res.status_code == 409
    body = res.json()
    assert body["error"]["code"] == "DUPLICATE_RESOURCE"
    assert body["error"]["details"] == [{"field": "username", "message": "Username already exists"}]


async def test_toggle_status(client, school):
    res = await client.patch(
        f"/api/users/{school.staff.id}/toggle-status", headers=school.admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["message"] == "User deactivated successfully"
    assert res.json()["data"]["is_active"] is False


async def test_user_with_profile_cannot_be_deleted(client, school):
    res = await client.delete(f"/api/users/{school.teacher_user.id}", headers=school.admin_headers)
    assert res.status_code == 400


async def test_user_stats_by_role(client, school):
    res = await client.get("/api/users/stats", headers=school.admin_headers)
    stats = res.json()["data"]
    assert stats["total"] == 5
    assert stats["byRole"] == {"admin": 1, "teacher": 2, "student": 1, "staff": 1}


async def test_unknown_user_is_404(client, school):
    res = await client.get("/api/users/99999", headers=school.admin_headers)
    assert res.status_code == 404
    body = res.json()
    assert body["message"] == "User not found"
    assert body["error"]["code"] == "RESOURCE_NOT_FOUND"


# -- teachers -----------------------------------------------------------------------

async def test_create_teacher_profile_once(client, school):
    user = await _create_user(client, school, "guru3")
    body = {"user_id": user["id"], "full_name": "Citra Dewi", "employment_status": "PTT"}
    res = await client.post("/api/teachers", json=body, headers=school.admin_headers)
    assert res.status_code == 201
    assert res.json()["data"]["user_id"] == user["id"]
    assert res.json()["data"]["user"]["username"] == "guru3"

    again = await client.post("/api/teachers", json=body, headers=school.admin_headers)
    assert again.status_code == 409


async def test_teacher_search(client, school):
    res = await client.get("/api/teachers/search?q=Budi", headers=school.admin_headers)
    assert [t["full_name"] for t in res.json()["data"]] == ["Budi Santoso"]
    short = await client.get("/api/teachers/search?q=B", headers=school.admin_headers)
    assert short.status_code == 400


async def test_teacher_with_schedule_cannot_be_deleted(client, school, monday_slot):
    res = await client.delete(f"/api/teachers/{school.teacher.id}", headers=school.admin_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Cannot delete teacher who has teaching schedules"


# -- students -----------------------------------------------------------------------

async def test_duplicate_nis_is_409(client, school):
    user = await _create_user(client, school, "siswa2", role="student")
    res = await client.post(
        "/api/students",
        json={"user_id": user["id"], "nis": "2024001", "full_name": "Dewi Lestari", "gender": "P"},
        headers=school.admin_headers,
    )
    assert res.status_code == 409
    assert res.json()["message"] == "NIS already exists"


async def test_students_by_class(client, school):
    res = await client.get(f"/api/students/class/{school.class_a.id}", headers=school.teacher_headers)
    assert [s["full_name"] for s in res.json()["data"]] == ["Siti Aminah"]


async def test_student_cannot_list_students(client, school):
    res = await client.get("/api/students", headers=school.student_headers)
    assert res.status_code == 403


# -- classes ------------------------------------------------------------------------

async def test_staff_creates_class_teacher_cannot(client, school):
    body = {"class_name": "XI RPL 1", "grade_level": 11, "major": "RPL"}
    res = await client.post("/api/classes", json=body, headers=school.teacher_headers)
    assert res.status_code == 403
    res = await client.post("/api/classes", json=body, headers=school.staff_headers)
    assert res.status_code == 201
    assert res.json()["data"]["students"] == []


async def test_duplicate_class_name_and_grade_is_409(client, school):
    res = await client.post(
        "/api/classes", json={"class_name": "X RPL 1", "grade_level": 10},
        headers=school.admin_headers,
    )
    assert res.status_code == 409


async def test_class_with_students_cannot_be_deleted(client, school):
    res = await client.delete(f"/api/classes/{school.class_a.id}", headers=school.admin_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Cannot delete class with enrolled students"


async def test_assign_student_moves_class(client, school):
    res = await client.post(
        f"/api/classes/{school.class_b.id}/assign-student",
        json={"student_id": school.student.id},
        headers=school.admin_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["current_class"]["class_name"] == "X TKJ 1"

    again = await client.post(
        f"/api/classes/{school.class_b.id}/assign-student",
        json={"student_id": school.student.id},
        headers=school.admin_headers,
    )
    assert again.status_code == 400


# -- subjects -----------------------------------------------------------------------

async def test_subject_crud_and_duplicate_code(client, school):
    res = await client.post(
        "/api/subjects", json={"subject_code": "BIN", "subject_name": "Bahasa Indonesia"},
        headers=school.admin_headers,
    )
    assert res.status_code == 201
    subject_id = res.json()["data"]["id"]

    dup = await client.post(
        "/api/subjects", json={"subject_code": "MTK", "subject_name": "Matematika Lanjut"},
        headers=school.admin_headers,
    )
    assert dup.status_code == 409

    res = await client.put(
        f"/api/subjects/{subject_id}", json={"subject_name": "B. Indonesia"},
        headers=school.admin_headers,
    )
    assert res.json()["data"]["subject_name"] == "B. Indonesia"
    assert res.json()["data"]["subject_code"] == "BIN"


async def test_subject_in_use_cannot_be_deleted(client, school, monday_slot):
    res = await client.delete(f"/api/subjects/{school.subject.id}", headers=school.admin_headers)
    assert res.status_code == 400


# -- create then fetch --------------------------------------------------------------

async def _user_body(client, school):
    return {"username": "tu1", "password": "secret123", "role": "staff"}


async def _teacher_body(client, school):
    user = await _create_user(client, school, "guru4")
    return {"user_id": user["id"], "full_name": "Eko Prasetyo", "nip": "198501012010011001",
            "employment_status": "ASN"}


async def _student_body(client, school):
    user = await _create_user(client, school, "siswa3", role="student")
    return {"user_id": user["id"], "nis": "2024002", "full_name": "Rina Kartika", "gender": "P",
            "current_class_id": school.class_b.id}


async def _class_body(client, school):
    return {"class_name": "XII TKJ 2", "grade_level": 12, "major": "TKJ",
            "homeroom_teacher_id": school.other_teacher.id}


async def _subject_body(client, school):
    return {"subject_code": "FIS", "subject_name": "Fisika"}


async def _schedule_body(client, school):
    return {"class_id": school.class_b.id, "subject_id": school.subject.id,
            "teacher_id": school.other_teacher.id, "day_of_week": "Rabu",
            "start_time": "09:00", "end_time": "10:30", "room": "Lab 1"}


@pytest.mark.parametrize("resource, build", [
    ("users", _user_body),
    ("teachers", _teacher_body),
    ("students", _student_body),
    ("classes", _class_body),
    ("subjects", _subject_body),
    ("schedules", _schedule_body),
])
async def test_created_entity_reads_back_unchanged(client, school, resource, build):
    body = await build(client, school)
    created = await client.post(f"/api/{resource}", json=body, headers=school.admin_headers)
    assert created.status_code == 201
    data = created.json()["data"]
    assert isinstance(data["id"], str)

    fetched = await client.get(f"/api/{resource}/{data['id']}", headers=school.admin_headers)
    assert fetched.status_code == 200
    assert fetched.json()["data"] == data
    for field, value in body.items():
        if field == "password":
            assert "password" not in data and "password_hash" not in data
        elif field.endswith("_id"):
            assert data[field] == str(value)
        elif field.endswith("_time"):
            assert data[field] == f"{value}:00"
        else:
            assert data[field] == value
