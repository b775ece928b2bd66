"""Auth routes — login, refresh, profile, password change and role gates.

Invariants:
    - Wrong password, unknown user and inactive account all give 401 "Invalid credentials"
    - Missing token → 401 "Access token required"; bad token → 401
    - Role outside the route's allowed set → 403
"""


async def test_login_returns_tokens_and_user(client, school):
    res = await client.post("/api/auth/login", json={"username": "guru1", "password": school.password})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["id"] == str(school.teacher_user.id)
    assert body["data"]["user"]["teacher"]["full_name"] == "Budi Santoso"
    assert "password_hash" not in body["data"]["user"]
    assert set(body["data"]["tokens"]) == {"accessToken", "refreshToken"}


async def test_login_wrong_password_is_401(client, school):
    res = await client.post("/api/auth/login", json={"username": "guru1", "password": "nope-nope"})
    assert res.status_code == 401
    body = res.json()
    assert body["success"] is False
    assert body["message"] == "Invalid credentials"
    assert body["error"]["code"] == "AUTHENTICATION_FAILED"


async def test_login_unknown_user_is_401(client, school):
    res = await client.post("/api/auth/login", json={"username": "nobody", "password": school.password})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid credentials"


async def test_login_validation_error_is_400(client, school):
    res = await client.post("/api/auth/login", json={"username": "ab"})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    fields = {d["field"] for d in body["error"]["details"]}
    assert {"username", "password"} <= fields


async def test_missing_token_is_401(client, school):
    res = await client.get("/api/auth/profile")
    assert res.status_code == 401
    assert res.json()["message"] == "Access token required"


async def test_garbage_token_is_401(client, school):
    res = await client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"


async def test_refresh_token_cannot_be_used_as_access_token(client, school):
    login = await client.post("/api/auth/login", json={"username": "admin", "password": school.password})
    refresh_token = login.json()["data"]["tokens"]["refreshToken"]
    res = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {refresh_token}"})
    assert res.status_code == 401


async def test_refresh_issues_new_pair(client, school):
    login = await client.post("/api/auth/login", json={"username": "admin", "password": school.password})
    refresh_token = login.json()["data"]["tokens"]["refreshToken"]
    res = await client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
    assert res.status_code == 200
    assert "accessToken" in res.json()["data"]["tokens"]


async def test_profile_includes_teacher_profile(client, school):
    res = await client.get("/api/auth/profile", headers=school.teacher_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["username"] == "guru1"
    assert data["teacher"]["id"] == str(school.teacher.id)
    assert data["student"] is None


async def test_change_password_then_login_with_new_one(client, school):
    res = await client.put(
        "/api/auth/change-password",
        headers=school.student_headers,
        json={
            "currentPassword": school.password,
            "newPassword": "brand-new-pass",
            "confirmPassword": "brand-new-pass",
        },
    )
    assert res.status_code == 200
    login = await client.post(
        "/api/auth/login", json={"username": "siswa1", "password": "brand-new-pass"},
    )
    assert login.status_code == 200


async def test_change_password_wrong_current_is_400(client, school):
    res = await client.put(
        "/api/auth/change-password",
        headers=school.student_headers,
        json={
            "currentPassword": "not-my-password",
            "newPassword": "brand-new-pass",
            "confirmPassword": "brand-new-pass",
        },
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Current password is incorrect"


async def test_teacher_cannot_manage_users(client, school):
    res = await client.get("/api/users", headers=school.teacher_headers)
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "PERMISSION_DENIED"


async def test_inactive_user_token_rejected(client, school, test_db):
    school.staff.is_active = False
    test_db.add(school.staff)
    await test_db.commit()
    res = await client.get("/api/auth/profile", headers=school.staff_headers)
    assert res.status_code == 401
