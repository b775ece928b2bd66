"""Teaching journal routes — ownership and one journal per schedule per date."""

import pytest


def _journal(schedule_id, teaching_date="2026-03-02", **overrides) -> dict:
    body = {"schedule_id": schedule_id, "teaching_date": teaching_date, "topic": "Persamaan linear"}
    body.update(overrides)
    return body


@pytest.fixture
async def journal(client, school, monday_slot):
    res = await client.post(
        "/api/journals", json=_journal(monday_slot.id), headers=school.teacher_headers,
    )
    assert res.status_code == 201
    return res.json()["data"]


async def test_teacher_creates_journal_for_own_schedule(client, school, monday_slot, journal):
    assert journal["schedule_id"] == str(monday_slot.id)
    assert journal["teaching_date"] == "2026-03-02"
    assert journal["schedule"]["class"]["class_name"] == "X RPL 1"
    assert journal["schedule"]["teacher"]["full_name"] == "Budi Santoso"


async def test_other_teacher_cannot_journal_the_schedule(client, school, monday_slot):
    res = await client.post(
        "/api/journals", json=_journal(monday_slot.id), headers=school.other_teacher_headers,
    )
    assert res.status_code == 403
    assert res.json()["message"] == "You can only manage journals for your own schedules"


async def test_same_schedule_and_date_is_409(client, school, monday_slot, journal):
    res = await client.post(
        "/api/journals", json=_journal(monday_slot.id, topic="Ulangan"), headers=school.teacher_headers,
    )
    assert res.status_code == 409
    body = res.json()
    assert body["error"]["code"] == "DUPLICATE_RESOURCE"
    assert body["error"]["details"][0]["field"] == "teaching_date"


async def test_next_week_same_schedule_is_allowed(client, school, monday_slot, journal):
    res = await client.post(
        "/api/journals", json=_journal(monday_slot.id, "2026-03-09"), headers=school.teacher_headers,
    )
    assert res.status_code == 201


async def test_admin_cannot_create_journal(client, school, monday_slot):
    res = await client.post(
        "/api/journals", json=_journal(monday_slot.id), headers=school.admin_headers,
    )
    assert res.status_code == 403


async def test_unknown_schedule_is_404(client, school):
    res = await client.post("/api/journals", json=_journal(99999), headers=school.teacher_headers)
    assert res.status_code == 404


async def test_my_journals_only_lists_own(client, school, journal):
    mine = await client.get("/api/journals/my-journals", headers=school.teacher_headers)
    assert [j["id"] for j in mine.json()["data"]] == [journal["id"]]
    theirs = await client.get("/api/journals/my-journals", headers=school.other_teacher_headers)
    assert theirs.json()["data"] == []
    assert theirs.json()["meta"]["pagination"]["total"] == 0


async def test_search_matches_topic(client, school, journal):
    hit = await client.get("/api/journals?search=linear", headers=school.admin_headers)
    assert len(hit.json()["data"]) == 1
    miss = await client.get("/api/journals?search=geometri", headers=school.admin_headers)
    assert miss.json()["data"] == []


async def test_update_by_owner_and_by_other(client, school, journal):
    res = await client.put(
        f"/api/journals/{journal['id']}", json={"notes": "Siswa aktif"}, headers=school.teacher_headers,
    )
    assert res.status_code == 200
    assert res.json()["data"]["notes"] == "Siswa aktif"
    assert res.json()["data"]["topic"] == "Persamaan linear"

    res = await client.put(
        f"/api/journals/{journal['id']}", json={"notes": "x"}, headers=school.other_teacher_headers,
    )
    assert res.status_code == 403


async def test_update_onto_existing_date_is_409(client, school, monday_slot, journal):
    await client.post(
        "/api/journals", json=_journal(monday_slot.id, "2026-03-09"), headers=school.teacher_headers,
    )
    res = await client.put(
        f"/api/journals/{journal['id']}", json={"teaching_date": "2026-03-09"},
        headers=school.admin_headers,
    )
    assert res.status_code == 409


async def test_stats_scoped_to_teacher(client, school, journal):
    res = await client.get("/api/journals/stats", headers=school.other_teacher_headers)
    assert res.json()["data"]["total"] == 0
    res = await client.get("/api/journals/stats", headers=school.admin_headers)
    assert res.json()["data"]["total"] == 1


async def test_admin_deletes_any_journal(client, school, journal):
    res = await client.delete(f"/api/journals/{journal['id']}", headers=school.admin_headers)
    assert res.status_code == 200
    res = await client.get(f"/api/journals/{journal['id']}", headers=school.admin_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Teaching journal not found"
