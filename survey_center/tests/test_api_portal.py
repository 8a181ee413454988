"""Test the student portal."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from survey_center.config import settings
from survey_center.services import assignment_svc, student_svc

ANSWERS = {"teacher": 9, "curriculum": 7, "care": 8}


@pytest_asyncio.fixture
async def student(db: AsyncSession):
    return await student_svc.create_student(
        db, "HS001", "An Nguyen", class_id="c1", class_name="Class A", password="pw-1"
    )


async def _login(client: AsyncClient, code="HS001", password="pw-1") -> str:
    resp = await client.post("/portal/login", json={"code": code, "password": password})
    assert resp.status_code == 200
    return resp.json()["token"]


@pytest.mark.asyncio
async def test_login_sets_cookie_and_me(client: AsyncClient, student):
    resp = await client.post("/portal/login", json={"code": "hs001", "password": "pw-1"})
    assert resp.status_code == 200
    assert settings.auth_cookie_name in resp.headers.get("set-cookie", "")
    assert resp.json()["session"]["studentCode"] == "HS001"

    resp = await client.get("/portal/me")
    assert resp.status_code == 200
    assert resp.json()["studentName"] == "An Nguyen"
    assert resp.json()["className"] == "Class A"


@pytest.mark.asyncio
async def test_login_failure(client: AsyncClient, student):
    resp = await client.post("/portal/login", json={"code": "HS001", "password": "wrong"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_bearer_token_and_logout(client: AsyncClient, student):
    token = await _login(client)
    client.cookies.clear()

    resp = await client.get("/portal/me")
    assert resp.status_code == 401
    resp = await client.get("/portal/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200

    await _login(client)
    resp = await client.post("/portal/logout")
    assert resp.json() == {"loggedOut": True}
    client.cookies.clear()
    assert (await client.get("/portal/me")).status_code == 401


@pytest.mark.asyncio
async def test_pending_surveys_and_submit(client: AsyncClient, db: AsyncSession, template, student):
    batch = await assignment_svc.assign_survey(
        db, template.id, [{"id": str(student.id), "name": student.full_name, "classId": "c1"}]
    )
    assignment_id = batch.created[0].id
    await _login(client)

    resp = await client.get("/portal/surveys")
    assert [a["id"] for a in resp.json()] == [str(assignment_id)]

    resp = await client.get(f"/portal/surveys/{assignment_id}")
    assert resp.status_code == 200
    assert resp.json()["state"] == "ready"

    resp = await client.post(f"/portal/surveys/{assignment_id}", json={"answers": ANSWERS})
    assert resp.status_code == 200

    resp = await client.get("/portal/surveys")
    assert resp.json() == []

    resp = await client.get("/api/responses", params={"studentId": str(student.id)})
    doc = resp.json()[0]
    assert doc["submittedBy"] == "student"
    assert doc["submitterName"] == "An Nguyen"


@pytest.mark.asyncio
async def test_cannot_open_other_students_survey(client: AsyncClient, db: AsyncSession, template, student):
    batch = await assignment_svc.assign_survey(db, template.id, [{"id": "someone-else", "name": "X"}])
    await _login(client)

    resp = await client.get(f"/portal/surveys/{batch.created[0].id}")
    assert resp.status_code == 404
    resp = await client.post(f"/portal/surveys/{batch.created[0].id}", json={"answers": ANSWERS})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_change_password(client: AsyncClient, student):
    await _login(client)

    resp = await client.post("/portal/password", json={"old_password": "bad", "new_password": "pw-2"})
    assert resp.status_code == 401
    resp = await client.post("/portal/password", json={"old_password": "pw-1", "new_password": "pw-2"})
    assert resp.json() == {"updated": True}

    client.cookies.clear()
    resp = await client.post("/portal/login", json={"code": "HS001", "password": "pw-1"})
    assert resp.status_code == 401
    await _login(client, password="pw-2")


@pytest.mark.asyncio
async def test_portal_requires_login(client: AsyncClient):
    assert (await client.get("/portal/surveys")).status_code == 401
