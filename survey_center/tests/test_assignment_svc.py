"""Test assignment service."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from survey_center.errors import NotFound
from survey_center.models.base import utcnow
from survey_center.models.template import SurveyTemplate
from survey_center.services import assignment_svc


@pytest.mark.asyncio
async def test_assign_creates_pending_assignments(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students, assigned_by="admin")

    assert len(batch.created) == 3
    assert batch.skipped == []
    first = batch.created[0]
    assert first.status == "pending"
    assert first.template_name == "Quality Survey"
    assert first.assigned_by == "admin"
    assert first.class_id == "c1"
    assert len({a.token for a in batch.created}) == 3


@pytest.mark.asyncio
async def test_assign_twice_skips_pending_student(db: AsyncSession, template, students):
    first = await assignment_svc.assign_survey(db, template.id, students[:1])
    second = await assignment_svc.assign_survey(db, template.id, students[:1])

    assert len(first.created) == 1
    assert second.created == []
    assert second.skipped == ["stu-1"]
    assignments = await assignment_svc.list_assignments(db, template_id=template.id)
    assert len(assignments) == 1


@pytest.mark.asyncio
async def test_assign_again_after_submission(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students[:1])
    batch.created[0].status = "submitted"
    await db.commit()

    again = await assignment_svc.assign_survey(db, template.id, students[:1])
    assert len(again.created) == 1


@pytest.mark.asyncio
async def test_assign_race_is_reported_as_skip(db: AsyncSession, template, students, monkeypatch):
    await assignment_svc.assign_survey(db, template.id, students[:1])

    real_pending_for = assignment_svc._pending_for
    calls = {"n": 0}

    async def blind_first_check(session, template_id, student_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return await real_pending_for(session, template_id, student_id)

    monkeypatch.setattr(assignment_svc, "_pending_for", blind_first_check)
    batch = await assignment_svc.assign_survey(db, template.id, students[:2])

    assert batch.skipped == ["stu-1"]
    assert [a.student_id for a in batch.created] == ["stu-2"]


@pytest.mark.asyncio
async def test_assign_unknown_template(db: AsyncSession, students):
    with pytest.raises(NotFound):
        await assignment_svc.assign_survey(db, uuid.uuid4(), students)


@pytest.mark.asyncio
async def test_get_by_token(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students[:2])
    target = batch.created[1]

    found = await assignment_svc.get_by_token(db, target.token)
    assert found is not None
    assert found.id == target.id

    assert await assignment_svc.get_by_token(db, "not-a-token") is None
    assert await assignment_svc.get_by_token(db, "") is None
    assert await assignment_svc.get_by_token(db, target.token.upper() + "x") is None


@pytest.mark.asyncio
async def test_get_by_token_expires_overdue(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(
        db, template.id, students[:1], expires_at=utcnow() - timedelta(minutes=1)
    )
    found = await assignment_svc.get_by_token(db, batch.created[0].token)
    assert found.status == "expired"


@pytest.mark.asyncio
async def test_list_pending_for_student(db: AsyncSession, template, students):
    other = SurveyTemplate(name="Other", questions=[])
    db.add(other)
    await db.commit()

    await assignment_svc.assign_survey(db, template.id, students[:1])
    await assignment_svc.assign_survey(
        db, other.id, students[:1], expires_at=utcnow() - timedelta(seconds=1)
    )

    pending = await assignment_svc.list_pending_for_student(db, "stu-1")
    assert [a.template_id for a in pending] == [template.id]
    assert await assignment_svc.list_pending_for_student(db, "nobody") == []


@pytest.mark.asyncio
async def test_list_assignments_filters(db: AsyncSession, template, students):
    await assignment_svc.assign_survey(db, template.id, students)

    assert len(await assignment_svc.list_assignments(db, student_id="stu-2")) == 1
    assert len(await assignment_svc.list_assignments(db, status="pending")) == 3
    assert await assignment_svc.list_assignments(db, status="submitted") == []
    assert await assignment_svc.list_assignments(db, template_id=uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_cancel_assignment(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students[:1])
    assignment_id = batch.created[0].id

    assert await assignment_svc.cancel_assignment(db, assignment_id) is True
    assert await assignment_svc.get_assignment(db, assignment_id) is None
    assert await assignment_svc.cancel_assignment(db, assignment_id) is False


@pytest.mark.asyncio
async def test_expire_overdue(db: AsyncSession, template, students):
    now = utcnow()
    await assignment_svc.assign_survey(db, template.id, students[:1], expires_at=now - timedelta(hours=1))
    await assignment_svc.assign_survey(db, template.id, students[1:2], expires_at=now + timedelta(days=1))
    await assignment_svc.assign_survey(db, template.id, students[2:])

    assert await assignment_svc.expire_overdue(db) == 1
    assert await assignment_svc.expire_overdue(db) == 0

    expired = await assignment_svc.list_assignments(db, status="expired")
    assert [a.student_id for a in expired] == ["stu-1"]

    later = now + timedelta(days=2)
    assert await assignment_svc.expire_overdue(db, now=later) == 1


@pytest.mark.asyncio
async def test_assignment_document_omits_unset_fields(db: AsyncSession, template):
    batch = await assignment_svc.assign_survey(db, template.id, [{"id": "s9", "name": "No Class"}])
    doc = batch.created[0].as_document()

    for key in ("classId", "className", "studentCode", "assignedBy", "expiresAt", "submittedAt"):
        assert key not in doc
    assert doc["status"] == "pending"
    assert doc["templateId"] == str(template.id)
