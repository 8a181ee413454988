"""Test live collection subscriptions."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from survey_center.changefeed import RESPONSES, change_feed
from survey_center.schemas.survey import ResponseSubmission
from survey_center.services import assignment_svc, response_svc, template_svc


@pytest.mark.asyncio
async def test_template_subscription_gets_snapshots(db: AsyncSession):
    seen: list[list[dict]] = []
    unsubscribe = await template_svc.subscribe_templates(seen.append)

    assert seen == [[]]
    await template_svc.create_template(db, name="Live", questions=[])
    assert [t["name"] for t in seen[-1]] == ["Live"]

    unsubscribe()
    await template_svc.create_template(db, name="Unseen", questions=[])
    assert len(seen) == 2
    assert change_feed.subscriber_count == 0


@pytest.mark.asyncio
async def test_assignment_subscription_scoped_to_student(db: AsyncSession, template, students):
    seen: list[list[dict]] = []

    async def on_change(snapshot):
        seen.append(snapshot)

    unsubscribe = await assignment_svc.subscribe_assignments(on_change, student_id="stu-2")
    await assignment_svc.assign_survey(db, template.id, students)

    assert [a["studentId"] for a in seen[-1]] == ["stu-2"]
    unsubscribe()


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_writes(db: AsyncSession):
    def boom(snapshot):
        if snapshot:
            raise RuntimeError("subscriber bug")

    unsubscribe = await template_svc.subscribe_templates(boom)
    created = await template_svc.create_template(db, name="Still saved", questions=[])
    assert await template_svc.get_template(db, created.id) is not None
    unsubscribe()


@pytest.mark.asyncio
async def test_failing_snapshot_does_not_fail_committed_write(db: AsyncSession, template):
    loads = {"n": 0}

    async def flaky_loader(session):
        loads["n"] += 1
        if loads["n"] > 1:
            raise RuntimeError("snapshot read failed")
        return []

    unsubscribe = await change_feed.subscribe(RESPONSES, flaky_loader, lambda snapshot: None)
    response = await response_svc.submit_response(
        db,
        ResponseSubmission(
            template_id=template.id,
            template_name=template.name,
            student_id="s1",
            student_name="Sam",
            teacher_score=9,
        ),
    )
    unsubscribe()

    assert loads["n"] == 2
    assert await response_svc.get_response(db, response.id) is not None
