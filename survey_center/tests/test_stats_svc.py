"""Test survey statistics."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from survey_center.models.base import utcnow
from survey_center.schemas.survey import ResponseSubmission
from survey_center.services import assignment_svc, response_svc, stats_svc


async def _answer(db, template, assignment, **scores):
    return await response_svc.submit_response(
        db,
        ResponseSubmission(
            assignment_id=assignment.id,
            template_id=template.id,
            template_name=template.name,
            student_id=assignment.student_id,
            student_name=assignment.student_name,
            class_id=assignment.class_id,
            **scores,
        ),
    )


@pytest.mark.asyncio
async def test_empty_statistics(db: AsyncSession):
    stats = await stats_svc.compute_statistics(db)
    assert stats == {
        "totalAssigned": 0,
        "totalSubmitted": 0,
        "responseRate": 0,
        "averageScores": {
            "teacher": 0, "curriculum": 0, "care": 0, "facilities": 0, "overall": 0,
        },
    }
    assert isinstance(stats["responseRate"], float)
    assert all(isinstance(v, float) for v in stats["averageScores"].values())


@pytest.mark.asyncio
async def test_response_rate(db: AsyncSession, template):
    roster = [{"id": f"s{i}", "name": f"Student {i}"} for i in range(10)]
    batch = await assignment_svc.assign_survey(db, template.id, roster)
    for assignment in batch.created[:4]:
        await _answer(db, template, assignment, teacher_score=8)

    stats = await stats_svc.compute_statistics(db, template_id=template.id)
    assert stats["totalAssigned"] == 10
    assert stats["totalSubmitted"] == 4
    assert stats["responseRate"] == 40.0


@pytest.mark.asyncio
async def test_average_scores_skip_zero_and_use_mean_of_means(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students)
    a, b, c = batch.created
    # averages: 9.0, 5.0 and none (all zero)
    await _answer(db, template, a, teacher_score=10, curriculum_score=8)
    await _answer(db, template, b, teacher_score=5, care_score=5)
    await _answer(db, template, c, teacher_score=0)

    scores = (await stats_svc.compute_statistics(db))["averageScores"]
    assert scores["teacher"] == 7.5
    assert scores["curriculum"] == 8.0
    assert scores["care"] == 5.0
    assert scores["facilities"] == 0
    assert scores["overall"] == 7.0


@pytest.mark.asyncio
async def test_class_filter_scopes_responses_only(db: AsyncSession, template, students):
    batch = await assignment_svc.assign_survey(db, template.id, students)
    for assignment in batch.created:
        await _answer(db, template, assignment, teacher_score=6)

    stats = await stats_svc.compute_statistics(db, class_id="c1")
    assert stats["totalAssigned"] == 3
    assert stats["averageScores"]["teacher"] == 6.0

    future = utcnow() + timedelta(days=1)
    stats = await stats_svc.compute_statistics(db, from_date=future)
    assert stats["averageScores"]["teacher"] == 0
