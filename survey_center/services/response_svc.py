"""Response service - validate, score, and record survey submissions."""

from __future__ import annotations

import logging
import numbers
import uuid
from datetime import datetime
from typing import Any, Iterable, Mapping

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..changefeed import ASSIGNMENTS, RESPONSES, Callback, Unsubscribe, change_feed
from ..errors import NotFound, ValidationFailure
from ..models.assignment import SurveyAssignment
from ..models.base import as_utc, utcnow
from ..models.response import CATEGORY_FIELDS, SurveyResponse
from ..models.template import SurveyTemplate
from ..schemas.survey import ResponseSubmission

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def average_score(scores: Iterable[Any]) -> float | None:
    """Mean of the scores that were actually given; 0 means unanswered."""
    given = [s for s in scores if _is_number(s) and s > 0]
    if not given:
        return None
    return round(sum(given) / len(given), 2)


def is_answered(value: Any) -> bool:
    """A numeric 0 is an answer; None and blank strings are not."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def missing_required(template: SurveyTemplate, answers: Mapping[str, Any]) -> list[str]:
    return [
        q["id"]
        for q in template.ordered_questions
        if q.get("required") and not is_answered(answers.get(q["id"]))
    ]


def check_required_answers(template: SurveyTemplate, answers: Mapping[str, Any]) -> None:
    missing = missing_required(template, answers)
    if missing:
        raise ValidationFailure(
            f"Required questions unanswered: {', '.join(missing)}", missing=missing
        )


def category_scores_from_answers(answers: Mapping[str, Any]) -> dict[str, int]:
    """Pick the teacher/curriculum/care/facilities scores out of an answers map.

    Scores are whole numbers; a fractional answer is rejected rather than
    truncated.
    """
    scores = {}
    for category, field_name in CATEGORY_FIELDS.items():
        value = answers.get(category)
        if not _is_number(value):
            continue
        if value != int(value):
            raise ValidationFailure(f"Score for {category} must be a whole number")
        scores[field_name] = int(value)
    return scores


async def submit_response(db: AsyncSession, data: ResponseSubmission) -> SurveyResponse:
    """Persist a response and mark its assignment submitted in one transaction."""
    now = utcnow()
    assignment = None
    if data.assignment_id:
        assignment = await db.get(SurveyAssignment, data.assignment_id)
        if not assignment:
            raise NotFound(f"Assignment {data.assignment_id} not found")
        if assignment.is_past_due(now):
            assignment.status = "expired"
            await db.commit()
            await change_feed.notify(ASSIGNMENTS)
        if assignment.status != "pending":
            raise ValidationFailure(f"Assignment is already {assignment.status}")

    scores = {f: getattr(data, f) for f in CATEGORY_FIELDS.values()}
    stored_scores = {f: s for f, s in scores.items() if s}

    response = SurveyResponse(
        assignment_id=data.assignment_id,
        template_id=data.template_id,
        template_name=data.template_name,
        student_id=data.student_id,
        student_name=data.student_name,
        student_code=data.student_code or None,
        class_id=data.class_id or None,
        class_name=data.class_name or None,
        average_score=average_score(scores.values()),
        answers=dict(data.answers),
        comments=data.comments or None,
        submitted_at=now,
        submitted_by=data.submitted_by or "student",
        submitter_name=data.submitter_name or None,
        submitter_phone=data.submitter_phone or None,
        **stored_scores,
    )
    db.add(response)
    try:
        if assignment:
            # Only one writer can move the row out of pending.
            claimed = await db.execute(
                update(SurveyAssignment)
                .where(
                    SurveyAssignment.id == assignment.id,
                    SurveyAssignment.status == "pending",
                )
                .values(status="submitted", submitted_at=now)
                .execution_options(synchronize_session=False)
            )
            if claimed.rowcount != 1:
                await db.rollback()
                raise ValidationFailure("Assignment has already been submitted")
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Duplicate submission rejected for assignment %s", data.assignment_id)
        raise ValidationFailure("Assignment has already been submitted") from exc
    await db.refresh(response)
    if assignment:
        await db.refresh(assignment)

    logger.info(
        "Recorded response %s for assignment %s (student=%s)",
        response.id, data.assignment_id, data.student_id,
    )
    await change_feed.notify(RESPONSES)
    if assignment:
        await change_feed.notify(ASSIGNMENTS)
    return response


async def get_response(db: AsyncSession, response_id: uuid.UUID) -> SurveyResponse | None:
    return await db.get(SurveyResponse, response_id)


async def list_responses(
    db: AsyncSession,
    template_id: uuid.UUID | None = None,
    student_id: str | None = None,
    class_id: str | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
) -> list[SurveyResponse]:
    stmt = select(SurveyResponse)
    if template_id:
        stmt = stmt.where(SurveyResponse.template_id == template_id)
    if student_id:
        stmt = stmt.where(SurveyResponse.student_id == student_id)
    if class_id:
        stmt = stmt.where(SurveyResponse.class_id == class_id)
    stmt = stmt.order_by(SurveyResponse.submitted_at.desc())
    responses = list((await db.execute(stmt)).scalars().all())

    start, end = as_utc(from_date), as_utc(to_date)
    if start:
        responses = [r for r in responses if as_utc(r.submitted_at) >= start]
    if end:
        responses = [r for r in responses if as_utc(r.submitted_at) <= end]
    return responses


async def subscribe_responses(callback: Callback) -> Unsubscribe:
    async def snapshot(db: AsyncSession) -> list[dict]:
        return [r.as_document() for r in await list_responses(db)]

    return await change_feed.subscribe(RESPONSES, snapshot, callback)
