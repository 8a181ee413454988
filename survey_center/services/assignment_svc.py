"""Assignment service - bind templates to students, token lookup, expiry."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..changefeed import ASSIGNMENTS, Callback, Unsubscribe, change_feed
from ..errors import NotFound
from ..models.assignment import SurveyAssignment
from ..models.base import as_utc, utcnow
from ..schemas.survey import StudentRef
from ..security.tokens import generate_token
from . import template_svc

logger = logging.getLogger(__name__)


@dataclass
class AssignmentBatch:
    """Outcome of one assign call: new assignments plus skipped student ids."""

    created: list[SurveyAssignment] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


async def _pending_for(
    db: AsyncSession, template_id: uuid.UUID, student_id: str
) -> SurveyAssignment | None:
    stmt = select(SurveyAssignment).where(
        SurveyAssignment.template_id == template_id,
        SurveyAssignment.student_id == student_id,
        SurveyAssignment.status == "pending",
    )
    return (await db.execute(stmt)).scalars().first()


async def assign_survey(
    db: AsyncSession,
    template_id: uuid.UUID,
    students: Iterable[StudentRef | dict],
    assigned_by: str | None = None,
    expires_at: datetime | None = None,
) -> AssignmentBatch:
    """Create one pending assignment per student that has none for the template.

    Each insert commits on its own; the partial unique index on pending
    (template_id, student_id) turns a concurrent duplicate into a skip.
    """
    template = await template_svc.get_template(db, template_id)
    if not template:
        raise NotFound(f"Template {template_id} not found")
    template_name = template.name

    batch = AssignmentBatch()
    for raw in students:
        student = raw if isinstance(raw, StudentRef) else StudentRef.model_validate(raw)
        if await _pending_for(db, template_id, student.id):
            batch.skipped.append(student.id)
            continue

        assignment = SurveyAssignment(
            template_id=template_id,
            template_name=template_name,
            student_id=student.id,
            student_name=student.name,
            student_code=student.code or None,
            class_id=student.class_id or None,
            class_name=student.class_name or None,
            status="pending",
            token=generate_token(),
            assigned_at=utcnow(),
            assigned_by=assigned_by or None,
            expires_at=as_utc(expires_at),
        )
        db.add(assignment)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            # Rollback expires everything loaded in this session.
            for done in batch.created:
                await db.refresh(done)
            if await _pending_for(db, template_id, student.id) is None:
                raise
            logger.warning(
                "Concurrent assignment detected for template=%s student=%s",
                template_id, student.id,
            )
            batch.skipped.append(student.id)
            continue
        await db.refresh(assignment)
        batch.created.append(assignment)

    logger.info(
        "Assigned template %s: created=%d skipped=%d",
        template_id, len(batch.created), len(batch.skipped),
    )
    if batch.created:
        await change_feed.notify(ASSIGNMENTS)
    return batch


async def get_assignment(db: AsyncSession, assignment_id: uuid.UUID) -> SurveyAssignment | None:
    return await db.get(SurveyAssignment, assignment_id)


async def _expire(db: AsyncSession, assignments: list[SurveyAssignment]) -> int:
    if not assignments:
        return 0
    for a in assignments:
        a.status = "expired"
    await db.commit()
    logger.info("Expired %d overdue assignments", len(assignments))
    await change_feed.notify(ASSIGNMENTS)
    return len(assignments)


async def check_expiry(
    db: AsyncSession, assignment: SurveyAssignment | None
) -> SurveyAssignment | None:
    """Expire a pending assignment on read once its expiresAt has passed."""
    if assignment and assignment.is_past_due(utcnow()):
        await _expire(db, [assignment])
    return assignment


async def get_by_token(db: AsyncSession, token: str) -> SurveyAssignment | None:
    """Resolve a public link token; unknown tokens give None."""
    if not token:
        return None
    stmt = select(SurveyAssignment).where(SurveyAssignment.token == token)
    assignment = (await db.execute(stmt)).scalar_one_or_none()
    return await check_expiry(db, assignment)


async def list_pending_for_student(db: AsyncSession, student_id: str) -> list[SurveyAssignment]:
    stmt = (
        select(SurveyAssignment)
        .where(
            SurveyAssignment.student_id == student_id,
            SurveyAssignment.status == "pending",
        )
        .order_by(SurveyAssignment.assigned_at.desc())
    )
    pending = list((await db.execute(stmt)).scalars().all())
    now = utcnow()
    overdue = [a for a in pending if a.is_past_due(now)]
    await _expire(db, overdue)
    return [a for a in pending if a.status == "pending"]


async def list_assignments(
    db: AsyncSession,
    template_id: uuid.UUID | None = None,
    student_id: str | None = None,
    status: str | None = None,
) -> list[SurveyAssignment]:
    stmt = select(SurveyAssignment)
    if template_id:
        stmt = stmt.where(SurveyAssignment.template_id == template_id)
    if student_id:
        stmt = stmt.where(SurveyAssignment.student_id == student_id)
    if status:
        stmt = stmt.where(SurveyAssignment.status == status)
    stmt = stmt.order_by(SurveyAssignment.assigned_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def cancel_assignment(db: AsyncSession, assignment_id: uuid.UUID) -> bool:
    """Hard-delete an assignment regardless of its status."""
    assignment = await db.get(SurveyAssignment, assignment_id)
    if not assignment:
        return False
    if assignment.status != "pending":
        logger.warning("Cancelling %s assignment %s", assignment.status, assignment_id)
    await db.delete(assignment)
    await db.commit()
    await change_feed.notify(ASSIGNMENTS)
    return True


async def expire_overdue(db: AsyncSession, now: datetime | None = None) -> int:
    """Flip every pending assignment past its expiresAt to expired."""
    now = as_utc(now) or utcnow()
    stmt = select(SurveyAssignment).where(
        SurveyAssignment.status == "pending",
        SurveyAssignment.expires_at.is_not(None),
    )
    pending = (await db.execute(stmt)).scalars().all()
    return await _expire(db, [a for a in pending if a.is_past_due(now)])


async def subscribe_assignments(callback: Callback, student_id: str | None = None) -> Unsubscribe:
    async def snapshot(db: AsyncSession) -> list[dict]:
        return [a.as_document() for a in await list_assignments(db, student_id=student_id)]

    return await change_feed.subscribe(ASSIGNMENTS, snapshot, callback)
