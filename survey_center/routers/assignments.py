"""Admin JSON API - survey assignments."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..errors import NotFound
from ..schemas.survey import AssignRequest
from ..security.admin import require_admin_key
from ..services import assignment_svc

router = APIRouter(prefix="/api", tags=["assignments"], dependencies=[Depends(require_admin_key)])


@router.post("/templates/{template_id}/assign")
async def assign_template(
    template_id: uuid.UUID,
    data: AssignRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        batch = await assignment_svc.assign_survey(
            db,
            template_id,
            data.students,
            assigned_by=data.assigned_by,
            expires_at=data.expires_at,
        )
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

    return {
        "created": [
            {**a.as_document(), "link": settings.survey_link(a.token)}
            for a in batch.created
        ],
        "skipped": batch.skipped,
    }


@router.get("/assignments")
async def list_assignments(
    template_id: uuid.UUID | None = Query(None, alias="templateId"),
    student_id: str | None = Query(None, alias="studentId"),
    status: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    assignments = await assignment_svc.list_assignments(
        db, template_id=template_id, student_id=student_id, status=status
    )
    return [a.as_document() for a in assignments]


@router.delete("/assignments/{assignment_id}")
async def cancel_assignment(assignment_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    deleted = await assignment_svc.cancel_assignment(db, assignment_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return {"deleted": True}
