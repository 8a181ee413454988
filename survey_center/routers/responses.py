"""Admin JSON API - responses and statistics."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..security.admin import require_admin_key
from ..services import response_svc, stats_svc

router = APIRouter(prefix="/api", tags=["responses"], dependencies=[Depends(require_admin_key)])


@router.get("/responses")
async def list_responses(
    template_id: uuid.UUID | None = Query(None, alias="templateId"),
    student_id: str | None = Query(None, alias="studentId"),
    class_id: str | None = Query(None, alias="classId"),
    from_date: datetime | None = Query(None, alias="fromDate"),
    to_date: datetime | None = Query(None, alias="toDate"),
    db: AsyncSession = Depends(get_db),
):
    responses = await response_svc.list_responses(
        db,
        template_id=template_id,
        student_id=student_id,
        class_id=class_id,
        from_date=from_date,
        to_date=to_date,
    )
    return [r.as_document() for r in responses]


@router.get("/responses/{response_id}")
async def get_response(response_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    response = await response_svc.get_response(db, response_id)
    if not response:
        raise HTTPException(status_code=404, detail="Response not found")
    return response.as_document()


@router.get("/statistics")
async def statistics(
    template_id: uuid.UUID | None = Query(None, alias="templateId"),
    class_id: str | None = Query(None, alias="classId"),
    from_date: datetime | None = Query(None, alias="fromDate"),
    to_date: datetime | None = Query(None, alias="toDate"),
    db: AsyncSession = Depends(get_db),
):
    return await stats_svc.compute_statistics(
        db,
        template_id=template_id,
        class_id=class_id,
        from_date=from_date,
        to_date=to_date,
    )
