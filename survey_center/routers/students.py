"""Admin JSON API - student records."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.student import PasswordSet, StudentCreate
from ..security.admin import require_admin_key
from ..services import student_svc

router = APIRouter(prefix="/api", tags=["students"], dependencies=[Depends(require_admin_key)])


@router.post("/students")
async def create_student(data: StudentCreate, db: AsyncSession = Depends(get_db)):
    try:
        student = await student_svc.create_student(db, **data.model_dump())
    except IntegrityError as exc:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Student code already exists") from exc
    return {"id": str(student.id), "code": student.code}


@router.post("/students/{student_id}/password")
async def set_student_password(
    student_id: uuid.UUID,
    data: PasswordSet,
    db: AsyncSession = Depends(get_db),
):
    if not data.password:
        raise HTTPException(status_code=422, detail="Password is required")
    student = await student_svc.set_password(db, student_id, data.password)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return {"updated": True}
