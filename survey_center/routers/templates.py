"""Admin JSON API - survey templates."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.survey import TemplateCreate, TemplateUpdate
from ..security.admin import require_admin_key
from ..services import template_svc

router = APIRouter(prefix="/api", tags=["templates"], dependencies=[Depends(require_admin_key)])


@router.get("/templates")
async def list_templates(active_only: bool = False, db: AsyncSession = Depends(get_db)):
    templates = await template_svc.list_templates(db)
    if active_only:
        templates = [t for t in templates if t.is_active]
    return [t.as_document() for t in templates]


@router.post("/templates")
async def create_template(data: TemplateCreate, db: AsyncSession = Depends(get_db)):
    fields = data.model_dump(exclude={"questions"})
    fields["questions"] = [q.model_dump(exclude_none=True) for q in data.questions]
    template = await template_svc.create_template(db, **fields)
    return {"id": str(template.id)}


@router.post("/templates/defaults")
async def seed_default_templates(db: AsyncSession = Depends(get_db)):
    created = await template_svc.ensure_defaults(db)
    return {"created": [str(t.id) for t in created]}


@router.get("/templates/{template_id}")
async def get_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    template = await template_svc.get_template(db, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template.as_document()


@router.patch("/templates/{template_id}")
async def update_template(
    template_id: uuid.UUID,
    data: TemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    fields = data.model_dump(exclude_unset=True, exclude={"questions"})
    if data.questions is not None:
        fields["questions"] = [q.model_dump(exclude_none=True) for q in data.questions]
    template = await template_svc.update_template(db, template_id, **fields)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template.as_document()


@router.delete("/templates/{template_id}")
async def delete_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    deleted = await template_svc.delete_template(db, template_id)
    return {"deleted": deleted}
