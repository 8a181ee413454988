"""Template service - CRUD survey templates and built-in defaults."""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..changefeed import TEMPLATES, Callback, Unsubscribe, change_feed
from ..models.base import utcnow
from ..models.template import SurveyTemplate

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: list[dict[str, Any]] = [
    {
        "name": "Service quality survey",
        "description": "Standard survey on teaching quality and service",
        "questions": [
            {"id": "teacher", "question": "Rate the teacher (teaching method, enthusiasm)",
             "type": "score", "category": "teacher", "required": True, "order": 1},
            {"id": "curriculum", "question": "Rate the curriculum / your child's progress",
             "type": "score", "category": "curriculum", "required": True, "order": 2},
            {"id": "care", "question": "Rate our customer care",
             "type": "score", "category": "care", "required": True, "order": 3},
            {"id": "facilities", "question": "Rate the facilities",
             "type": "score", "category": "facilities", "required": True, "order": 4},
            {"id": "comments", "question": "Other suggestions",
             "type": "text", "category": "general", "required": False, "order": 5},
        ],
        "is_default": True,
        "status": "active",
    },
    {
        "name": "End-of-course survey",
        "description": "Survey sent when a student completes a course",
        "questions": [
            {"id": "overall", "question": "Overall rating of the course",
             "type": "score", "category": "general", "required": True, "order": 1},
            {"id": "teacher", "question": "Rate the teacher",
             "type": "score", "category": "teacher", "required": True, "order": 2},
            {"id": "progress", "question": "Has your child progressed as expected?",
             "type": "choice", "category": "curriculum",
             "options": ["Above expectations", "As expected", "Below expectations"],
             "required": True, "order": 3},
            {"id": "recommend", "question": "Would you recommend the center to others?",
             "type": "choice", "category": "general",
             "options": ["Definitely", "Maybe", "No"], "required": True, "order": 4},
            {"id": "continue", "question": "Do you want to enrol in the next course?",
             "type": "choice", "category": "general",
             "options": ["Yes", "Considering", "No"], "required": True, "order": 5},
            {"id": "feedback", "question": "How can we improve?",
             "type": "text", "category": "general", "required": False, "order": 6},
        ],
        "is_default": False,
        "status": "active",
    },
    {
        "name": "Monthly quick pulse",
        "description": "Short monthly satisfaction check",
        "questions": [
            {"id": "satisfaction", "question": "Overall satisfaction this month",
             "type": "score", "category": "general", "required": True, "order": 1},
            {"id": "issue", "question": "Anything you would like to report?",
             "type": "text", "category": "general", "required": False, "order": 2},
        ],
        "is_default": False,
        "status": "active",
    },
]


async def list_templates(db: AsyncSession) -> list[SurveyTemplate]:
    stmt = select(SurveyTemplate).order_by(SurveyTemplate.created_at.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_template(db: AsyncSession, template_id: uuid.UUID) -> SurveyTemplate | None:
    return await db.get(SurveyTemplate, template_id)


async def create_template(db: AsyncSession, **kwargs) -> SurveyTemplate:
    template = SurveyTemplate(**kwargs)
    db.add(template)
    await db.commit()
    await db.refresh(template)
    await change_feed.notify(TEMPLATES)
    return template


async def update_template(
    db: AsyncSession, template_id: uuid.UUID, **kwargs
) -> SurveyTemplate | None:
    template = await db.get(SurveyTemplate, template_id)
    if not template:
        return None
    for k, v in kwargs.items():
        setattr(template, k, v)
    template.updated_at = utcnow()
    await db.commit()
    await db.refresh(template)
    await change_feed.notify(TEMPLATES)
    return template


async def delete_template(db: AsyncSession, template_id: uuid.UUID) -> bool:
    """Delete a template; assignments and responses keep their copies."""
    template = await db.get(SurveyTemplate, template_id)
    if not template:
        return False
    await db.delete(template)
    await db.commit()
    await change_feed.notify(TEMPLATES)
    return True


async def ensure_defaults(db: AsyncSession) -> list[SurveyTemplate]:
    """Seed the built-in templates when the collection is empty."""
    count = (await db.execute(select(func.count()).select_from(SurveyTemplate))).scalar() or 0
    if count:
        return []

    created = []
    for data in DEFAULT_TEMPLATES:
        created.append(await create_template(db, **copy.deepcopy(data)))
    logger.info("Seeded %d default survey templates", len(created))
    return created


async def _template_snapshot(db: AsyncSession) -> list[dict]:
    return [t.as_document() for t in await list_templates(db)]


async def subscribe_templates(callback: Callback) -> Unsubscribe:
    return await change_feed.subscribe(TEMPLATES, _template_snapshot, callback)
