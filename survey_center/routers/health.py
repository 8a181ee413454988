"""Liveness and readiness probes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from ..changefeed import change_feed
from ..database import get_db
from ..models.template import SurveyTemplate
from ..worker import expiry_sweeper

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "healthy", "service": "survey-center"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Ready once the schema is queryable; reports background state."""
    templates = (await db.execute(select(func.count()).select_from(SurveyTemplate))).scalar() or 0
    return {
        "status": "ready",
        "templates": templates,
        "liveSubscribers": change_feed.subscriber_count,
        "expirySweeper": "running" if expiry_sweeper.running else "stopped",
        "expiredBySweeper": expiry_sweeper.total_expired,
    }
