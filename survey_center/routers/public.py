"""Public survey form reached through a token link (no login)."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..errors import ValidationFailure
from ..schemas.survey import FormSubmission
from ..security.rate_limit import survey_submission_rate_limiter
from ..services import form_svc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])

STATE_STATUS = {
    form_svc.READY: 200,
    form_svc.NOT_FOUND: 404,
    form_svc.ALREADY_SUBMITTED: 409,
    form_svc.EXPIRED: 410,
}


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",", 1)[0].strip()
    if forwarded:
        return forwarded[:64]
    if request.client and request.client.host:
        return str(request.client.host)[:64]
    return "unknown"


@router.get("/s/{token}")
async def public_survey(token: str, db: AsyncSession = Depends(get_db)):
    view = await form_svc.resolve_form(db, token)
    return JSONResponse(view.as_document(), status_code=STATE_STATUS[view.state])


@router.post("/s/{token}")
async def public_survey_submit(
    request: Request,
    token: str,
    body: FormSubmission,
    db: AsyncSession = Depends(get_db),
):
    allowed, retry_after = await survey_submission_rate_limiter.allow(_client_ip(request))
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many submissions, try again later",
            headers={"Retry-After": str(retry_after)},
        )

    view = await form_svc.resolve_form(db, token)
    if not view.ready:
        return JSONResponse(view.as_document(), status_code=STATE_STATUS[view.state])

    try:
        response = await form_svc.record_submission(db, view, body)
    except ValidationFailure as exc:
        raise HTTPException(
            status_code=422, detail={"message": exc.message, "missing": exc.missing}
        ) from exc
    return {"id": str(response.id), "state": "submitted"}
