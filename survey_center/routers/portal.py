"""Student portal - login, pending surveys, in-portal submission."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..errors import AuthenticationFailed, NotFound, ValidationFailure
from ..schemas.student import LoginIn, PasswordChange
from ..schemas.survey import FormSubmission
from ..security.sessions import StudentSession, issue_session_token, require_student_session
from ..services import assignment_svc, form_svc, student_svc
from .public import STATE_STATUS

router = APIRouter(prefix="/portal", tags=["portal"])


@router.post("/login")
async def login(data: LoginIn, db: AsyncSession = Depends(get_db)):
    try:
        session = await student_svc.authenticate(db, data.code, data.password)
    except AuthenticationFailed as exc:
        raise HTTPException(status_code=401, detail=exc.message) from exc

    token = issue_session_token(session)
    response = JSONResponse({"token": token, "session": session.as_document()})
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.auth_session_ttl_seconds,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        path="/",
    )
    return response


@router.post("/logout")
async def logout():
    response = JSONResponse({"loggedOut": True})
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return response


@router.get("/me")
async def me(session: StudentSession = Depends(require_student_session)):
    return session.as_document()


@router.post("/password")
async def change_password(
    data: PasswordChange,
    session: StudentSession = Depends(require_student_session),
    db: AsyncSession = Depends(get_db),
):
    if not data.new_password:
        raise HTTPException(status_code=422, detail="New password is required")
    try:
        await student_svc.change_password(
            db, uuid.UUID(session.student_id), data.old_password, data.new_password
        )
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    except AuthenticationFailed as exc:
        raise HTTPException(status_code=401, detail=exc.message) from exc
    return {"updated": True}


@router.get("/surveys")
async def pending_surveys(
    session: StudentSession = Depends(require_student_session),
    db: AsyncSession = Depends(get_db),
):
    pending = await assignment_svc.list_pending_for_student(db, session.student_id)
    return [a.as_document() for a in pending]


async def _own_view(
    db: AsyncSession, assignment_id: uuid.UUID, session: StudentSession
) -> form_svc.FormView:
    assignment = await assignment_svc.get_assignment(db, assignment_id)
    if assignment is not None and assignment.student_id != session.student_id:
        assignment = None
    return await form_svc.view_for_assignment(db, assignment)


@router.get("/surveys/{assignment_id}")
async def open_survey(
    assignment_id: uuid.UUID,
    session: StudentSession = Depends(require_student_session),
    db: AsyncSession = Depends(get_db),
):
    view = await _own_view(db, assignment_id, session)
    return JSONResponse(view.as_document(), status_code=STATE_STATUS[view.state])


@router.post("/surveys/{assignment_id}")
async def submit_survey(
    assignment_id: uuid.UUID,
    body: FormSubmission,
    session: StudentSession = Depends(require_student_session),
    db: AsyncSession = Depends(get_db),
):
    view = await _own_view(db, assignment_id, session)
    if not view.ready:
        return JSONResponse(view.as_document(), status_code=STATE_STATUS[view.state])

    body = body.model_copy(update={
        "submitted_by": "student",
        "submitter_name": body.submitter_name or session.student_name,
    })
    try:
        response = await form_svc.record_submission(db, view, body)
    except ValidationFailure as exc:
        raise HTTPException(
            status_code=422, detail={"message": exc.message, "missing": exc.missing}
        ) from exc
    return {"id": str(response.id), "state": "submitted"}
