"""Survey form workflow shared by public token links and the student portal."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ValidationFailure
from ..models.assignment import SurveyAssignment
from ..models.response import SurveyResponse
from ..models.template import SurveyTemplate
from ..schemas.survey import FormSubmission, ResponseSubmission
from . import assignment_svc, response_svc, template_svc

READY = "ready"
ALREADY_SUBMITTED = "already_submitted"
EXPIRED = "expired"
NOT_FOUND = "not_found"


@dataclass
class FormView:
    state: str
    message: str = ""
    assignment: SurveyAssignment | None = None
    template: SurveyTemplate | None = None

    @property
    def ready(self) -> bool:
        return self.state == READY

    def as_document(self) -> dict:
        doc: dict = {"state": self.state}
        if self.message:
            doc["message"] = self.message
        if self.ready:
            doc["assignment"] = self.assignment.as_document()
            doc["template"] = self.template.as_document()
        return doc


async def view_for_assignment(
    db: AsyncSession, assignment: SurveyAssignment | None
) -> FormView:
    assignment = await assignment_svc.check_expiry(db, assignment)
    if assignment is None:
        return FormView(NOT_FOUND, "This link does not exist or is no longer valid")
    if assignment.status == "submitted":
        return FormView(ALREADY_SUBMITTED, "This survey has already been submitted")
    if assignment.status == "expired":
        return FormView(EXPIRED, "This link has expired")

    template = await template_svc.get_template(db, assignment.template_id)
    if template is None:
        return FormView(NOT_FOUND, "This survey form no longer exists")
    if not template.is_active:
        return FormView(EXPIRED, "This survey form has been locked")
    return FormView(READY, assignment=assignment, template=template)


async def resolve_form(db: AsyncSession, token: str) -> FormView:
    return await view_for_assignment(db, await assignment_svc.get_by_token(db, token))


async def record_submission(
    db: AsyncSession,
    view: FormView,
    body: FormSubmission,
    require_submitter_name: bool = True,
) -> SurveyResponse:
    """Validate a filled-in form for a ready view and record it."""
    if not view.ready:
        raise ValidationFailure(view.message or f"Survey is {view.state}")
    if require_submitter_name and not body.submitter_name:
        raise ValidationFailure("Submitter name is required", missing=["submitterName"])

    template, assignment = view.template, view.assignment
    response_svc.check_required_answers(template, body.answers)

    try:
        data = ResponseSubmission(
            assignment_id=assignment.id,
            template_id=template.id,
            template_name=template.name,
            student_id=assignment.student_id,
            student_name=assignment.student_name,
            student_code=assignment.student_code,
            class_id=assignment.class_id,
            class_name=assignment.class_name,
            answers=body.answers,
            comments=body.comments,
            submitted_by=body.submitted_by,
            submitter_name=body.submitter_name,
            submitter_phone=body.submitter_phone,
            **response_svc.category_scores_from_answers(body.answers),
        )
    except PydanticValidationError as exc:
        raise ValidationFailure(f"Invalid answers: {exc.error_count()} error(s)") from exc
    return await response_svc.submit_response(db, data)
