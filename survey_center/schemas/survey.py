"""Survey template, assignment and response schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AnswerValue = str | int | float


class _Doc(BaseModel):
    """Accepts both camelCase document keys and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionIn(_Doc):
    id: str
    question: str
    type: Literal["score", "text", "choice", "rating"] = "score"
    category: Literal["teacher", "curriculum", "care", "facilities", "general"] | None = None
    options: list[str] | None = None
    required: bool = False
    order: int = 0


class TemplateCreate(_Doc):
    name: str
    description: str | None = None
    questions: list[QuestionIn] = Field(default_factory=list)
    is_default: bool = False
    status: Literal["active", "inactive"] = "active"
    created_by: str | None = None


class TemplateUpdate(_Doc):
    name: str | None = None
    description: str | None = None
    questions: list[QuestionIn] | None = None
    is_default: bool | None = None
    status: Literal["active", "inactive"] | None = None

    # Omitted means "leave as is"; only description may be cleared.
    @field_validator("name", "questions", "is_default", "status")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class StudentRef(_Doc):
    """A student as handed to the assignment manager."""

    id: str
    name: str
    code: str | None = None
    class_id: str | None = None
    class_name: str | None = None


class AssignRequest(_Doc):
    students: list[StudentRef]
    assigned_by: str | None = None
    expires_at: datetime | None = None


class ResponseSubmission(_Doc):
    """Everything the response recorder needs to persist one response."""

    assignment_id: uuid.UUID | None = None
    template_id: uuid.UUID
    template_name: str
    student_id: str
    student_name: str
    student_code: str | None = None
    class_id: str | None = None
    class_name: str | None = None
    teacher_score: int | None = Field(default=None, ge=0, le=10)
    curriculum_score: int | None = Field(default=None, ge=0, le=10)
    care_score: int | None = Field(default=None, ge=0, le=10)
    facilities_score: int | None = Field(default=None, ge=0, le=10)
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    comments: str | None = None
    submitted_by: Literal["student", "parent"] = "student"
    submitter_name: str | None = None
    submitter_phone: str | None = None


class FormSubmission(_Doc):
    """Body of a public (token) or portal form submission."""

    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    comments: str | None = None
    submitted_by: Literal["student", "parent"] = "parent"
    submitter_name: str | None = None
    submitter_phone: str | None = None

    @field_validator("submitter_name", "submitter_phone", "comments")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v
