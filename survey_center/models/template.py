"""SurveyTemplate model - a named, ordered question set."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, compact, iso, utcnow

QUESTION_TYPES = ("score", "text", "choice", "rating")
QUESTION_CATEGORIES = ("teacher", "curriculum", "care", "facilities", "general")
TEMPLATE_STATUSES = ("active", "inactive")


class SurveyTemplate(UUIDMixin, Base):
    __tablename__ = "survey_template"

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    # [{"id", "question", "type", "category", "options", "required", "order"}]
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String(20), default="active")  # active / inactive
    created_by: Mapped[str | None] = mapped_column(String(200), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    @property
    def ordered_questions(self) -> list[dict[str, Any]]:
        return sorted(self.questions or [], key=lambda q: q.get("order", 0))

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def as_document(self) -> dict[str, Any]:
        return compact({
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "questions": [compact(q) for q in self.ordered_questions],
            "isDefault": bool(self.is_default),
            "status": self.status,
            "createdAt": iso(self.created_at),
            "createdBy": self.created_by,
            "updatedAt": iso(self.updated_at),
        })
