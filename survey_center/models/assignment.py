"""SurveyAssignment model - one student's obligation to answer a template."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, as_utc, compact, iso, utcnow

ASSIGNMENT_STATUSES = ("pending", "submitted", "expired")


class SurveyAssignment(UUIDMixin, Base):
    __tablename__ = "survey_assignment"
    __table_args__ = (
        # At most one pending assignment per (template, student).
        Index(
            "uq_survey_assignment_pending",
            "template_id",
            "student_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    # No FK: deleting a template leaves assignments readable via the
    # denormalised name.
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    template_name: Mapped[str] = mapped_column(String(200))
    student_id: Mapped[str] = mapped_column(String(100), index=True)
    student_name: Mapped[str] = mapped_column(String(200))
    student_code: Mapped[str | None] = mapped_column(String(50), default=None)
    class_id: Mapped[str | None] = mapped_column(String(100), default=None)
    class_name: Mapped[str | None] = mapped_column(String(200), default=None)
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    # pending / submitted / expired
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    assigned_by: Mapped[str | None] = mapped_column(String(200), default=None)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    def is_past_due(self, now: datetime) -> bool:
        expires = as_utc(self.expires_at)
        return self.status == "pending" and expires is not None and expires <= now

    def as_document(self) -> dict[str, Any]:
        return compact({
            "id": str(self.id),
            "templateId": str(self.template_id),
            "templateName": self.template_name,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "studentCode": self.student_code,
            "classId": self.class_id,
            "className": self.class_name,
            "status": self.status,
            "token": self.token,
            "assignedAt": iso(self.assigned_at),
            "assignedBy": self.assigned_by,
            "expiresAt": iso(self.expires_at),
            "submittedAt": iso(self.submitted_at),
        })
