"""SurveyResponse model - an immutable submitted answer set."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, compact, iso, utcnow

CATEGORY_FIELDS = {
    "teacher": "teacher_score",
    "curriculum": "curriculum_score",
    "care": "care_score",
    "facilities": "facilities_score",
}
SUBMITTER_TYPES = ("student", "parent")


class SurveyResponse(UUIDMixin, Base):
    __tablename__ = "survey_response"

    # One response per assignment; NULL (unassigned) rows are not constrained.
    assignment_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, default=None, unique=True, index=True
    )
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    template_name: Mapped[str] = mapped_column(String(200))
    student_id: Mapped[str] = mapped_column(String(100), index=True)
    student_name: Mapped[str] = mapped_column(String(200))
    student_code: Mapped[str | None] = mapped_column(String(50), default=None)
    class_id: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    class_name: Mapped[str | None] = mapped_column(String(200), default=None)

    teacher_score: Mapped[int | None] = mapped_column(Integer, default=None)
    curriculum_score: Mapped[int | None] = mapped_column(Integer, default=None)
    care_score: Mapped[int | None] = mapped_column(Integer, default=None)
    facilities_score: Mapped[int | None] = mapped_column(Integer, default=None)
    average_score: Mapped[float | None] = mapped_column(Float, default=None)

    answers: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    comments: Mapped[str | None] = mapped_column(Text, default=None)

    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    submitted_by: Mapped[str] = mapped_column(String(20), default="student")  # student / parent
    submitter_name: Mapped[str | None] = mapped_column(String(200), default=None)
    submitter_phone: Mapped[str | None] = mapped_column(String(50), default=None)

    def as_document(self) -> dict[str, Any]:
        doc = compact({
            "id": str(self.id),
            "assignmentId": str(self.assignment_id) if self.assignment_id else None,
            "templateId": str(self.template_id),
            "templateName": self.template_name,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "studentCode": self.student_code,
            "classId": self.class_id,
            "className": self.class_name,
            "teacherScore": self.teacher_score,
            "curriculumScore": self.curriculum_score,
            "careScore": self.care_score,
            "facilitiesScore": self.facilities_score,
            "averageScore": self.average_score,
            "comments": self.comments,
            "submittedAt": iso(self.submitted_at),
            "submittedBy": self.submitted_by,
            "submitterName": self.submitter_name,
            "submitterPhone": self.submitter_phone,
        })
        # Required even when empty
        doc["answers"] = dict(self.answers or {})
        return doc
