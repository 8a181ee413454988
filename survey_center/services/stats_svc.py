"""Survey statistics: response rate and category score means."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from . import assignment_svc, response_svc


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


async def compute_statistics(
    db: AsyncSession,
    template_id: uuid.UUID | None = None,
    class_id: str | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
) -> dict:
    """Compute response rate and average scores.

    Assignments are scoped by template only; responses by every filter.
    ``overall`` averages each response's averageScore (a mean of means).
    """
    assignments = await assignment_svc.list_assignments(db, template_id=template_id)
    responses = await response_svc.list_responses(
        db,
        template_id=template_id,
        class_id=class_id,
        from_date=from_date,
        to_date=to_date,
    )

    submitted = sum(1 for a in assignments if a.status == "submitted")
    rate = round(submitted / len(assignments) * 100, 1) if assignments else 0.0

    def scores(attr: str) -> list[float]:
        values = (getattr(r, attr) for r in responses)
        return [v for v in values if v is not None and v > 0]

    return {
        "totalAssigned": len(assignments),
        "totalSubmitted": submitted,
        "responseRate": rate,
        "averageScores": {
            "teacher": _mean(scores("teacher_score")),
            "curriculum": _mean(scores("curriculum_score")),
            "care": _mean(scores("care_score")),
            "facilities": _mean(scores("facilities_score")),
            "overall": _mean(scores("average_score")),
        },
    }
