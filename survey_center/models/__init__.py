"""Survey Center models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin
from .template import SurveyTemplate
from .assignment import SurveyAssignment
from .response import SurveyResponse
from .student import Student

__all__ = [
    "Base",
    "UUIDMixin",
    "SurveyTemplate",
    "SurveyAssignment",
    "SurveyResponse",
    "Student",
]
