"""Survey Center exceptions."""

from __future__ import annotations


class SurveyError(Exception):
    """Base exception for survey operations."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFound(SurveyError):
    """Referenced template, assignment or student does not exist."""

    pass


class ValidationFailure(SurveyError):
    """Submission rejected before anything was written."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = list(missing or [])
        super().__init__(message)


class AuthenticationFailed(SurveyError):
    """Student code or password did not match."""

    pass
