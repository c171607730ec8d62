"""Service-layer exceptions shared by the survey and locality services."""
from __future__ import annotations


class SurveyServiceError(Exception):
    """Base exception for survey service errors."""

    def __init__(self, message: str, *, status: int = 400, code: str = "error") -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class ValidationError(SurveyServiceError):
    """Raised when a request is missing data or has the wrong shape."""

    def __init__(self, message: str, *, code: str = "validation_failed") -> None:
        super().__init__(message, status=400, code=code)
