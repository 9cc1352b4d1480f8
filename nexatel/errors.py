"""Errors raised at the HTTP boundary. The analytics core itself never raises."""

from typing import Any, Dict


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class EmptyImportError(AppError):
    """Raised when an uploaded CSV decodes to no customers."""

    def __init__(self, message: str = "No customer rows found; expected a header row and at least one data row"):
        super().__init__(message, status_code=422)


def to_payload(error: AppError) -> Dict[str, Any]:
    return {"message": str(error), "status": "error"}
