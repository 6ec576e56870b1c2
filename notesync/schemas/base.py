"""
Base Schemas.

Shared error structure carried inside sync results.
"""

from typing import Any

from pydantic import BaseModel

from notesync.core.exceptions import ApplicationError


class ErrorDetail(BaseModel):
    """Error detail structure."""

    code: str
    message: str
    details: dict[str, Any] | None = None

    @classmethod
    def from_exception(cls, exc: ApplicationError) -> "ErrorDetail":
        """Build an ErrorDetail from an application exception."""
        details = None
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            details = {"status_code": status_code}
        return cls(code=exc.code, message=exc.message, details=details)
