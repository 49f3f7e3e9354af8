"""
Application error taxonomy.

Every error a service raises on purpose derives from ``AppException`` and
carries a stable ``kind`` that is returned to the caller next to a readable
message. ``main.py`` turns them into JSON responses.
"""

from typing import Any, List, Optional


class AppException(Exception):
    status_code: int = 400
    kind: str = "error"

    def __init__(
        self,
        message: str,
        details: Optional[List[Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        content = {"error": self.message, "type": self.kind}
        if self.details:
            content["details"] = self.details
        return content


class ValidationFailed(AppException):
    status_code = 422
    kind = "validation_error"


class NotFoundError(AppException):
    status_code = 404
    kind = "not_found"


class ForbiddenError(AppException):
    status_code = 403
    kind = "forbidden"


class ConflictError(AppException):
    status_code = 409
    kind = "conflict"


class StorageError(AppException):
    status_code = 500
    kind = "storage_error"


class UpstreamError(AppException):
    """The external question bank failed or timed out."""

    status_code = 502
    kind = "upstream_error"
