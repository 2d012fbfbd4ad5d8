"""API error taxonomy.

Handlers raise these; the exception handlers registered in ``folio.main``
turn them into the ``{"success": false, "error": {...}}`` envelope.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFLICT = "CONFLICT"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"


class ApiError(Exception):
    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal Server Error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details
        self.headers = headers
        super().__init__(self.message)


class BadRequestError(ApiError):
    status_code = 400
    code = ErrorCode.BAD_REQUEST
    default_message = "Bad Request"


class ValidationFailedError(ApiError):
    status_code = 400
    code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation failed"


class UnauthorizedError(ApiError):
    status_code = 401
    code = ErrorCode.UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(ApiError):
    status_code = 404
    code = ErrorCode.NOT_FOUND
    default_message = "Not Found"


class ConflictError(ApiError):
    status_code = 409
    code = ErrorCode.CONFLICT
    default_message = "Conflict"


class PayloadTooLargeError(ApiError):
    status_code = 413
    code = ErrorCode.PAYLOAD_TOO_LARGE
    default_message = "Payload Too Large"


class TooManyRequestsError(ApiError):
    status_code = 429
    code = ErrorCode.TOO_MANY_REQUESTS
    default_message = "Too Many Requests"

    def __init__(self, message: str | None = None, *, retry_after: int | None = None):
        headers = {"Retry-After": str(retry_after)} if retry_after else None
        super().__init__(message, headers=headers)
        self.retry_after = retry_after


class InternalError(ApiError):
    default_message = "Internal server error"
