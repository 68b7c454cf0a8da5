"""Application error taxonomy with stable machine-readable codes."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Error with HTTP status, stable code and an operational flag.

    Operational errors are expected failures (bad input, missing rows,
    conflicts) whose message is safe to show to the client. Non-operational
    errors are defects or infrastructure faults; the formatter never exposes
    their message.
    """

    default_status_code = 500
    default_code: str | None = None
    default_message = "An error occurred"
    default_operational = True

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Any = None,
        is_operational: bool | None = None,
        cause: BaseException | None = None,
    ) -> None:
        status = status_code if status_code is not None else self.default_status_code
        if not 400 <= status < 600:
            raise ValueError(f"AppError status_code must be in [400, 600), got {status}")
        self.status_code = status
        self.message = message or self.default_message
        self.code = code if code is not None else self.default_code
        self.details = details
        self.is_operational = self.default_operational if is_operational is None else is_operational
        self.cause = cause
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    default_status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None, **kwargs: Any) -> None:
        super().__init__(message, details=details if details is not None else [], **kwargs)


class BadRequestError(AppError):
    default_status_code = 400
    default_code = "BAD_REQUEST"
    default_message = "Bad request"


class UnauthorizedError(AppError):
    default_status_code = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized access"


class ForbiddenError(AppError):
    default_status_code = 403
    default_code = "FORBIDDEN"
    default_message = "Access forbidden"


class NotFoundError(AppError):
    default_status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", **kwargs: Any) -> None:
        super().__init__(f"{resource} not found", **kwargs)


class TimeoutError(AppError):  # noqa: A001
    default_status_code = 408
    default_code = "TIMEOUT"

    def __init__(self, operation: str = "request", **kwargs: Any) -> None:
        super().__init__(f"Operation '{operation}' timed out", **kwargs)


class ConflictError(AppError):
    default_status_code = 409
    default_code = "CONFLICT"
    default_message = "Resource conflict"


class TooManyRequestsError(AppError):
    default_status_code = 429
    default_code = "RATE_LIMITED"
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: str | None = None, *, retry_after: int = 60, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class DatabaseError(AppError):
    default_status_code = 500
    default_code = "DATABASE_ERROR"
    default_message = "Database error"
    default_operational = False


class ConfigurationError(AppError):
    default_status_code = 500
    default_code = "CONFIG_ERROR"
    default_message = "Server misconfiguration"
    default_operational = False


class InternalServerError(AppError):
    default_status_code = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"
    default_operational = False


class PayloadTooLargeError(AppError):
    default_status_code = 413
    default_code = "PAYLOAD_TOO_LARGE"
    default_message = "Request body too large"
