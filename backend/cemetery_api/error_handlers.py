"""Terminal error handling: normalize, log, and format every failure.

Every error response in the API goes through ``handle_exception``, either as
a registered FastAPI exception handler or, for middlewares that short-circuit
the stack, by calling ``error_response`` directly. Route handlers never build
error payloads themselves.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .context import REQUEST_ID_HEADER, get_request_context, get_request_id
from .db_errors import extract_driver_error, translate_db_error
from .errors import (
    AppError,
    InternalServerError,
    NotFoundError,
    TooManyRequestsError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Internal server error"


def _default_code(status_code: int) -> str:
    if status_code >= 500:
        return "INTERNAL_SERVER_ERROR"
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "ERROR"


def validation_details(exc: RequestValidationError | PydanticValidationError) -> list[dict[str, Any]]:
    """``{field, message, rejectedValue}`` for every error, in report order.

    Paths are dotted with list indexes in brackets: ``items[1].amount``.
    """
    details = []
    for err in exc.errors():
        field = ""
        for part in err.get("loc", ()):
            if part in ("body", "query", "path", "header"):
                continue
            if isinstance(part, int):
                field += f"[{part}]"
            else:
                field = f"{field}.{part}" if field else str(part)
        details.append({
            "field": field or "request",
            "message": err.get("msg", "Invalid value"),
            "rejectedValue": err.get("input"),
        })
    return details


def normalize_error(exc: BaseException, request: Request | None = None) -> AppError:
    """Convert any raised value into exactly one AppError.

    First match wins: AppError as-is, database driver errors by SQLSTATE,
    JSON syntax errors, framework HTTP/validation errors, then a generic 500
    that keeps the original as its cause.
    """
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, SQLAlchemyError) or extract_driver_error(exc) is not None:
        return translate_db_error(exc)
    if isinstance(exc, json.JSONDecodeError):
        return ValidationError("Invalid JSON payload", cause=exc)
    if isinstance(exc, StarletteHTTPException):
        if exc.status_code == 404:
            path = request.url.path if request is not None else ""
            return NotFoundError(f"Route {path}".strip(), cause=exc)
        if exc.status_code >= 400:
            message = exc.detail if isinstance(exc.detail, str) else None
            return AppError(
                message or HTTPStatus(exc.status_code).phrase,
                status_code=exc.status_code,
                code=_default_code(exc.status_code),
                is_operational=exc.status_code < 500,
                cause=exc,
            )
    if isinstance(exc, RequestValidationError):
        return ValidationError("Validation failed", details=validation_details(exc), cause=exc)
    return InternalServerError(GENERIC_MESSAGE, cause=exc)


def _is_production(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings is not None and settings.is_production)


def _format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def log_error(error: AppError, request: Request, original: BaseException) -> None:
    """Log every normalized error with its request context.

    4xx traffic is logged too (at WARNING) so rejected requests are as
    observable as server faults.
    """
    ctx = get_request_context(request)
    user = getattr(request.state, "user", None)
    level = logging.ERROR if error.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "%s: %s | status=%s code=%s method=%s path=%s user=%s duration_ms=%s details=%s",
        error.name,
        error.message,
        error.status_code,
        error.code,
        request.method,
        request.url.path,
        getattr(user, "id", None),
        f"{ctx.elapsed_ms():.1f}" if ctx is not None else None,
        error.details,
        extra={"request_id": get_request_id(request)},
        exc_info=(type(original), original, original.__traceback__),
    )


def build_error_body(
    error: AppError,
    request_id: str,
    *,
    production: bool,
    original: BaseException | None = None,
) -> dict[str, Any]:
    """Render the client-visible error envelope."""
    status_code = error.status_code or 500
    body: dict[str, Any] = {
        "message": error.message if error.is_operational else GENERIC_MESSAGE,
        "code": error.code or _default_code(status_code),
        "type": error.name,
    }
    if error.details is not None and (isinstance(error, ValidationError) or not production):
        body["details"] = error.details
    if not production:
        body["stack"] = _format_stack(original if original is not None else error)
    return {
        "success": False,
        "statusCode": status_code,
        "error": body,
        "requestId": request_id,
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def error_response(request: Request, exc: BaseException) -> JSONResponse:
    """Normalize, log and format ``exc`` for ``request``."""
    error = normalize_error(exc, request)
    log_error(error, request, exc)

    request_id = get_request_id(request)
    headers = {REQUEST_ID_HEADER: request_id}
    if isinstance(exc, StarletteHTTPException) and exc.headers:
        headers.update(exc.headers)
    if isinstance(error, TooManyRequestsError):
        headers["Retry-After"] = str(error.retry_after)
    if isinstance(error, UnauthorizedError):
        headers["WWW-Authenticate"] = "Bearer"

    body = build_error_body(error, request_id, production=_is_production(request), original=exc)
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(body), headers=headers)


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    return error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Route every failure type to the single terminal handler.

    ``Exception`` is served by Starlette's outermost server-error middleware;
    everything else by the inner exception middleware.
    """
    for exc_class in (
        AppError,
        StarletteHTTPException,
        RequestValidationError,
        SQLAlchemyError,
        json.JSONDecodeError,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle_exception)
