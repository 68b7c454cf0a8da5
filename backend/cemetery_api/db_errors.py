"""Translation of database driver errors into AppErrors."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import exc as sa_exc

from .errors import AppError, BadRequestError, ConflictError, DatabaseError


class DriverErrorKind(str, enum.Enum):
    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"
    INVALID_TEXT_REPRESENTATION = "22P02"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str | None) -> "DriverErrorKind":
        for kind in cls:
            if kind.value == code:
                return kind
        return cls.OTHER


_SQLSTATE = re.compile(r"^[0-9A-Z]{5}$")

# sqlite3 (local development and tests) reports symbolic names, not SQLSTATEs.
_SQLITE_CODES = {
    "SQLITE_CONSTRAINT_UNIQUE": DriverErrorKind.UNIQUE_VIOLATION.value,
    "SQLITE_CONSTRAINT_PRIMARYKEY": DriverErrorKind.UNIQUE_VIOLATION.value,
    "SQLITE_CONSTRAINT_FOREIGNKEY": DriverErrorKind.FOREIGN_KEY_VIOLATION.value,
    "SQLITE_CONSTRAINT_NOTNULL": DriverErrorKind.NOT_NULL_VIOLATION.value,
    "SQLITE_CONSTRAINT_CHECK": DriverErrorKind.CHECK_VIOLATION.value,
}


@dataclass(frozen=True)
class DriverErrorInfo:
    code: str | None
    constraint: str | None = None
    table: str | None = None
    column: str | None = None
    detail: str | None = None

    @property
    def kind(self) -> DriverErrorKind:
        return DriverErrorKind.from_code(self.code)

    def as_details(self) -> dict[str, Any]:
        details: dict[str, Any] = {"dbCode": self.code}
        if self.constraint:
            details["constraint"] = self.constraint
        if self.table:
            details["table"] = self.table
        if self.column:
            details["column"] = self.column
        return details


def _plain_sqlstate(orig: BaseException) -> str | None:
    # SQLAlchemy's own exceptions carry a documentation ``code``, and other
    # libraries use ``code`` for their own identifiers.
    if isinstance(orig, sa_exc.SQLAlchemyError):
        return None
    code = getattr(orig, "code", None)
    return code if isinstance(code, str) and _SQLSTATE.match(code) else None


def extract_driver_error(exc: BaseException) -> DriverErrorInfo | None:
    """Read the SQLSTATE and diagnostics off a driver exception.

    SQLAlchemy wraps the DBAPI exception in ``exc.orig``. psycopg2 exposes
    ``pgcode`` and a ``diag`` object; psycopg 3 exposes ``sqlstate``. Plain
    objects carrying a SQLSTATE-shaped ``code`` plus ``table``/``constraint``
    attributes are accepted too.
    """
    orig = getattr(exc, "orig", None) or exc
    code = (
        getattr(orig, "pgcode", None)
        or getattr(orig, "sqlstate", None)
        or _plain_sqlstate(orig)
        or _SQLITE_CODES.get(getattr(orig, "sqlite_errorname", None))
    )
    if not isinstance(code, str):
        return None

    diag = getattr(orig, "diag", None)

    def _attr(diag_name: str, plain_name: str) -> str | None:
        value = getattr(diag, diag_name, None) if diag is not None else None
        return value or getattr(orig, plain_name, None)

    return DriverErrorInfo(
        code=code,
        constraint=_attr("constraint_name", "constraint"),
        table=_attr("table_name", "table"),
        column=_attr("column_name", "column"),
        detail=_attr("message_detail", "detail"),
    )


def translate_db_error(exc: BaseException) -> AppError:
    """Map a database failure to the matching AppError subclass."""
    if isinstance(exc, sa_exc.TimeoutError):
        return DatabaseError("Database connection pool exhausted", cause=exc)

    info = extract_driver_error(exc)
    if info is None:
        if isinstance(exc, sa_exc.OperationalError):
            return DatabaseError("Database unavailable", cause=exc)
        return DatabaseError(cause=exc)

    details = info.as_details()
    kind = info.kind
    if kind is DriverErrorKind.UNIQUE_VIOLATION:
        return ConflictError("Resource already exists", code="CONFLICT", details=details, cause=exc)
    if kind is DriverErrorKind.FOREIGN_KEY_VIOLATION:
        return ConflictError(
            "Referenced resource does not exist or is still in use",
            code="FOREIGN_KEY_CONFLICT",
            details=details,
            cause=exc,
        )
    if kind is DriverErrorKind.NOT_NULL_VIOLATION:
        return BadRequestError("Required field is missing", code="NOT_NULL_VIOLATION", details=details, cause=exc)
    if kind is DriverErrorKind.CHECK_VIOLATION:
        return BadRequestError("Value violates a data constraint", code="CHECK_VIOLATION", details=details, cause=exc)
    if kind is DriverErrorKind.INVALID_TEXT_REPRESENTATION:
        return BadRequestError("Invalid input syntax", code="INVALID_INPUT", details=details, cause=exc)
    return DatabaseError(details=details, cause=exc)
