"""Request body validation on pydantic models.

Every request model derives from RequestModel. Inbound keys are camelCase
(see normalize.py); strings are trimmed and blank values count as absent.
A model may attach client-facing messages to a field: one for a missing
value and one for a value failing its type or constraints. Failures for
every field are collected and raised together as one ValidationError.
"""
from __future__ import annotations

from typing import Annotated, Any, Callable, ClassVar, Optional
from uuid import UUID

from fastapi import Depends
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .error_handlers import validation_details
from .errors import ValidationError
from .normalize import json_body

# Largest values the Integer and Numeric(12, 2) columns can hold.
MAX_INT = 2**31 - 1
MAX_MONEY = 9_999_999_999.99

PHONE_PATTERN = r"^[\d\s\-\+\(\)]+$"
ZIP_PATTERN = r"^\d{5}(-\d{4})?$"

Email = Annotated[EmailStr, AfterValidator(str.lower)]


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", allow_inf_nan=False
    )

    # field name -> (message when missing, message when invalid)
    messages: ClassVar[dict[str, tuple[Optional[str], Optional[str]]]] = {}
    # Fields whose surrounding whitespace is significant.
    untrimmed: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _blank_is_absent(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            value = data.get(key)
            if isinstance(value, str) and name not in cls.untrimmed:
                value = value.strip()
            cleaned[key] = None if value == "" else value
        return cleaned

    @field_validator("*", mode="wrap")
    @classmethod
    def _explain(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        missing, invalid = cls.messages.get(info.field_name, (None, None))
        if value is None:
            if cls.model_fields[info.field_name].is_required():
                raise PydanticCustomError("required", missing or invalid or "Field is required")
            return None
        try:
            return handler(value)
        except PydanticValidationError as exc:
            # Errors inside nested objects and list items keep their own paths.
            if invalid is None or any(err["loc"] for err in exc.errors()):
                raise
            raise PydanticCustomError("invalid", invalid) from None


def validate(model: type[RequestModel], payload: Any) -> dict[str, Any]:
    """Validate a payload; raise ValidationError listing every failure.

    Returns the model's camelCase dump: every declared field present, absent
    optionals as None, values already converted to their declared types.
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            "Validation failed",
            details=[{"field": "body", "message": "Request body must be a JSON object", "rejectedValue": payload}],
        )
    try:
        return model.model_validate(payload).model_dump(by_alias=True)
    except PydanticValidationError as exc:
        raise ValidationError("Validation failed", details=validation_details(exc), cause=exc) from exc


def validated_body(model: type[RequestModel]) -> Callable[..., Any]:
    """Build a FastAPI dependency returning the validated body."""

    async def dependency(payload: Any = Depends(json_body)) -> dict[str, Any]:
        return validate(model, payload)

    return dependency


def valid_id(id: str) -> UUID:  # noqa: A002
    """Path parameter dependency for ``/{id}`` routes."""
    try:
        return UUID(id)
    except ValueError:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "id", "message": "Invalid ID format", "rejectedValue": id}],
        ) from None
