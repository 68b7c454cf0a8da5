"""Row helpers shared by the record routers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..normalize import to_snake_case

T = TypeVar("T")


def get_or_404(db: Session, model: type[T], entity_id: UUID, resource: str) -> T:
    """Load an entity by primary key or raise NotFoundError."""
    entity = db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(resource)
    return entity


def row_to_dict(row: Any, **extra: Any) -> dict[str, Any]:
    """Column values keyed by column name, plus any joined extras."""
    data = {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}
    data.update(extra)
    return data


def column_values(payload: Mapping[str, Any], *, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Map a validated camelCase payload onto column names."""
    skipped = set(exclude)
    return {to_snake_case(key): value for key, value in payload.items() if key not in skipped}


def apply_values(entity: Any, values: Mapping[str, Any]) -> None:
    for column, value in values.items():
        setattr(entity, column, value)


def principal_uuid(principal: Any) -> UUID | None:
    """``created_by`` value for the authenticated principal."""
    try:
        return UUID(str(principal.id))
    except (AttributeError, ValueError):
        return None
