"""Pagination, sorting and search helpers for list endpoints."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Query

from .normalize import to_snake_case

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def parse_pagination_params(
    query: Mapping[str, Any],
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PageParams:
    """Invalid or out-of-range values fall back to defaults; limit is capped."""
    page = _positive_int(query.get("page")) or DEFAULT_PAGE
    limit = _positive_int(query.get("limit")) or default_limit
    return PageParams(page=page, limit=min(limit, max_limit))


def create_pagination_meta(total: int, page: int, limit: int) -> dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasMore": page < total_pages,
        "hasPrev": page > 1,
        "hasNext": page < total_pages,
    }


def create_paginated_response(data: list[Any], total: int, page: int, limit: int) -> dict[str, Any]:
    return {"data": data, "pagination": create_pagination_meta(total, page, limit)}


def parse_filter_params(query: Mapping[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Keep allowed keys; empty values and ``all`` mean no filter."""
    return {
        key: query[key]
        for key in allowed
        if query.get(key) not in (None, "", "all")
    }


def parse_sort_params(
    query: Mapping[str, Any],
    default_sort: str,
    default_order: str = "DESC",
    allowed: Sequence[str] = (),
) -> tuple[str, str]:
    """Return (column name, ASC|DESC). ``sort`` may be camelCase or snake_case."""
    sort = to_snake_case(str(query.get("sort") or default_sort))
    order = str(query.get("order") or default_order).upper()
    if allowed and sort not in allowed:
        sort = default_sort
    if order not in ("ASC", "DESC"):
        order = default_order
    return sort, order


def parse_search_param(query: Mapping[str, Any]) -> str | None:
    search = query.get("search") or query.get("q")
    if isinstance(search, str) and search.strip():
        return search.strip()
    return None


def apply_search(q: Query, search: str | None, columns: Sequence[Any]) -> Query:
    """Case-insensitive substring match across ``columns``."""
    if not search or not columns:
        return q
    pattern = f"%{search}%"
    return q.filter(or_(*(column.ilike(pattern) for column in columns)))


def apply_sort(q: Query, model: Any, sort: str, order: str) -> Query:
    column = getattr(model, sort)
    return q.order_by(column.asc() if order == "ASC" else column.desc())


def paginate(q: Query, params: PageParams) -> tuple[list[Any], int]:
    """Return (rows for the page, total row count)."""
    total = q.order_by(None).count()
    rows = q.offset(params.offset).limit(params.limit).all()
    return rows, total
