from __future__ import annotations

import pytest

from cemetery_api.pagination import (
    create_paginated_response,
    create_pagination_meta,
    parse_filter_params,
    parse_pagination_params,
    parse_search_param,
    parse_sort_params,
)


@pytest.mark.parametrize(
    ("query", "page", "limit"),
    [
        ({}, 1, 20),
        ({"page": "3", "limit": "50"}, 3, 50),
        ({"page": "0", "limit": "-4"}, 1, 20),
        ({"page": "abc", "limit": "1.5"}, 1, 20),
        ({"limit": "500"}, 1, 100),
    ],
)
def test_parse_pagination_params(query: dict, page: int, limit: int) -> None:
    params = parse_pagination_params(query)

    assert (params.page, params.limit) == (page, limit)


def test_offset() -> None:
    assert parse_pagination_params({"page": "4", "limit": "25"}).offset == 75


def test_pagination_meta() -> None:
    assert create_pagination_meta(total=45, page=2, limit=20) == {
        "page": 2,
        "limit": 20,
        "total": 45,
        "totalPages": 3,
        "hasMore": True,
        "hasPrev": True,
        "hasNext": True,
    }

    last = create_pagination_meta(total=45, page=3, limit=20)
    assert last["hasNext"] is False and last["hasMore"] is False


def test_empty_result_page() -> None:
    response = create_paginated_response([], total=0, page=1, limit=20)

    assert response["data"] == []
    assert response["pagination"]["totalPages"] == 0
    assert response["pagination"]["hasPrev"] is False


def test_filter_params_skip_empty_and_all() -> None:
    query = {"status": "pending", "priority": "all", "type": "", "title": "ignored"}

    assert parse_filter_params(query, ("status", "priority", "type")) == {"status": "pending"}


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ({}, ("created_at", "DESC")),
        ({"sort": "dueDate", "order": "asc"}, ("due_date", "ASC")),
        ({"sort": "password_hash", "order": "sideways"}, ("created_at", "DESC")),
    ],
)
def test_parse_sort_params(query: dict, expected: tuple[str, str]) -> None:
    assert parse_sort_params(query, "created_at", "DESC", ("created_at", "due_date")) == expected


def test_parse_search_param() -> None:
    assert parse_search_param({"search": "  oak  "}) == "oak"
    assert parse_search_param({"q": "maple"}) == "maple"
    assert parse_search_param({"search": "   "}) is None
