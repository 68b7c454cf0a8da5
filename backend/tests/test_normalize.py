from __future__ import annotations

import json

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from cemetery_api.normalize import (
    MAX_JSON_DEPTH,
    camelize_keys,
    json_body,
    parse_json,
    query_params,
    to_camel_case,
    to_snake_case,
)

from conftest import make_settings


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("first_name", "firstName"),
        ("deceased_middle_name", "deceasedMiddleName"),
        ("firstName", "firstName"),
        ("id", "id"),
    ],
)
def test_to_camel_case(key: str, expected: str) -> None:
    assert to_camel_case(key) == expected


@pytest.mark.parametrize(
    ("key", "expected"),
    [("dueDate", "due_date"), ("deceasedMiddleName", "deceased_middle_name"), ("status", "status")],
)
def test_to_snake_case(key: str, expected: str) -> None:
    assert to_snake_case(key) == expected


def test_camelize_keys_recurses_into_objects_and_arrays() -> None:
    payload = {
        "contract_number": "C-1",
        "payment_plan": {"installment_amount": 100, "start_date": "2026-01-01"},
        "items": [{"unit_price": 5, "description": "keep_this_value"}],
    }

    assert camelize_keys(payload) == {
        "contractNumber": "C-1",
        "paymentPlan": {"installmentAmount": 100, "startDate": "2026-01-01"},
        "items": [{"unitPrice": 5, "description": "keep_this_value"}],
    }


def test_parse_json_empty_body_is_empty_object() -> None:
    assert parse_json(b"") == {}
    assert parse_json(b"  \n") == {}


def test_parse_json_rejects_malformed_and_non_utf8() -> None:
    with pytest.raises(json.JSONDecodeError):
        parse_json(b"{nope")
    with pytest.raises(json.JSONDecodeError):
        parse_json(b"\xff\xfe{}")


def test_nesting_past_the_limits_is_malformed() -> None:
    with pytest.raises(json.JSONDecodeError):
        parse_json(b"[" * 100_000 + b"]" * 100_000)

    nested: list = []
    for _ in range(MAX_JSON_DEPTH + 1):
        nested = [nested]
    with pytest.raises(json.JSONDecodeError):
        camelize_keys({"a_b": nested})


def test_dependencies_normalize_body_and_query() -> None:
    app = FastAPI()
    app.state.settings = make_settings()

    @app.post("/echo")
    async def echo(body=Depends(json_body), query: dict = Depends(query_params)):
        return {"body": body, "query": query}

    response = TestClient(app).post("/echo?low_stock=true", json={"zip_code": "12345"})

    assert response.json() == {"body": {"zipCode": "12345"}, "query": {"lowStock": "true"}}
