from __future__ import annotations

from fastapi.testclient import TestClient

from cemetery_api.constants import WORK_ORDER_TYPES, as_options, option_label


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "DMP Cemetery API is running"}


def test_options_lists_every_enumeration(client: TestClient) -> None:
    body = client.get("/api/options").json()

    assert body["workOrderTypes"] == as_options(WORK_ORDER_TYPES)
    assert {"value": "bi_weekly", "label": "Bi-Weekly"} in body["paymentPlanFrequencies"]
    assert {"value": "in_progress", "label": "In Progress"} in body["workOrderStatuses"]
    assert [o["value"] for o in body["userRoles"]] == ["admin", "manager", "staff"]


def test_option_label() -> None:
    assert option_label("credit_card") == "Credit Card"
    assert option_label("pre_need") == "Pre-Need"
    assert option_label("supplies") == "Supplies"


def test_cors_preflight_allows_configured_origin(client: TestClient) -> None:
    response = client.options(
        "/api/work-orders",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-csrf-token",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"
