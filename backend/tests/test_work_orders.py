from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from cemetery_api.models import User


def _create(client: TestClient, headers: dict[str, str], **overrides) -> dict:
    payload = {"title": "Trim hedges in section C", "type": "grounds", "priority": "medium", **overrides}
    response = client.post("/api/work-orders", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_always_starts_pending(client: TestClient, staff_headers: dict[str, str], staff_user: User) -> None:
    created = _create(client, staff_headers, status="completed", dueDate="2026-05-01")

    assert created["status"] == "pending"
    assert created["due_date"] == "2026-05-01"
    assert created["created_by"] == str(staff_user.id)


def test_list_is_paginated_with_names(client: TestClient, staff_headers: dict[str, str], admin_user: User) -> None:
    _create(client, staff_headers, title="Repair gate", type="repair", assignedTo=str(admin_user.id))
    _create(client, staff_headers, title="Prepare plot 12", type="burial_prep", priority="urgent")

    body = client.get("/api/work-orders", headers=staff_headers).json()

    assert body["pagination"]["total"] == 2
    assert body["pagination"]["limit"] == 1000
    by_title = {row["title"]: row for row in body["data"]}
    assert by_title["Repair gate"]["assigned_to_name"] == "Admin User"
    assert by_title["Repair gate"]["created_by_name"] == "Staff User"
    assert by_title["Prepare plot 12"]["assigned_to_name"] is None


def test_list_filters_search_and_pages(client: TestClient, staff_headers: dict[str, str]) -> None:
    _create(client, staff_headers, title="Repair gate", type="repair", priority="high")
    _create(client, staff_headers, title="Repair fence", type="repair", priority="low")
    _create(client, staff_headers, title="Mow north lawn", priority="high")

    high = client.get("/api/work-orders", params={"priority": "high", "status": "all"}, headers=staff_headers).json()
    repairs = client.get("/api/work-orders", params={"search": "repair"}, headers=staff_headers).json()
    page = client.get(
        "/api/work-orders", params={"limit": 2, "page": 2, "sort": "title", "order": "asc"}, headers=staff_headers
    ).json()

    assert {row["title"] for row in high["data"]} == {"Repair gate", "Mow north lawn"}
    assert repairs["pagination"]["total"] == 2
    assert [row["title"] for row in page["data"]] == ["Repair gate"]
    assert page["pagination"]["hasPrev"] is True
    assert page["pagination"]["hasNext"] is False


def test_update_keeps_status_when_omitted(client: TestClient, staff_headers: dict[str, str]) -> None:
    created = _create(client, staff_headers)
    url = f"/api/work-orders/{created['id']}"

    started = client.put(url, json={**_base(created), "status": "in_progress"}, headers=staff_headers)
    renamed = client.put(url, json={**_base(created), "title": "Trim hedges (east)"}, headers=staff_headers)

    assert started.json()["status"] == "in_progress"
    assert renamed.json()["status"] == "in_progress"
    assert renamed.json()["title"] == "Trim hedges (east)"


def _base(row: dict) -> dict:
    return {"title": row["title"], "type": row["type"], "priority": row["priority"]}


def test_missing_and_malformed_ids(client: TestClient, staff_headers: dict[str, str]) -> None:
    missing = client.put(
        f"/api/work-orders/{uuid.uuid4()}",
        json={"title": "Nothing here", "type": "other", "priority": "low"},
        headers=staff_headers,
    )
    malformed = client.delete("/api/work-orders/not-a-uuid", headers=staff_headers)

    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Work order not found"
    assert malformed.status_code == 400
    assert malformed.json()["error"]["details"][0] == {
        "field": "id",
        "message": "Invalid ID format",
        "rejectedValue": "not-a-uuid",
    }


def test_delete(client: TestClient, staff_headers: dict[str, str]) -> None:
    created = _create(client, staff_headers)

    deleted = client.delete(f"/api/work-orders/{created['id']}", headers=staff_headers)
    again = client.delete(f"/api/work-orders/{created['id']}", headers=staff_headers)

    assert deleted.json() == {"success": True}
    assert again.status_code == 404
