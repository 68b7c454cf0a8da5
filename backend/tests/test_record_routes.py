from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from cemetery_api.database import Database
from cemetery_api.models import Vendor

BURIAL = {
    "deceasedFirstName": "Eleanor",
    "deceasedLastName": "Rigby",
    "burialDate": "2026-02-14",
    "plotLocation": "North hill",
    "section": "A",
    "lot": "12",
    "grave": "3",
    "contactEmail": " Family@Example.com ",
}


def _vendor(database: Database, name: str = "Stone Works") -> str:
    session = database.session()
    try:
        vendor = Vendor(name=name)
        session.add(vendor)
        session.commit()
        return str(vendor.id)
    finally:
        session.close()


def test_grant_crud(client: TestClient, staff_headers: dict[str, str]) -> None:
    payload = {
        "title": "Historic preservation fund",
        "type": "grant",
        "source": "State Heritage Council",
        "amount": "15000",
        "deadline": "2026-09-30",
        "status": "available",
    }

    created = client.post("/api/grants", json=payload, headers=staff_headers)
    assert created.status_code == 201
    grant_id = created.json()["id"]
    assert created.json()["amount"] == 15000
    assert created.json()["deadline"] == "2026-09-30"

    updated = client.put(f"/api/grants/{grant_id}", json={**payload, "status": "applied"}, headers=staff_headers)
    assert updated.json()["status"] == "applied"

    listed = client.get("/api/grants", params={"status": "applied"}, headers=staff_headers).json()
    assert [row["id"] for row in listed["data"]] == [grant_id]
    assert listed["pagination"]["total"] == 1

    assert client.delete(f"/api/grants/{grant_id}", headers=staff_headers).json() == {"success": True}
    assert client.get("/api/grants", headers=staff_headers).json()["data"] == []


def test_inventory_low_stock_and_vendor_name(
    client: TestClient, staff_headers: dict[str, str], database: Database
) -> None:
    vendor_id = _vendor(database)
    base = {"category": "marker", "reorderPoint": 5, "unitPrice": 120, "vendorId": vendor_id}
    client.post("/api/inventory", json={**base, "name": "Granite marker", "quantity": 2}, headers=staff_headers)
    client.post("/api/inventory", json={**base, "name": "Bronze plaque", "quantity": 40}, headers=staff_headers)

    everything = client.get("/api/inventory", headers=staff_headers).json()
    low = client.get("/api/inventory", params={"lowStock": "true"}, headers=staff_headers).json()

    assert [row["name"] for row in everything] == ["Bronze plaque", "Granite marker"]
    assert everything[0]["vendor_name"] == "Stone Works"
    assert [row["name"] for row in low] == ["Granite marker"]


def test_inventory_update_and_missing_item(client: TestClient, staff_headers: dict[str, str]) -> None:
    payload = {"name": "Cremation urn", "category": "urn", "quantity": 3, "reorderPoint": 1, "unitPrice": 80}
    item = client.post("/api/inventory", json=payload, headers=staff_headers).json()

    updated = client.put(f"/api/inventory/{item['id']}", json={**payload, "quantity": "9"}, headers=staff_headers)
    missing = client.put(f"/api/inventory/{uuid.uuid4()}", json=payload, headers=staff_headers)

    assert updated.json()["quantity"] == 9
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Inventory item not found"


def test_customers_are_ordered_by_name_and_searchable(client: TestClient, staff_headers: dict[str, str]) -> None:
    for first, last in (("Zoe", "Adams"), ("Amy", "Brown"), ("Bob", "Adams")):
        response = client.post("/api/customers", json={"firstName": first, "lastName": last}, headers=staff_headers)
        assert response.status_code == 201

    ordered = client.get("/api/customers", headers=staff_headers).json()
    found = client.get("/api/customers", params={"search": "brow"}, headers=staff_headers).json()

    assert [(c["first_name"], c["last_name"]) for c in ordered] == [("Bob", "Adams"), ("Zoe", "Adams"), ("Amy", "Brown")]
    assert [c["first_name"] for c in found] == ["Amy"]


def test_burial_records(client: TestClient, staff_headers: dict[str, str]) -> None:
    first = client.post("/api/burials", json=BURIAL, headers=staff_headers)
    client.post(
        "/api/burials",
        json={**BURIAL, "deceasedFirstName": "Father", "deceasedLastName": "McKenzie", "burialDate": "2026-03-01", "section": "B"},
        headers=staff_headers,
    )

    assert first.status_code == 201
    assert first.json()["contact_email"] == "family@example.com"

    listed = client.get("/api/burials", headers=staff_headers).json()
    section_a = client.get("/api/burials", params={"section": "A"}, headers=staff_headers).json()
    assert [b["deceased_last_name"] for b in listed] == ["McKenzie", "Rigby"]
    assert [b["deceased_last_name"] for b in section_a] == ["Rigby"]

    burial_id = first.json()["id"]
    updated = client.put(f"/api/burials/{burial_id}", json={**BURIAL, "permitNumber": "P-77"}, headers=staff_headers)
    assert updated.json()["permit_number"] == "P-77"

    assert client.delete(f"/api/burials/{burial_id}", headers=staff_headers).status_code == 200
    assert client.delete(f"/api/burials/{burial_id}", headers=staff_headers).json()["error"]["message"] == (
        "Burial record not found"
    )


def test_burial_validation(client: TestClient, staff_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/burials",
        json={**BURIAL, "burialDate": "Valentine's day", "contactPhone": "five"},
        headers=staff_headers,
    )

    assert response.status_code == 400
    assert [d["field"] for d in response.json()["error"]["details"]] == ["burialDate", "contactPhone"]
