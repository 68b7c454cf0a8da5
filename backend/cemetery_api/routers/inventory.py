"""Inventory endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import InventoryItem, Vendor
from ..normalize import query_params
from ..pagination import apply_search, parse_filter_params, parse_search_param
from ..schemas import InventoryItemCreate
from ..services.records import apply_values, column_values, get_or_404, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/inventory",
    tags=["inventory"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)


@router.get("")
def list_inventory(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    """Items with vendor names; ``lowStock=true`` keeps items at or below their reorder point."""
    q = db.query(InventoryItem, Vendor.name).outerjoin(Vendor, InventoryItem.vendor_id == Vendor.id)
    for key, value in parse_filter_params(query, ("category",)).items():
        q = q.filter(getattr(InventoryItem, key) == value)
    if str(query.get("lowStock", "")).lower() == "true":
        q = q.filter(InventoryItem.quantity <= InventoryItem.reorder_point)
    q = apply_search(q, parse_search_param(query), [InventoryItem.name, InventoryItem.sku])

    rows = q.order_by(InventoryItem.name).all()
    return [row_to_dict(item, vendor_name=vendor_name) for item, vendor_name in rows]


@router.post("", status_code=201)
def create_item(
    request: Request,
    payload: dict = Depends(validated_body(InventoryItemCreate)),
    db: Session = Depends(get_db),
):
    item = InventoryItem(**column_values(payload))
    db.add(item)
    db.commit()
    db.refresh(item)

    audit_request(request, AuditAction.INVENTORY_CREATED, {"id": item.id, "name": item.name})
    return row_to_dict(item)


@router.put("/{id}")
def update_item(
    request: Request,
    item_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(InventoryItemCreate)),
    db: Session = Depends(get_db),
):
    item = get_or_404(db, InventoryItem, item_id, "Inventory item")
    apply_values(item, column_values(payload))
    db.commit()
    db.refresh(item)

    audit_request(request, AuditAction.INVENTORY_UPDATED, {"id": item.id, "quantity": item.quantity})
    return row_to_dict(item)


@router.delete("/{id}")
def delete_item(
    request: Request,
    item_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    item = get_or_404(db, InventoryItem, item_id, "Inventory item")
    db.delete(item)
    db.commit()

    audit_request(request, AuditAction.INVENTORY_DELETED, {"id": item_id})
    return {"success": True}
