"""Work order endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session, aliased

from ..audit import AuditAction, audit_request
from ..auth import Principal, get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import User, WorkOrder
from ..normalize import query_params
from ..pagination import (
    apply_search,
    apply_sort,
    create_paginated_response,
    paginate,
    parse_filter_params,
    parse_pagination_params,
    parse_search_param,
    parse_sort_params,
)
from ..schemas import WorkOrderCreate
from ..services.records import apply_values, column_values, get_or_404, principal_uuid, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/work-orders",
    tags=["work-orders"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)

# Clients that predate pagination expect the whole list by default.
LIST_LIMIT = 1000
SORTABLE = ("created_at", "due_date", "priority", "status", "title")


@router.get("")
def list_work_orders(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    """Paginated work orders with assignee and creator names."""
    assignee = aliased(User)
    creator = aliased(User)
    q = (
        db.query(WorkOrder, assignee.name, creator.name)
        .outerjoin(assignee, WorkOrder.assigned_to == assignee.id)
        .outerjoin(creator, WorkOrder.created_by == creator.id)
    )
    for key, value in parse_filter_params(query, ("status", "priority", "type")).items():
        q = q.filter(getattr(WorkOrder, key) == value)
    q = apply_search(q, parse_search_param(query), [WorkOrder.title, WorkOrder.description])
    sort, order = parse_sort_params(query, "created_at", "DESC", SORTABLE)
    q = apply_sort(q, WorkOrder, sort, order)

    params = parse_pagination_params(query, default_limit=LIST_LIMIT, max_limit=LIST_LIMIT)
    rows, total = paginate(q, params)
    data = [
        row_to_dict(work_order, assigned_to_name=assigned_name, created_by_name=created_name)
        for work_order, assigned_name, created_name in rows
    ]
    return create_paginated_response(data, total, params.page, params.limit)


@router.post("", status_code=201)
def create_work_order(
    request: Request,
    payload: dict = Depends(validated_body(WorkOrderCreate)),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    values = column_values(payload)
    # New work orders always start pending.
    values.update(status="pending", completed_date=None, created_by=principal_uuid(current_user))
    work_order = WorkOrder(**values)
    db.add(work_order)
    db.commit()
    db.refresh(work_order)

    audit_request(request, AuditAction.WORK_ORDER_CREATED, {"id": work_order.id, "title": work_order.title})
    return row_to_dict(work_order)


@router.put("/{id}")
def update_work_order(
    request: Request,
    work_order_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(WorkOrderCreate)),
    db: Session = Depends(get_db),
):
    work_order = get_or_404(db, WorkOrder, work_order_id, "Work order")
    values = column_values(payload)
    if values.get("status") is None:
        values.pop("status", None)
    apply_values(work_order, values)
    db.commit()
    db.refresh(work_order)

    audit_request(request, AuditAction.WORK_ORDER_UPDATED, {"id": work_order.id, "status": work_order.status})
    return row_to_dict(work_order)


@router.delete("/{id}")
def delete_work_order(
    request: Request,
    work_order_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    work_order = get_or_404(db, WorkOrder, work_order_id, "Work order")
    db.delete(work_order)
    db.commit()

    audit_request(request, AuditAction.WORK_ORDER_DELETED, {"id": work_order_id})
    return {"success": True}
