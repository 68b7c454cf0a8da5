"""Grant and benefit tracking endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import Principal, get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import Grant
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
from ..schemas import GrantCreate
from ..services.records import apply_values, column_values, get_or_404, principal_uuid, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/grants",
    tags=["grants"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)

LIST_LIMIT = 1000
SORTABLE = ("created_at", "deadline", "amount", "status", "title")


@router.get("")
def list_grants(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    q = db.query(Grant)
    for key, value in parse_filter_params(query, ("status", "type")).items():
        q = q.filter(getattr(Grant, key) == value)
    q = apply_search(q, parse_search_param(query), [Grant.title, Grant.source, Grant.description])
    sort, order = parse_sort_params(query, "created_at", "DESC", SORTABLE)
    q = apply_sort(q, Grant, sort, order)

    params = parse_pagination_params(query, default_limit=LIST_LIMIT, max_limit=LIST_LIMIT)
    rows, total = paginate(q, params)
    return create_paginated_response([row_to_dict(grant) for grant in rows], total, params.page, params.limit)


@router.post("", status_code=201)
def create_grant(
    request: Request,
    payload: dict = Depends(validated_body(GrantCreate)),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    grant = Grant(**column_values(payload), created_by=principal_uuid(current_user))
    db.add(grant)
    db.commit()
    db.refresh(grant)

    audit_request(request, AuditAction.GRANT_CREATED, {"id": grant.id, "title": grant.title})
    return row_to_dict(grant)


@router.put("/{id}")
def update_grant(
    request: Request,
    grant_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(GrantCreate)),
    db: Session = Depends(get_db),
):
    grant = get_or_404(db, Grant, grant_id, "Grant")
    apply_values(grant, column_values(payload))
    db.commit()
    db.refresh(grant)

    audit_request(request, AuditAction.GRANT_UPDATED, {"id": grant.id, "status": grant.status})
    return row_to_dict(grant)


@router.delete("/{id}")
def delete_grant(
    request: Request,
    grant_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    grant = get_or_404(db, Grant, grant_id, "Grant")
    db.delete(grant)
    db.commit()

    audit_request(request, AuditAction.GRANT_DELETED, {"id": grant_id})
    return {"success": True}
