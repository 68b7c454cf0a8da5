"""Burial record endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import Principal, get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import Burial
from ..normalize import query_params
from ..pagination import apply_search, parse_filter_params, parse_search_param
from ..schemas import BurialCreate
from ..services.records import apply_values, column_values, get_or_404, principal_uuid, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/burials",
    tags=["burials"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)


@router.get("")
def list_burials(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    q = db.query(Burial)
    for key, value in parse_filter_params(query, ("section",)).items():
        q = q.filter(getattr(Burial, key) == value)
    q = apply_search(
        q,
        parse_search_param(query),
        [Burial.deceased_first_name, Burial.deceased_last_name, Burial.plot_location, Burial.permit_number],
    )
    burials = q.order_by(Burial.burial_date.desc()).all()
    return [row_to_dict(burial) for burial in burials]


@router.post("", status_code=201)
def create_burial(
    request: Request,
    payload: dict = Depends(validated_body(BurialCreate)),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    burial = Burial(**column_values(payload), created_by=principal_uuid(current_user))
    db.add(burial)
    db.commit()
    db.refresh(burial)

    audit_request(request, AuditAction.BURIAL_CREATED, {"id": burial.id, "section": burial.section})
    return row_to_dict(burial)


@router.put("/{id}")
def update_burial(
    request: Request,
    burial_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(BurialCreate)),
    db: Session = Depends(get_db),
):
    burial = get_or_404(db, Burial, burial_id, "Burial record")
    apply_values(burial, column_values(payload))
    db.commit()
    db.refresh(burial)

    audit_request(request, AuditAction.BURIAL_UPDATED, {"id": burial.id})
    return row_to_dict(burial)


@router.delete("/{id}")
def delete_burial(
    request: Request,
    burial_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    burial = get_or_404(db, Burial, burial_id, "Burial record")
    db.delete(burial)
    db.commit()

    audit_request(request, AuditAction.BURIAL_DELETED, {"id": burial_id})
    return {"success": True}
