"""Contract endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session, selectinload

from ..audit import AuditAction, audit_request
from ..auth import Principal, get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import Contract, ContractItem, Customer
from ..normalize import query_params
from ..pagination import parse_filter_params
from ..schemas import ContractCreate, ContractUpdate
from ..services.records import apply_values, column_values, get_or_404, principal_uuid, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/contracts",
    tags=["contracts"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)


def _contract_response(contract: Contract, **extra) -> dict:
    return row_to_dict(contract, items=[row_to_dict(item) for item in contract.items], **extra)


@router.get("")
def list_contracts(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    """Contracts with customer names and line items."""
    q = (
        db.query(Contract, Customer.first_name, Customer.last_name)
        .join(Customer, Contract.customer_id == Customer.id)
        .options(selectinload(Contract.items))
    )
    for key, value in parse_filter_params(query, ("status", "type")).items():
        q = q.filter(getattr(Contract, key) == value)
    rows = q.order_by(Contract.created_at.desc()).all()
    return [
        _contract_response(contract, first_name=first_name, last_name=last_name)
        for contract, first_name, last_name in rows
    ]


@router.post("", status_code=201)
def create_contract(
    request: Request,
    payload: dict = Depends(validated_body(ContractCreate)),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a contract and its line items in one transaction."""
    contract = Contract(
        **column_values(payload, exclude=("items",)),
        status="active",
        amount_paid=0,
        created_by=principal_uuid(current_user),
    )
    contract.items = [
        ContractItem(position=index, description=item["description"], amount=item["amount"])
        for index, item in enumerate(payload["items"] or [])
    ]
    db.add(contract)
    db.commit()
    db.refresh(contract)

    audit_request(
        request,
        AuditAction.CONTRACT_CREATED,
        {"id": contract.id, "contractNumber": contract.contract_number, "items": len(contract.items)},
    )
    return _contract_response(contract)


@router.put("/{id}")
def update_contract(
    request: Request,
    contract_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(ContractUpdate)),
    db: Session = Depends(get_db),
):
    contract = get_or_404(db, Contract, contract_id, "Contract")
    values = column_values(payload)
    if values.get("amount_paid") is None:
        values.pop("amount_paid", None)
    apply_values(contract, values)
    db.commit()
    db.refresh(contract)

    audit_request(request, AuditAction.CONTRACT_UPDATED, {"id": contract.id, "status": contract.status})
    return _contract_response(contract)


@router.delete("/{id}")
def delete_contract(
    request: Request,
    contract_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    contract = get_or_404(db, Contract, contract_id, "Contract")
    db.delete(contract)
    db.commit()

    audit_request(request, AuditAction.CONTRACT_DELETED, {"id": contract_id})
    return {"success": True}
