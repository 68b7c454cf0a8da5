"""Customer endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import Customer
from ..normalize import query_params
from ..pagination import apply_search, parse_search_param
from ..schemas import CustomerCreate
from ..services.records import apply_values, column_values, get_or_404, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/customers",
    tags=["customers"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)


@router.get("")
def list_customers(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    q = apply_search(
        db.query(Customer),
        parse_search_param(query),
        [Customer.first_name, Customer.last_name, Customer.email, Customer.phone],
    )
    customers = q.order_by(Customer.last_name, Customer.first_name).all()
    return [row_to_dict(customer) for customer in customers]


@router.post("", status_code=201)
def create_customer(
    request: Request,
    payload: dict = Depends(validated_body(CustomerCreate)),
    db: Session = Depends(get_db),
):
    customer = Customer(**column_values(payload))
    db.add(customer)
    db.commit()
    db.refresh(customer)

    audit_request(request, AuditAction.CUSTOMER_CREATED, {"id": customer.id})
    return row_to_dict(customer)


@router.put("/{id}")
def update_customer(
    request: Request,
    customer_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(CustomerCreate)),
    db: Session = Depends(get_db),
):
    customer = get_or_404(db, Customer, customer_id, "Customer")
    apply_values(customer, column_values(payload))
    db.commit()
    db.refresh(customer)

    audit_request(request, AuditAction.CUSTOMER_UPDATED, {"id": customer.id})
    return row_to_dict(customer)


@router.delete("/{id}")
def delete_customer(
    request: Request,
    customer_id: UUID = Depends(valid_id),
    db: Session = Depends(get_db),
):
    customer = get_or_404(db, Customer, customer_id, "Customer")
    db.delete(customer)
    db.commit()

    audit_request(request, AuditAction.CUSTOMER_DELETED, {"id": customer_id})
    return {"success": True}
