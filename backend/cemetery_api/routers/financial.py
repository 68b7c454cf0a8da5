"""Deposits, accounts receivable and accounts payable."""
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..audit import AuditAction, audit_request
from ..auth import Principal, get_current_user
from ..csrf import verify_csrf
from ..database import get_db
from ..models import AccountPayable, AccountReceivable, Customer, Deposit, User, Vendor
from ..normalize import query_params
from ..pagination import parse_filter_params
from ..schemas import DepositCreate, LedgerPaymentUpdate, PayableCreate, ReceivableCreate
from ..services.records import apply_values, column_values, get_or_404, principal_uuid, row_to_dict
from ..validation import valid_id, validated_body

router = APIRouter(
    prefix="/financial",
    tags=["financial"],
    dependencies=[Depends(get_current_user), Depends(verify_csrf)],
)


# Deposits

@router.get("/deposits")
def list_deposits(db: Session = Depends(get_db)):
    rows = (
        db.query(Deposit, Customer.first_name, Customer.last_name, User.name)
        .outerjoin(Customer, Deposit.customer_id == Customer.id)
        .outerjoin(User, Deposit.created_by == User.id)
        .order_by(Deposit.date.desc())
        .all()
    )
    return [
        row_to_dict(deposit, first_name=first_name, last_name=last_name, created_by_name=created_by_name)
        for deposit, first_name, last_name, created_by_name in rows
    ]


@router.post("/deposits", status_code=201)
def create_deposit(
    request: Request,
    payload: dict = Depends(validated_body(DepositCreate)),
    current_user: Principal = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    deposit = Deposit(
        **column_values(payload),
        created_by=principal_uuid(current_user),
    )
    db.add(deposit)
    db.commit()
    db.refresh(deposit)

    audit_request(request, AuditAction.DEPOSIT_CREATED, {"id": deposit.id, "amount": deposit.amount})
    return row_to_dict(deposit)


# Accounts receivable

@router.get("/receivables")
def list_receivables(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    q = db.query(AccountReceivable, Customer.first_name, Customer.last_name).join(
        Customer, AccountReceivable.customer_id == Customer.id
    )
    for key, value in parse_filter_params(query, ("status",)).items():
        q = q.filter(getattr(AccountReceivable, key) == value)
    rows = q.order_by(AccountReceivable.due_date).all()
    return [
        row_to_dict(receivable, first_name=first_name, last_name=last_name)
        for receivable, first_name, last_name in rows
    ]


@router.post("/receivables", status_code=201)
def create_receivable(
    request: Request,
    payload: dict = Depends(validated_body(ReceivableCreate)),
    db: Session = Depends(get_db),
):
    receivable = AccountReceivable(
        **column_values(payload),
        status="pending",
    )
    db.add(receivable)
    db.commit()
    db.refresh(receivable)

    audit_request(request, AuditAction.RECEIVABLE_CREATED, {"id": receivable.id, "invoice": receivable.invoice_number})
    return row_to_dict(receivable)


@router.put("/receivables/{id}")
def update_receivable(
    request: Request,
    receivable_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(LedgerPaymentUpdate)),
    db: Session = Depends(get_db),
):
    """Record a payment against a receivable."""
    receivable = get_or_404(db, AccountReceivable, receivable_id, "Receivable")
    apply_values(receivable, column_values(payload))
    db.commit()
    db.refresh(receivable)

    audit_request(request, AuditAction.PAYMENT_RECORDED, {"receivableId": receivable.id, "amountPaid": receivable.amount_paid})
    return row_to_dict(receivable)


# Accounts payable

@router.get("/payables")
def list_payables(query: dict = Depends(query_params), db: Session = Depends(get_db)):
    q = db.query(AccountPayable, Vendor.name).join(Vendor, AccountPayable.vendor_id == Vendor.id)
    for key, value in parse_filter_params(query, ("status",)).items():
        q = q.filter(getattr(AccountPayable, key) == value)
    rows = q.order_by(AccountPayable.due_date).all()
    return [row_to_dict(payable, vendor_name=vendor_name) for payable, vendor_name in rows]


@router.post("/payables", status_code=201)
def create_payable(
    request: Request,
    payload: dict = Depends(validated_body(PayableCreate)),
    db: Session = Depends(get_db),
):
    payable = AccountPayable(
        **column_values(payload),
        status="pending",
    )
    db.add(payable)
    db.commit()
    db.refresh(payable)

    audit_request(request, AuditAction.PAYABLE_CREATED, {"id": payable.id, "invoice": payable.invoice_number})
    return row_to_dict(payable)


@router.put("/payables/{id}")
def update_payable(
    request: Request,
    payable_id: UUID = Depends(valid_id),
    payload: dict = Depends(validated_body(LedgerPaymentUpdate)),
    db: Session = Depends(get_db),
):
    """Record a payment against a payable."""
    payable = get_or_404(db, AccountPayable, payable_id, "Payable")
    apply_values(payable, column_values(payload))
    db.commit()
    db.refresh(payable)

    audit_request(request, AuditAction.PAYMENT_RECORDED, {"payableId": payable.id, "amountPaid": payable.amount_paid})
    return row_to_dict(payable)
