"""Pydantic schemas for API.

Request models validate camelCase bodies (see validation.RequestModel);
response models serialize rows and tokens.
"""
from datetime import date
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from .constants import (
    CONTRACT_STATUSES,
    CONTRACT_TYPES,
    GRANT_STATUSES,
    GRANT_TYPES,
    INVENTORY_CATEGORIES,
    LEDGER_STATUSES,
    PAYMENT_METHODS,
    PAYMENT_PLAN_FREQUENCIES,
    USER_ROLES,
    WORK_ORDER_PRIORITIES,
    WORK_ORDER_STATUSES,
    WORK_ORDER_TYPES,
)
from .validation import MAX_INT, MAX_MONEY, PHONE_PATTERN, ZIP_PATTERN, Email, RequestModel

# Subscripting Literal with a tuple spreads it into the allowed values.
UserRole = Literal[USER_ROLES]
WorkOrderType = Literal[WORK_ORDER_TYPES]
WorkOrderPriority = Literal[WORK_ORDER_PRIORITIES]
WorkOrderStatus = Literal[WORK_ORDER_STATUSES]
GrantType = Literal[GRANT_TYPES]
GrantStatus = Literal[GRANT_STATUSES]
InventoryCategory = Literal[INVENTORY_CATEGORIES]
PaymentMethod = Literal[PAYMENT_METHODS]
LedgerStatus = Literal[LEDGER_STATUSES]
ContractType = Literal[CONTRACT_TYPES]
ContractStatus = Literal[CONTRACT_STATUSES]
PaymentPlanFrequency = Literal[PAYMENT_PLAN_FREQUENCIES]

INVALID_DATE = "Invalid date format"


# Auth

class LoginRequest(RequestModel):
    email: Email
    password: str

    messages = {
        "email": ("Email is required", "Invalid email format"),
        "password": ("Password is required", None),
    }
    untrimmed = frozenset({"password"})


class UserCreate(RequestModel):
    email: Email
    password: str = Field(min_length=8, max_length=128)
    name: str = Field(min_length=1, max_length=255)
    role: Optional[UserRole] = None

    messages = {
        "email": ("Email is required", "Invalid email format"),
        "password": ("Password is required", "Password must be between 8 and 128 characters"),
        "name": ("Name is required", "Name must be between 1 and 255 characters"),
        "role": (None, "Invalid role"),
    }
    untrimmed = frozenset({"password"})


# Operations

class WorkOrderCreate(RequestModel):
    title: str = Field(min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    type: WorkOrderType
    priority: WorkOrderPriority
    status: Optional[WorkOrderStatus] = None
    assigned_to: Optional[UUID] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None

    messages = {
        "title": ("Title is required", "Title must be between 3 and 255 characters"),
        "description": (None, "Description must not exceed 2000 characters"),
        "type": ("Type is required", "Invalid work order type"),
        "priority": ("Priority is required", "Invalid priority level"),
        "status": (None, "Invalid status"),
        "assigned_to": (None, "Invalid user ID format"),
        "due_date": (None, INVALID_DATE),
        "completed_date": (None, INVALID_DATE),
    }


class GrantCreate(RequestModel):
    title: str = Field(min_length=3, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    type: GrantType
    source: str = Field(min_length=2, max_length=255)
    amount: Optional[float] = Field(None, ge=0, le=MAX_MONEY)
    deadline: Optional[date] = None
    status: GrantStatus
    application_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=5000)

    messages = {
        "title": ("Title is required", "Title must be between 3 and 255 characters"),
        "description": (None, "Description must not exceed 5000 characters"),
        "type": ("Type is required", "Invalid grant type"),
        "source": ("Source organization is required", "Source must be between 2 and 255 characters"),
        "amount": (None, "Amount must be a positive number"),
        "deadline": (None, INVALID_DATE),
        "status": ("Status is required", "Invalid status"),
        "application_date": (None, INVALID_DATE),
        "notes": (None, "Notes must not exceed 5000 characters"),
    }


class InventoryItemCreate(RequestModel):
    name: str = Field(min_length=2, max_length=255)
    category: InventoryCategory
    sku: Optional[str] = Field(None, max_length=100)
    quantity: int = Field(ge=0, le=MAX_INT)
    reorder_point: int = Field(ge=0, le=MAX_INT)
    unit_price: float = Field(ge=0, le=MAX_MONEY)
    vendor_id: Optional[UUID] = None
    location: Optional[str] = Field(None, max_length=255)

    messages = {
        "name": ("Item name is required", "Name must be between 2 and 255 characters"),
        "category": ("Category is required", "Invalid category"),
        "sku": (None, "SKU must not exceed 100 characters"),
        "quantity": (None, "Quantity must be a non-negative integer"),
        "reorder_point": (None, "Reorder point must be a non-negative integer"),
        "unit_price": (None, "Unit price must be a positive number"),
        "vendor_id": (None, "Invalid vendor ID format"),
        "location": (None, "Location must not exceed 255 characters"),
    }


# Records

class BurialCreate(RequestModel):
    deceased_first_name: str = Field(min_length=1, max_length=255)
    deceased_last_name: str = Field(min_length=1, max_length=255)
    deceased_middle_name: Optional[str] = Field(None, max_length=255)
    date_of_birth: Optional[date] = None
    date_of_death: Optional[date] = None
    burial_date: date
    plot_location: str = Field(max_length=255)
    section: str = Field(max_length=50)
    lot: str = Field(max_length=50)
    grave: str = Field(max_length=50)
    contact_name: Optional[str] = Field(None, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=50, pattern=PHONE_PATTERN)
    contact_email: Optional[Email] = None
    permit_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=2000)

    messages = {
        "deceased_first_name": ("First name is required", "First name must be between 1 and 255 characters"),
        "deceased_last_name": ("Last name is required", "Last name must be between 1 and 255 characters"),
        "deceased_middle_name": (None, "Middle name must not exceed 255 characters"),
        "date_of_birth": (None, INVALID_DATE),
        "date_of_death": (None, INVALID_DATE),
        "burial_date": ("Burial date is required", INVALID_DATE),
        "plot_location": ("Plot location is required", "Plot location must not exceed 255 characters"),
        "section": ("Section is required", "Section must not exceed 50 characters"),
        "lot": ("Lot is required", "Lot must not exceed 50 characters"),
        "grave": ("Grave is required", "Grave must not exceed 50 characters"),
        "contact_name": (None, "Contact name must not exceed 255 characters"),
        "contact_phone": (None, "Invalid phone number format"),
        "contact_email": (None, "Invalid email format"),
        "permit_number": (None, "Permit number must not exceed 100 characters"),
        "notes": (None, "Notes must not exceed 2000 characters"),
    }


class CustomerCreate(RequestModel):
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: Optional[Email] = None
    phone: Optional[str] = Field(None, max_length=50, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, pattern=ZIP_PATTERN)
    notes: Optional[str] = Field(None, max_length=2000)

    messages = {
        "first_name": ("First name is required", "First name must be between 1 and 255 characters"),
        "last_name": ("Last name is required", "Last name must be between 1 and 255 characters"),
        "email": (None, "Invalid email format"),
        "phone": (None, "Invalid phone number format"),
        "address": (None, "Address must not exceed 500 characters"),
        "city": (None, "City must not exceed 100 characters"),
        "state": (None, "State must not exceed 50 characters"),
        "zip_code": (None, "Invalid ZIP code format"),
        "notes": (None, "Notes must not exceed 2000 characters"),
    }


# Financial

class DepositCreate(RequestModel):
    amount: float = Field(ge=0, le=MAX_MONEY)
    date: date
    method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=255)
    customer_id: Optional[UUID] = None
    notes: Optional[str] = Field(None, max_length=2000)

    messages = {
        "amount": (None, "Amount must be a positive number"),
        "date": ("Date is required", INVALID_DATE),
        "method": ("Payment method is required", "Invalid payment method"),
        "reference": (None, "Reference must not exceed 255 characters"),
        "customer_id": (None, "Invalid customer ID format"),
        "notes": (None, "Notes must not exceed 2000 characters"),
    }


class ReceivableCreate(RequestModel):
    customer_id: UUID
    invoice_number: str = Field(max_length=100)
    amount: float = Field(ge=0, le=MAX_MONEY)
    due_date: date

    messages = {
        "customer_id": ("Customer is required", "Invalid customer ID format"),
        "invoice_number": ("Invoice number is required", "Invoice number must not exceed 100 characters"),
        "amount": (None, "Amount must be a positive number"),
        "due_date": ("Due date is required", INVALID_DATE),
    }


class PayableCreate(RequestModel):
    vendor_id: UUID
    invoice_number: str = Field(max_length=100)
    amount: float = Field(ge=0, le=MAX_MONEY)
    due_date: date

    messages = {
        "vendor_id": ("Vendor is required", "Invalid vendor ID format"),
        "invoice_number": ("Invoice number is required", "Invoice number must not exceed 100 characters"),
        "amount": (None, "Amount must be a positive number"),
        "due_date": ("Due date is required", INVALID_DATE),
    }


class LedgerPaymentUpdate(RequestModel):
    """Payment progress on a receivable or payable."""
    amount_paid: float = Field(ge=0, le=MAX_MONEY)
    status: LedgerStatus

    messages = {
        "amount_paid": (None, "Amount paid must be a positive number"),
        "status": ("Status is required", "Invalid status"),
    }


# Contracts

class PaymentPlan(RequestModel):
    frequency: PaymentPlanFrequency
    installment_amount: float = Field(ge=0, le=MAX_MONEY)
    start_date: date
    end_date: Optional[date] = None

    messages = {
        "frequency": (None, "Invalid payment frequency"),
        "installment_amount": (None, "Installment amount must be a positive number"),
        "start_date": (None, INVALID_DATE),
        "end_date": (None, INVALID_DATE),
    }


class ContractItemCreate(RequestModel):
    description: str = Field(max_length=500)
    amount: float = Field(ge=0, le=MAX_MONEY)

    messages = {
        "description": ("Description is required", "Description must not exceed 500 characters"),
        "amount": (None, "Amount must be a positive number"),
    }


class _PaymentPlanDocument(RequestModel):
    @field_serializer("payment_plan", check_fields=False)
    def _plan_as_json(self, plan: Optional[PaymentPlan]) -> Optional[dict]:
        # Stored in a JSON column, so dates must already be strings.
        return plan.model_dump(mode="json", by_alias=True) if plan is not None else None


class ContractCreate(_PaymentPlanDocument):
    contract_number: str = Field(max_length=100)
    type: ContractType
    customer_id: UUID
    total_amount: float = Field(ge=0, le=MAX_MONEY)
    signed_date: date
    payment_plan: Optional[PaymentPlan] = None
    items: Optional[list[ContractItemCreate]] = None

    messages = {
        "contract_number": ("Contract number is required", "Contract number must not exceed 100 characters"),
        "type": ("Type is required", "Invalid contract type"),
        "customer_id": ("Customer is required", "Invalid customer ID format"),
        "total_amount": (None, "Total amount must be a positive number"),
        "signed_date": ("Signed date is required", INVALID_DATE),
        "payment_plan": (None, "Payment plan must be an object"),
        "items": (None, "Items must be an array"),
    }


class ContractUpdate(_PaymentPlanDocument):
    total_amount: float = Field(ge=0, le=MAX_MONEY)
    amount_paid: Optional[float] = Field(None, ge=0, le=MAX_MONEY)
    status: ContractStatus
    payment_plan: Optional[PaymentPlan] = None

    messages = {
        "total_amount": (None, "Total amount must be a positive number"),
        "amount_paid": (None, "Amount paid must be a positive number"),
        "status": ("Status is required", "Invalid status"),
        "payment_plan": (None, "Payment plan must be an object"),
    }


# Responses

class UserResponse(BaseModel):
    """Public user fields; the password hash is never part of a response."""
    id: UUID
    email: str
    name: str
    role: str
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    user: UserResponse


class CsrfTokenResponse(BaseModel):
    csrfToken: str


class HealthResponse(BaseModel):
    status: str
    message: str
