"""SQLAlchemy models for cemetery operations."""
from sqlalchemy import (
    JSON, Column, Date, DateTime, ForeignKey, CheckConstraint, Integer, Numeric, String, Text, Uuid
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from .constants import (
    CONTRACT_STATUSES,
    CONTRACT_TYPES,
    GRANT_STATUSES,
    GRANT_TYPES,
    INVENTORY_CATEGORIES,
    LEDGER_STATUSES,
    PAYMENT_METHODS,
    USER_ROLES,
    WORK_ORDER_PRIORITIES,
    WORK_ORDER_STATUSES,
    WORK_ORDER_TYPES,
)
from .database import Base

# Native UUID on PostgreSQL, CHAR(32) elsewhere.
UUID = Uuid
JSONDocument = JSON().with_variant(JSONB(), "postgresql")
Money = Numeric(12, 2)


class User(Base):
    """Staff account."""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="staff", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(role.in_(USER_ROLES), name="chk_user_role"),
    )


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    contact_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Customer(Base):
    __tablename__ = "customers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(10), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class WorkOrder(Base):
    """Grounds/maintenance/burial-prep task."""
    __tablename__ = "work_orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)
    priority = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    assigned_to = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    due_date = Column(Date, nullable=True)
    completed_date = Column(Date, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(type.in_(WORK_ORDER_TYPES), name="chk_work_order_type"),
        CheckConstraint(priority.in_(WORK_ORDER_PRIORITIES), name="chk_work_order_priority"),
        CheckConstraint(status.in_(WORK_ORDER_STATUSES), name="chk_work_order_status"),
    )


class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    sku = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    reorder_point = Column(Integer, nullable=False, default=0)
    unit_price = Column(Money, nullable=False, default=0)
    vendor_id = Column(UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True)
    location = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(category.in_(INVENTORY_CATEGORIES), name="chk_inventory_category"),
        CheckConstraint(quantity >= 0, name="chk_inventory_quantity_non_negative"),
        CheckConstraint(reorder_point >= 0, name="chk_inventory_reorder_point_non_negative"),
        CheckConstraint(unit_price >= 0, name="chk_inventory_unit_price_non_negative"),
    )


class Burial(Base):
    """Interment record."""
    __tablename__ = "burials"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    deceased_first_name = Column(String(255), nullable=False)
    deceased_last_name = Column(String(255), nullable=False, index=True)
    deceased_middle_name = Column(String(255), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    date_of_death = Column(Date, nullable=True)
    burial_date = Column(Date, nullable=False, index=True)
    plot_location = Column(String(255), nullable=False)
    section = Column(String(50), nullable=False, index=True)
    lot = Column(String(50), nullable=False)
    grave = Column(String(50), nullable=False)
    contact_name = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    permit_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Contract(Base):
    """Pre-need / at-need sales contract."""
    __tablename__ = "contracts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contract_number = Column(String(100), unique=True, nullable=False, index=True)
    type = Column(String(20), nullable=False)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    total_amount = Column(Money, nullable=False)
    amount_paid = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
    signed_date = Column(Date, nullable=False)
    # {frequency, installmentAmount, startDate, endDate}
    payment_plan = Column(JSONDocument, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(type.in_(CONTRACT_TYPES), name="chk_contract_type"),
        CheckConstraint(status.in_(CONTRACT_STATUSES), name="chk_contract_status"),
        CheckConstraint(total_amount >= 0, name="chk_contract_total_non_negative"),
        CheckConstraint(amount_paid >= 0, name="chk_contract_paid_non_negative"),
    )

    # Relationships
    items = relationship(
        "ContractItem",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractItem.position",
    )


class ContractItem(Base):
    __tablename__ = "contract_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    contract_id = Column(UUID(as_uuid=True), ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(500), nullable=False)
    amount = Column(Money, nullable=False)

    __table_args__ = (
        CheckConstraint(amount >= 0, name="chk_contract_item_amount_non_negative"),
    )

    contract = relationship("Contract", back_populates="items")


class Grant(Base):
    """Grant, benefit or funding opportunity being tracked."""
    __tablename__ = "grants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False)
    source = Column(String(255), nullable=False)
    amount = Column(Money, nullable=True)
    deadline = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="available", index=True)
    application_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(type.in_(GRANT_TYPES), name="chk_grant_type"),
        CheckConstraint(status.in_(GRANT_STATUSES), name="chk_grant_status"),
    )


class Deposit(Base):
    __tablename__ = "deposits"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Money, nullable=False)
    date = Column(Date, nullable=False, index=True)
    method = Column(String(20), nullable=False)
    reference = Column(String(255), nullable=True)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(method.in_(PAYMENT_METHODS), name="chk_deposit_method"),
        CheckConstraint(amount >= 0, name="chk_deposit_amount_non_negative"),
    )


class AccountReceivable(Base):
    __tablename__ = "accounts_receivable"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id = Column(UUID(as_uuid=True), ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    invoice_number = Column(String(100), unique=True, nullable=False)
    amount = Column(Money, nullable=False)
    amount_paid = Column(Money, nullable=False, default=0)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(status.in_(LEDGER_STATUSES), name="chk_receivable_status"),
        CheckConstraint(amount >= 0, name="chk_receivable_amount_non_negative"),
    )


class AccountPayable(Base):
    __tablename__ = "accounts_payable"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_id = Column(UUID(as_uuid=True), ForeignKey("vendors.id", ondelete="RESTRICT"), nullable=False, index=True)
    invoice_number = Column(String(100), nullable=False)
    amount = Column(Money, nullable=False)
    amount_paid = Column(Money, nullable=False, default=0)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(status.in_(LEDGER_STATUSES), name="chk_payable_status"),
        CheckConstraint(amount >= 0, name="chk_payable_amount_non_negative"),
    )
