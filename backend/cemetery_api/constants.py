"""Shared enumerations.

These tuples are the single source of truth for enum membership: the
validation rules, the database check constraints and the ``/options``
endpoint all read from here.
"""
from __future__ import annotations

USER_ROLES: tuple[str, ...] = ("admin", "manager", "staff")

WORK_ORDER_TYPES: tuple[str, ...] = ("maintenance", "burial_prep", "grounds", "repair", "other")
WORK_ORDER_PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "urgent")
WORK_ORDER_STATUSES: tuple[str, ...] = ("pending", "in_progress", "completed", "cancelled")

GRANT_TYPES: tuple[str, ...] = ("grant", "benefit", "opportunity")
GRANT_STATUSES: tuple[str, ...] = ("available", "applied", "approved", "denied", "received")

INVENTORY_CATEGORIES: tuple[str, ...] = ("casket", "urn", "vault", "marker", "supplies", "other")

PAYMENT_METHODS: tuple[str, ...] = ("cash", "check", "credit_card", "wire", "other")
# Shared by accounts receivable and accounts payable.
LEDGER_STATUSES: tuple[str, ...] = ("pending", "partial", "paid", "overdue", "cancelled")

CONTRACT_TYPES: tuple[str, ...] = ("pre_need", "at_need")
CONTRACT_STATUSES: tuple[str, ...] = ("active", "paid", "completed", "cancelled", "transferred")
PAYMENT_PLAN_FREQUENCIES: tuple[str, ...] = ("weekly", "bi_weekly", "monthly", "quarterly")

# Labels that don't follow the "snake_case -> Title Case" rule.
_LABEL_OVERRIDES = {
    "burial_prep": "Burial Prep",
    "credit_card": "Credit Card",
    "bi_weekly": "Bi-Weekly",
    "pre_need": "Pre-Need",
    "at_need": "At-Need",
}


def option_label(value: str) -> str:
    return _LABEL_OVERRIDES.get(value, value.replace("_", " ").title())


def as_options(values: tuple[str, ...]) -> list[dict[str, str]]:
    return [{"value": value, "label": option_label(value)} for value in values]


OPTION_LISTS: dict[str, tuple[str, ...]] = {
    "userRoles": USER_ROLES,
    "workOrderTypes": WORK_ORDER_TYPES,
    "workOrderPriorities": WORK_ORDER_PRIORITIES,
    "workOrderStatuses": WORK_ORDER_STATUSES,
    "grantTypes": GRANT_TYPES,
    "grantStatuses": GRANT_STATUSES,
    "inventoryCategories": INVENTORY_CATEGORIES,
    "paymentMethods": PAYMENT_METHODS,
    "ledgerStatuses": LEDGER_STATUSES,
    "contractTypes": CONTRACT_TYPES,
    "contractStatuses": CONTRACT_STATUSES,
    "paymentPlanFrequencies": PAYMENT_PLAN_FREQUENCIES,
}


def all_options() -> dict[str, list[dict[str, str]]]:
    """Client-facing option lists keyed by camelCase name."""
    return {name: as_options(values) for name, values in OPTION_LISTS.items()}
