"""Audit trail for sensitive operations.

Entries are written as JSON to the ``cemetery_api.audit`` logger so they can
be routed separately from application logs.
"""
from __future__ import annotations

import enum
import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder

from .client_ip import get_client_ip

audit_logger = logging.getLogger("cemetery_api.audit")


class AuditAction(str, enum.Enum):
    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"

    # User management
    USER_CREATED = "USER_CREATED"

    # Records
    WORK_ORDER_CREATED = "WORK_ORDER_CREATED"
    WORK_ORDER_UPDATED = "WORK_ORDER_UPDATED"
    WORK_ORDER_DELETED = "WORK_ORDER_DELETED"
    GRANT_CREATED = "GRANT_CREATED"
    GRANT_UPDATED = "GRANT_UPDATED"
    GRANT_DELETED = "GRANT_DELETED"
    INVENTORY_CREATED = "INVENTORY_CREATED"
    INVENTORY_UPDATED = "INVENTORY_UPDATED"
    INVENTORY_DELETED = "INVENTORY_DELETED"
    CUSTOMER_CREATED = "CUSTOMER_CREATED"
    CUSTOMER_UPDATED = "CUSTOMER_UPDATED"
    CUSTOMER_DELETED = "CUSTOMER_DELETED"

    # Financial
    DEPOSIT_CREATED = "DEPOSIT_CREATED"
    RECEIVABLE_CREATED = "RECEIVABLE_CREATED"
    PAYABLE_CREATED = "PAYABLE_CREATED"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"

    # Burial records
    BURIAL_CREATED = "BURIAL_CREATED"
    BURIAL_UPDATED = "BURIAL_UPDATED"
    BURIAL_DELETED = "BURIAL_DELETED"

    # Contracts
    CONTRACT_CREATED = "CONTRACT_CREATED"
    CONTRACT_UPDATED = "CONTRACT_UPDATED"
    CONTRACT_DELETED = "CONTRACT_DELETED"


def log_audit(
    action: AuditAction,
    data: dict[str, Any] | None = None,
    user: Any = None,
    ip_address: str = "unknown",
) -> dict[str, Any]:
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action.value,
        "userId": getattr(user, "id", None),
        "userEmail": getattr(user, "email", None),
        "ipAddress": ip_address,
        "data": jsonable_encoder(data or {}),
    }
    audit_logger.info("[AUDIT] %s", json.dumps(entry, default=str))
    return entry


def audit_request(request: Request, action: AuditAction, data: dict[str, Any] | None = None, user: Any = None) -> dict[str, Any]:
    """log_audit with the principal and client address taken from the request."""
    settings = request.app.state.settings
    return log_audit(
        action,
        data,
        user if user is not None else getattr(request.state, "user", None),
        get_client_ip(request, trust_proxy_headers=settings.TRUST_PROXY_HEADERS),
    )
