from __future__ import annotations

import json
import logging
import uuid

import pytest
from fastapi.testclient import TestClient

from cemetery_api.audit import AuditAction, log_audit
from cemetery_api.auth import Principal
from cemetery_api.models import User

from conftest import PASSWORD


def test_log_audit_entry(caplog: pytest.LogCaptureFixture) -> None:
    user = Principal(id="u-1", email="clerk@example.com", role="staff")
    record_id = uuid.uuid4()

    with caplog.at_level(logging.INFO, logger="cemetery_api.audit"):
        entry = log_audit(AuditAction.BURIAL_CREATED, {"id": record_id}, user, "203.0.113.9")

    assert entry["action"] == "BURIAL_CREATED"
    assert entry["userId"] == "u-1"
    assert entry["userEmail"] == "clerk@example.com"
    assert entry["ipAddress"] == "203.0.113.9"
    assert entry["data"] == {"id": str(record_id)}

    message = caplog.records[-1].getMessage()
    assert message.startswith("[AUDIT] ")
    assert json.loads(message[len("[AUDIT] "):])["action"] == "BURIAL_CREATED"


def test_login_attempts_are_audited(
    client: TestClient, staff_user: User, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="cemetery_api.audit"):
        client.post("/api/auth/login", json={"email": "staff@example.com", "password": "nope"})
        client.post("/api/auth/login", json={"email": "staff@example.com", "password": PASSWORD})

    actions = [json.loads(r.getMessage()[len("[AUDIT] "):])["action"] for r in caplog.records if r.name == "cemetery_api.audit"]
    assert actions == ["LOGIN_FAILED", "LOGIN_SUCCESS"]
