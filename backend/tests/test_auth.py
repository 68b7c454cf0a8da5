from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from cemetery_api.auth import (
    Principal,
    create_access_token,
    decode_token,
    get_password_hash,
    require_role,
    verify_password,
)
from cemetery_api.config import Settings
from cemetery_api.errors import ConfigurationError, ForbiddenError, UnauthorizedError
from cemetery_api.models import User

from conftest import PASSWORD, bearer, csrf_headers

ALICE = Principal(id="0b7c1f2e-8d5a-4a8e-9f0e-3f7b8c6d1a22", email="alice@example.com", role="manager")


def test_token_round_trip(settings: Settings) -> None:
    token = create_access_token(ALICE, settings)
    claims = jwt.get_unverified_claims(token)

    assert decode_token(token, settings) == ALICE
    assert claims["exp"] - claims["iat"] == 24 * 3600


def test_expired_token_is_rejected(settings: Settings) -> None:
    token = create_access_token(ALICE, settings, expires_delta=timedelta(seconds=-5))

    with pytest.raises(UnauthorizedError, match="Invalid or expired token"):
        decode_token(token, settings)


def test_token_signed_with_other_secret_is_rejected(settings: Settings) -> None:
    other = settings.model_copy(update={"JWT_SECRET": "another-secret-another-secret-another-secret"})

    with pytest.raises(UnauthorizedError):
        decode_token(create_access_token(ALICE, other), settings)


def test_token_with_unknown_role_is_rejected(settings: Settings) -> None:
    token = jwt.encode({"id": ALICE.id, "email": ALICE.email, "role": "root"}, settings.JWT_SECRET, algorithm="HS256")

    with pytest.raises(UnauthorizedError):
        decode_token(token, settings)


def test_missing_secret_is_configuration_error(settings: Settings) -> None:
    unconfigured = settings.model_copy(update={"JWT_SECRET": ""})

    with pytest.raises(ConfigurationError) as exc_info:
        create_access_token(ALICE, unconfigured)
    assert exc_info.value.code == "CONFIG_ERROR"
    assert exc_info.value.is_operational is False


def test_password_hashing() -> None:
    hashed = get_password_hash("s3cret-pass")

    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret-pass", "not-a-bcrypt-hash")


def test_require_role_checks_attached_principal() -> None:
    checker = require_role("admin", "manager")

    assert checker(SimpleNamespace(state=SimpleNamespace(user=ALICE))) is ALICE
    with pytest.raises(ForbiddenError, match="Insufficient permissions"):
        checker(SimpleNamespace(state=SimpleNamespace(user=Principal(id="x", email="s@example.com", role="staff"))))
    with pytest.raises(ForbiddenError):
        checker(SimpleNamespace(state=SimpleNamespace()))


def test_protected_route_without_token(client: TestClient) -> None:
    response = client.get("/api/work-orders")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["error"]["message"] == "Access token required"


def test_protected_route_with_garbage_token(client: TestClient) -> None:
    response = client.get("/api/dashboard/stats", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid or expired token"


def test_login_success_returns_token_without_hash(client: TestClient, staff_user: User, settings: Settings) -> None:
    response = client.post("/api/auth/login", json={"email": "STAFF@example.com", "password": PASSWORD})

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    body = response.json()
    assert body["success"] is True
    assert body["user"] == {"id": str(staff_user.id), "email": "staff@example.com", "name": "Staff User", "role": "staff"}
    assert "password_hash" not in body["user"]
    assert decode_token(body["token"], settings).id == str(staff_user.id)


@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("staff@example.com", "wrong-password"),
        ("nobody@example.com", PASSWORD),
    ],
)
def test_login_failures_are_indistinguishable(client: TestClient, staff_user: User, email: str, password: str) -> None:
    response = client.post("/api/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_me_returns_current_user(client: TestClient, admin_user: User, settings: Settings) -> None:
    response = client.get("/api/auth/me", headers=bearer(admin_user, settings))

    assert response.status_code == 200
    assert response.json()["email"] == "admin@example.com"
    assert response.json()["role"] == "admin"


def test_me_for_deleted_user_is_404(client: TestClient, settings: Settings) -> None:
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_access_token(ALICE, settings)}"})

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found"


def test_admin_registers_staff_by_default(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/auth/register",
        json={"email": "New.Hire@Example.com", "password": "long-enough-1", "name": "New Hire"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["email"] == "new.hire@example.com"
    assert response.json()["role"] == "staff"

    login = client.post("/api/auth/login", json={"email": "new.hire@example.com", "password": "long-enough-1"})
    assert login.status_code == 200


def test_register_duplicate_email_is_conflict(client: TestClient, admin_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/auth/register",
        json={"email": "ADMIN@example.com", "password": "long-enough-1", "name": "Copy"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"


def test_register_requires_admin(client: TestClient, staff_headers: dict[str, str]) -> None:
    response = client.post(
        "/api/auth/register",
        json={"email": "x@example.com", "password": "long-enough-1", "name": "X"},
        headers=staff_headers,
    )

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Insufficient permissions"


def test_register_rejects_short_password(client: TestClient, admin_user: User, settings: Settings) -> None:
    headers = {**bearer(admin_user, settings), **csrf_headers(client)}
    response = client.post(
        "/api/auth/register",
        json={"email": "short@example.com", "password": "short", "name": "Short"},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "password"
