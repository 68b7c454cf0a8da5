from __future__ import annotations

import pytest

from cemetery_api.auth import find_user_by_email, verify_password
from cemetery_api.database import Database
from create_admin import create_admin

from conftest import make_settings


def test_creates_admin_once(database: Database, capsys: pytest.CaptureFixture[str]) -> None:
    settings = make_settings(INITIAL_ADMIN_EMAIL=" Root@Example.com ", INITIAL_ADMIN_PASSWORD="a-long-admin-password")

    assert create_admin(database, settings) is True
    assert create_admin(database, settings) is False

    session = database.session()
    try:
        admin = find_user_by_email(session, "root@example.com")
        assert admin is not None
        assert admin.role == "admin"
        assert admin.email == "root@example.com"
        assert verify_password("a-long-admin-password", admin.password_hash)
    finally:
        session.close()

    out = capsys.readouterr().out
    assert "Initial admin user created" in out
    assert "already exists" in out


def test_short_password_warns(database: Database, capsys: pytest.CaptureFixture[str]) -> None:
    create_admin(database, make_settings(INITIAL_ADMIN_EMAIL="a@example.com", INITIAL_ADMIN_PASSWORD="short"))

    assert "at least 12 characters" in capsys.readouterr().out


def test_missing_credentials(database: Database) -> None:
    with pytest.raises(ValueError):
        create_admin(database, make_settings())
