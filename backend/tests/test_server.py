from __future__ import annotations

import importlib
import sys
import threading
import tomllib
from pathlib import Path

import pytest
import uvicorn

from cemetery_api.server import GracefulServer


def _server() -> GracefulServer:
    server = GracefulServer(uvicorn.Config(app=lambda *args: None), shutdown_timeout=60)
    server._force_exit = lambda: None
    return server


def test_begin_shutdown_is_idempotent() -> None:
    server = _server()
    assert server.fatal is False

    server.begin_shutdown("test")
    server.begin_shutdown("again")

    assert server.fatal is True
    assert server.should_exit is True


def test_process_hooks_trigger_shutdown(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    server = _server()
    server.install_process_hooks()

    worker = threading.Thread(target=lambda: 1 / 0, name="worker")
    worker.start()
    worker.join()

    assert server.fatal is True


def test_console_script_points_at_run() -> None:
    pyproject = tomllib.loads((Path(__file__).resolve().parents[2] / "pyproject.toml").read_text())
    module_name, _, attr = pyproject["project"]["scripts"]["cemetery-api"].partition(":")

    assert callable(getattr(importlib.import_module(module_name), attr))
