"""
Simple smoke tests to verify basic functionality.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from main import app, main


def test_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"hello": "world"}


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["app_name"] == "Test Broker"
    assert data["paypal_mode"] == "sandbox"
    assert data["webhook_configured"] is True


def test_startup_fails_without_credentials(monkeypatch):
    monkeypatch.delenv("PAYPAL_SECRET")

    with pytest.raises(Exception):
        with TestClient(app):
            pass


def test_main_exits_without_credentials(monkeypatch):
    monkeypatch.delenv("PAYPAL_CLIENT_ID")

    with patch("uvicorn.run") as mock_run:
        with pytest.raises(SystemExit) as exc_info:
            main()

    assert exc_info.value.code == 1
    mock_run.assert_not_called()


def test_main_runs_on_configured_port(monkeypatch):
    monkeypatch.setenv("PORT", "4000")

    with patch("uvicorn.run") as mock_run:
        main()

    mock_run.assert_called_once()
    assert mock_run.call_args.kwargs["port"] == 4000


def test_unhandled_error_returns_json_500(client, paypal_stub):
    paypal_stub.error = RuntimeError("unexpected")

    no_raise = TestClient(app, raise_server_exceptions=False)
    response = no_raise.post("/api/orders")

    assert response.status_code == 500
    assert response.json() == {"error": "Erreur interne du serveur"}
