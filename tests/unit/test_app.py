"""Unit tests for the ASGI app and CLI entrypoint."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient

import mcp_connectors.app as app_module
from mcp_connectors.config import Settings
from mcp_connectors.connectors import ConnectorContext
from mcp_connectors.connectors.onepassword import ONEPASSWORD_CONNECTOR
from mcp_connectors.errors import ConnectorNotFoundError, CredentialsError


pytestmark = pytest.mark.unit

CREDENTIALS = {"serverUrl": "https://connect.example.com", "token": "test-token"}


@pytest.fixture
def quiet_logging(monkeypatch):
    monkeypatch.setattr(app_module, "configure_logging", lambda *args, **kwargs: None)


def test_create_server_names_connector():
    context = ConnectorContext(ONEPASSWORD_CONNECTOR, CREDENTIALS)

    mcp = app_module.create_server(ONEPASSWORD_CONNECTOR, context)

    assert mcp.name == "1Password Connector"


def test_health_reports_connector_metadata():
    client = TestClient(app_module.create_app("1password", CREDENTIALS))

    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["connector"] == "1password"
    assert payload["version"] == ONEPASSWORD_CONNECTOR.version
    assert "1password_search_items" in payload["tools"]


def test_metrics_endpoint_exposes_prometheus_text():
    client = TestClient(app_module.create_app("1password", CREDENTIALS))

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "mcp_tool_calls_total" in response.text


def test_create_app_rejects_unknown_connector():
    with pytest.raises(ConnectorNotFoundError):
        app_module.create_app("missing", {})


def test_create_app_rejects_invalid_credentials():
    with pytest.raises(CredentialsError):
        app_module.create_app("1password", {"serverUrl": "https://connect.example.com"})


def test_parse_json_object():
    assert app_module._parse_json_object('{"a": 1}', "setup") == {"a": 1}
    with pytest.raises(ValueError, match="Invalid setup JSON"):
        app_module._parse_json_object("{", "setup")
    with pytest.raises(ValueError, match="must be a JSON object"):
        app_module._parse_json_object("[1]", "setup")


def test_main_lists_connectors(quiet_logging, capsys):
    assert app_module.main(["--list"]) == 0
    assert capsys.readouterr().out.strip() == "1password"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--connector", "missing"],
        ["--connector", "1password", "--credentials", "not json"],
        ["--connector", "1password", "--credentials", "{}"],
    ],
)
def test_main_returns_error_code(quiet_logging, monkeypatch, argv):
    monkeypatch.setattr("uvicorn.run", lambda *args, **kwargs: pytest.fail("uvicorn.run should not be called"))

    assert app_module.main(argv) == 1


def test_main_invokes_uvicorn(quiet_logging, monkeypatch):
    calls = []
    monkeypatch.setattr(app_module, "init_tracing", lambda **kwargs: None)
    monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    exit_code = app_module.main(["-c", "1password", "--credentials", json.dumps(CREDENTIALS), "--port", "9100"])

    assert exit_code == 0
    _app, kwargs = calls[0]
    assert kwargs["host"] == Settings().mcp_host
    assert kwargs["port"] == 9100
    assert kwargs["log_config"] is None
