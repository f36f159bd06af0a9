"""Shared test fixtures and configuration."""

from collections.abc import Callable
import os

import httpx
import pytest


TEST_ENV = {
    "MCP_HOST": "127.0.0.1",
    "MCP_PORT": "3000",
    "HTTP_TIMEOUT": "5",
    "LOG_LEVEL": "info",
    "JSON_LOGS": "true",
    "SEARCH_MAX_RESULTS": "20",
    "SEARCH_THRESHOLD": "0.1",
    "SEARCH_MAX_RECORDS": "10000",
    "MASK_ERROR_DETAILS": "true",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from mcp_connectors.connectors import ConnectorContext  # noqa: E402
from mcp_connectors.connectors import onepassword  # noqa: E402


ONEPASSWORD_CREDENTIALS = {"serverUrl": "https://connect.example.com", "token": "test-token"}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables to test defaults before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def vault_items() -> list[dict]:
    return [
        {"id": "i1", "title": "WiFi Password", "category": "PASSWORD"},
        {"id": "i2", "title": "GitHub Login", "category": "LOGIN"},
        {"id": "i3", "title": "Home WiFi", "category": "SECURE_NOTE"},
    ]


@pytest.fixture
def onepassword_context() -> ConnectorContext:
    return ConnectorContext(onepassword.ONEPASSWORD_CONNECTOR, ONEPASSWORD_CREDENTIALS)


@pytest.fixture
def connect_server(monkeypatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], list[httpx.Request]]:
    """Route 1Password client traffic to a fake Connect server.

    Returns an installer taking a request handler; the installer returns the
    list that captures every request the client sends.
    """

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Request]:
        seen: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        async def fake_build_client(context):
            credentials = await context.get_credentials()
            return onepassword.OnePasswordClient(
                credentials.server_url,
                credentials.token,
                transport=httpx.MockTransport(recording_handler),
            )

        monkeypatch.setattr(onepassword, "build_client", fake_build_client)
        return seen

    return install
