"""Connector catalog."""

from mcp_connectors.connectors.base import ConnectorConfig, ConnectorContext, ToolDefinition, run_tool
from mcp_connectors.connectors.onepassword import ONEPASSWORD_CONNECTOR
from mcp_connectors.errors import ConnectorNotFoundError


CONNECTORS: tuple[ConnectorConfig, ...] = (ONEPASSWORD_CONNECTOR,)


def list_connector_keys() -> list[str]:
    return sorted(connector.key for connector in CONNECTORS)


def get_connector(key: str) -> ConnectorConfig:
    """Look up a connector by key (case-insensitive)."""

    normalized = key.strip().lower()
    for connector in CONNECTORS:
        if connector.key == normalized:
            return connector
    raise ConnectorNotFoundError(key, list_connector_keys())


__all__ = [
    "CONNECTORS",
    "ConnectorConfig",
    "ConnectorContext",
    "ToolDefinition",
    "get_connector",
    "list_connector_keys",
    "run_tool",
]
