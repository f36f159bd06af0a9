"""Unit tests for the connector catalog."""

import pytest

from mcp_connectors.connectors import CONNECTORS, get_connector, list_connector_keys
from mcp_connectors.connectors.onepassword import ONEPASSWORD_CONNECTOR
from mcp_connectors.errors import ConnectorNotFoundError


pytestmark = pytest.mark.unit


def test_list_connector_keys():
    assert list_connector_keys() == ["1password"]


def test_keys_are_unique():
    keys = [connector.key for connector in CONNECTORS]
    assert len(keys) == len(set(keys))


@pytest.mark.parametrize("key", ["1password", "1Password", " 1PASSWORD "])
def test_get_connector_is_case_insensitive(key):
    assert get_connector(key) is ONEPASSWORD_CONNECTOR


def test_unknown_connector():
    with pytest.raises(ConnectorNotFoundError) as exc_info:
        get_connector("bitwarden")

    assert exc_info.value.key == "bitwarden"
    assert str(exc_info.value) == "Connector 'bitwarden' not found. Available: 1password"
    assert isinstance(exc_info.value, KeyError)


def test_tool_names_are_prefixed_and_unique():
    for connector in CONNECTORS:
        names = [tool.name for tool in connector.tools]
        assert len(names) == len(set(names))
        assert all(name.startswith(f"{connector.key}_") for name in names)
