"""Tests for environment-driven settings."""

from pydantic import ValidationError
import pytest

from mcp_connectors.config import Settings, get_settings
from mcp_connectors.search.models import DEFAULT_MAX_RECORDS, DEFAULT_MAX_RESULTS, DEFAULT_THRESHOLD


pytestmark = pytest.mark.unit


def test_defaults_from_test_environment():
    settings = get_settings()

    assert settings.mcp_host == "127.0.0.1"
    assert settings.mcp_port == 3000
    assert settings.http_timeout == 5
    assert settings.search_max_results == 20
    assert settings.search_threshold == pytest.approx(0.1)
    assert settings.json_logs is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SEARCH_THRESHOLD", "0.4")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.search_threshold == pytest.approx(0.4)
    assert settings.log_level == "debug"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SEARCH_THRESHOLD", "1.5"),
        ("SEARCH_MAX_RESULTS", "0"),
        ("MCP_PORT", "70000"),
        ("LOG_LEVEL", "verbose"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings()


def test_search_defaults_match_index_defaults():
    fields = Settings.model_fields

    assert fields["search_max_results"].default == DEFAULT_MAX_RESULTS
    assert fields["search_threshold"].default == DEFAULT_THRESHOLD
    assert fields["search_max_records"].default == DEFAULT_MAX_RECORDS
