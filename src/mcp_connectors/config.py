"""Centralized configuration for mcp-connectors using Pydantic Settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All environment variables are validated at startup with proper types.
    Search defaults apply whenever a connector builds an index without
    passing explicit options.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Server settings
    mcp_host: str = Field(default="127.0.0.1", description="MCP server host")
    mcp_port: int = Field(default=3000, ge=1, le=65535, description="MCP server port")

    # HTTP/Request settings
    http_timeout: int = Field(default=30, ge=1, description="Upstream API request timeout in seconds")

    # Search defaults
    search_max_results: int = Field(default=20, ge=1, description="Maximum results retained per search")
    search_threshold: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Minimum relevance score a record needs to be returned",
    )
    search_max_records: int = Field(
        default=10_000,
        ge=1,
        description="Upper bound on records accepted when building an index",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Logging level"
    )
    json_logs: bool = Field(default=True, description="Emit structured JSON logs")

    # Security
    mask_error_details: bool = Field(
        default=True, description="Mask internal error details in MCP error responses"
    )


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
