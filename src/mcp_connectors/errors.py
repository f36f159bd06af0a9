"""Exception types raised by the connector catalog and its search core."""


class ConfigurationError(ValueError):
    """Invalid search options supplied when building an index."""


class ConnectorNotFoundError(KeyError):
    """Requested connector key is not registered."""

    def __init__(self, key: str, available: list[str]) -> None:
        super().__init__(key)
        self.key = key
        self.available = available

    def __str__(self) -> str:
        return f"Connector '{self.key}' not found. Available: {', '.join(self.available)}"


class CredentialsError(ValueError):
    """Credentials or setup payload failed schema validation."""
