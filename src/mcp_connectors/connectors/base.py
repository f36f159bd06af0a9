"""Connector building blocks: configs, tool definitions and the session context.

A connector maps one upstream API onto MCP tools. Tool handlers are plain
async functions receiving a :class:`ConnectorContext` plus their arguments and
returning display text. The context is created once per server session and
carries validated credentials, a key/value data store and a string cache.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
import copy
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry.trace import SpanKind
from pydantic import BaseModel, ConfigDict, ValidationError

from mcp_connectors.config import Settings
from mcp_connectors.errors import CredentialsError
from mcp_connectors.observability import (
    ERROR_COUNT,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    create_span,
    get_trace_context,
    set_trace_context,
    trace_context,
    track_latency,
)


if TYPE_CHECKING:
    from fastmcp import FastMCP


logger = logging.getLogger(__name__)

ToolHandler = Callable[..., Awaitable[str]]


class EmptySetup(BaseModel):
    """Setup schema for connectors that need no setup values."""

    model_config = ConfigDict(extra="ignore")


@dataclass(frozen=True)
class ToolDefinition:
    """Name, description and handler of one connector tool."""

    name: str
    description: str
    handler: ToolHandler
    read_only: bool = False

    @property
    def annotations(self) -> dict[str, Any]:
        return {"readOnlyHint": self.read_only, "destructiveHint": not self.read_only}


@dataclass(frozen=True)
class ConnectorConfig:
    """Declarative description of a connector."""

    name: str
    key: str
    version: str
    credentials: type[BaseModel]
    register: Callable[[FastMCP, ConnectorContext], None]
    tools: tuple[ToolDefinition, ...] = ()
    setup: type[BaseModel] = EmptySetup
    description: str = ""
    logo: str | None = None
    example_prompt: str | None = None
    initial_state: Mapping[str, Any] = field(default_factory=dict)

    def get_tool(self, name: str) -> ToolDefinition:
        for tool in self.tools:
            if tool.name == name:
                return tool
        raise KeyError(name)


def _validate(model: type[BaseModel], payload: Mapping[str, Any] | None, label: str, connector: str) -> BaseModel:
    try:
        return model.model_validate(dict(payload or {}))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise CredentialsError(f"Invalid {label} for connector '{connector}': {fields}") from exc


class ConnectorContext:
    """Session-scoped state handed to every tool handler.

    Replaces process-wide singletons: create one at session start and drop
    it when the session ends. Nothing here is shared between contexts.
    """

    def __init__(
        self,
        connector: ConnectorConfig,
        credentials: Mapping[str, Any] | None = None,
        setup: Mapping[str, Any] | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.connector = connector
        self.settings = settings or Settings()
        self._credentials = _validate(connector.credentials, credentials, "credentials", connector.key)
        self._setup = _validate(connector.setup, setup, "setup", connector.key)
        self._data: dict[str, Any] = copy.deepcopy(dict(connector.initial_state))
        self._cache: dict[str, str] = {}

    async def get_credentials(self) -> Any:
        return self._credentials

    async def get_setup(self) -> Any:
        return self._setup

    async def get_data(self, key: str | None = None) -> Any:
        """Return one stored value, or a snapshot of the whole store when ``key`` is None."""
        if key is None:
            return dict(self._data)
        return self._data.get(key)

    async def set_data(self, key_or_data: str | Mapping[str, Any], value: Any = None) -> None:
        if isinstance(key_or_data, str):
            self._data[key_or_data] = value
        else:
            self._data.update(key_or_data)

    async def read_cache(self, key: str) -> str | None:
        return self._cache.get(key)

    async def write_cache(self, key: str, value: str) -> None:
        self._cache[key] = value


async def run_tool(context: ConnectorContext, tool: ToolDefinition, **arguments: Any) -> str:
    """Invoke a tool handler with latency, count and span bookkeeping.

    Logs emitted by the handler carry the connector key and, once tracing is
    initialized, the ids of the tool span.
    """

    connector_key = context.connector.key
    with (
        track_latency(REQUEST_LATENCY, connector=connector_key, tool=tool.name),
        create_span(
            f"mcp.tool.{tool.name}",
            kind=SpanKind.INTERNAL,
            attributes={"mcp.tool.name": tool.name, "mcp.connector": connector_key},
        ) as span,
    ):
        span_ctx = span.get_span_context()
        if span_ctx.is_valid:
            trace_id, span_id = format(span_ctx.trace_id, "032x"), format(span_ctx.span_id, "016x")
        else:
            current = get_trace_context()
            trace_id, span_id = current["trace_id"], current["span_id"]
        token = set_trace_context(trace_id, span_id, connector=connector_key)
        try:
            result = await tool.handler(context, **arguments)
        except Exception:
            REQUEST_COUNT.labels(connector=connector_key, tool=tool.name, status="error").inc()
            ERROR_COUNT.labels(connector=connector_key, error_type="unhandled").inc()
            logger.exception("Tool %s raised", tool.name)
            raise
        finally:
            trace_context.reset(token)
        REQUEST_COUNT.labels(connector=connector_key, tool=tool.name, status="ok").inc()
        return result
