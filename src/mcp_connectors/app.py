"""ASGI application serving one connector's tools over MCP.

Architecture:
    Starlette App
      ├── /mcp      → FastMCP server with the connector's tools
      ├── /health   → liveness and connector metadata
      └── /metrics  → Prometheus exposition

Usage:
    mcp-connectors --connector 1password \\
        --credentials '{"serverUrl": "https://connect.example.com", "token": "..."}'
"""

from __future__ import annotations

import argparse
from collections.abc import Mapping, Sequence
from contextlib import asynccontextmanager
import json
import logging
import sys
from typing import Any

from fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from mcp_connectors.config import Settings
from mcp_connectors.connectors import ConnectorConfig, ConnectorContext, get_connector, list_connector_keys
from mcp_connectors.errors import ConnectorNotFoundError, CredentialsError
from mcp_connectors.observability import configure_logging, get_metrics, get_metrics_content_type, init_tracing


logger = logging.getLogger(__name__)


def create_server(connector: ConnectorConfig, context: ConnectorContext, *, settings: Settings | None = None) -> FastMCP:
    """Create a FastMCP server exposing ``connector``'s tools bound to ``context``."""

    active_settings = settings or context.settings
    instructions = connector.description or f"{connector.name} connector"
    if connector.example_prompt:
        instructions = f"{instructions}. Example: {connector.example_prompt}"

    mcp = FastMCP(
        name=f"{connector.name} Connector",
        instructions=instructions,
        mask_error_details=active_settings.mask_error_details,
    )
    connector.register(mcp, context)
    logger.info("Registered %d tools for connector %s", len(connector.tools), connector.key)
    return mcp


def create_app(
    connector_key: str,
    credentials: Mapping[str, Any] | None = None,
    setup: Mapping[str, Any] | None = None,
    *,
    settings: Settings | None = None,
) -> Starlette:
    """Build the ASGI app for one connector session.

    Raises:
        ConnectorNotFoundError: ``connector_key`` is not registered.
        CredentialsError: Credentials or setup fail validation.
    """

    active_settings = settings or Settings()
    connector = get_connector(connector_key)
    context = ConnectorContext(connector, credentials, setup, settings=active_settings)
    mcp = create_server(connector, context, settings=active_settings)
    # path="/" keeps the endpoint at /mcp/ rather than /mcp/mcp/
    mcp_http_app = mcp.http_app(path="/")

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "healthy",
                "connector": connector.key,
                "name": connector.name,
                "version": connector.version,
                "tools": [tool.name for tool in connector.tools],
            }
        )

    async def metrics(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    @asynccontextmanager
    async def lifespan(app: Starlette):
        app.state.connector_context = context
        async with mcp_http_app.lifespan(app):
            logger.info("Connector %s ready", connector.key)
            yield
        logger.info("Connector %s session closed", connector.key)

    routes: list[Route | Mount] = [
        Route("/health", endpoint=health, methods=["GET"]),
        Route("/metrics", endpoint=metrics, methods=["GET"]),
        Mount("/mcp", app=mcp_http_app),
    ]
    return Starlette(
        debug=active_settings.log_level == "debug",
        routes=routes,
        lifespan=lifespan,
    )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve an MCP connector over streamable HTTP")
    parser.add_argument("--connector", "-c", help="Connector key (e.g. 1password)")
    parser.add_argument("--credentials", default="{}", help="JSON object with connector credentials")
    parser.add_argument("--setup", default="{}", help="JSON object with connector setup values")
    parser.add_argument("--host", help="Bind host (defaults to MCP_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (defaults to MCP_PORT)")
    parser.add_argument("--list", action="store_true", help="List available connectors and exit")
    return parser


def _parse_json_object(raw: str, label: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid {label} JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{label} must be a JSON object")
    return payload


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the connector server."""
    import uvicorn

    args = build_argument_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level, settings.json_logs)

    if args.list:
        print("\n".join(list_connector_keys()))
        return 0

    if not args.connector:
        logger.error("Connector key is required. Available: %s", ", ".join(list_connector_keys()))
        return 1

    try:
        credentials = _parse_json_object(args.credentials, "credentials")
        setup = _parse_json_object(args.setup, "setup")
        app = create_app(args.connector, credentials, setup, settings=settings)
    except (ValueError, ConnectorNotFoundError, CredentialsError) as exc:
        logger.error("%s", exc)
        return 1

    init_tracing(resource_attributes={"mcp.connector": args.connector})

    host = args.host or settings.mcp_host
    port = args.port or settings.mcp_port
    logger.info("Starting %s connector on %s:%d", args.connector, host, port)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
