"""1Password Connect connector.

Talks to a 1Password Connect server over its REST API and exposes vault and
item tools. Item search builds a throwaway lexical index over the vault's
item list on every call.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
import logging
import re
from typing import TYPE_CHECKING, Annotated, Any
from uuid import uuid4

import httpx
from pydantic import BaseModel, ConfigDict, Field

from mcp_connectors.connectors.base import ConnectorConfig, ConnectorContext, ToolDefinition, run_tool
from mcp_connectors.errors import ConfigurationError
from mcp_connectors.observability import ERROR_COUNT, INDEX_RECORD_COUNT
from mcp_connectors.search import create_index, search


if TYPE_CHECKING:
    from fastmcp import FastMCP


logger = logging.getLogger(__name__)

CONNECTOR_KEY = "1password"


class OnePasswordCredentials(BaseModel):
    """Connect server location and access token."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    server_url: str = Field(
        alias="serverUrl",
        min_length=1,
        description="1Password Connect server URL :: https://connect.1password.com",
    )
    token: str = Field(
        min_length=1,
        description="1Password Connect API token :: https://developer.1password.com/docs/connect/manage-connect/",
    )


class ItemField(BaseModel):
    type: str = Field(description="Field type (e.g., STRING, CONCEALED, URL, etc.)")
    label: str | None = Field(default=None, description="Field label")
    value: str | None = Field(default=None, description="Field value")
    purpose: str | None = Field(default=None, description="Field purpose (e.g., USERNAME, PASSWORD, etc.)")


class ItemSection(BaseModel):
    label: str | None = Field(default=None, description="Section label")
    fields: list[ItemField] | None = Field(default=None, description="Fields in this section")


class OnePasswordAPIError(RuntimeError):
    """Non-success response from the Connect server."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code


class OnePasswordClient:
    """Minimal async client for the 1Password Connect REST API."""

    def __init__(
        self,
        server_url: str,
        token: str,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=server_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> OnePasswordClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        response = await self._client.request(method, path, json=json)
        if response.is_error:
            message = response.reason_phrase
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, Mapping) and payload.get("message"):
                message = str(payload["message"])
            raise OnePasswordAPIError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise OnePasswordAPIError(response.status_code, "invalid JSON response") from exc

    async def list_vaults(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/v1/vaults") or []

    async def get_vault(self, vault_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/vaults/{vault_id}")

    async def list_items(self, vault_id: str) -> list[dict[str, Any]]:
        return await self._request("GET", f"/v1/vaults/{vault_id}/items") or []

    async def get_item(self, vault_id: str, item_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/v1/vaults/{vault_id}/items/{item_id}")

    async def create_item(self, vault_id: str, item: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/v1/vaults/{vault_id}/items", json=dict(item))

    async def update_item(self, vault_id: str, item: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/v1/vaults/{vault_id}/items/{item['id']}", json=dict(item))

    async def delete_item(self, vault_id: str, item_id: str) -> None:
        await self._request("DELETE", f"/v1/vaults/{vault_id}/items/{item_id}")


async def build_client(context: ConnectorContext) -> OnePasswordClient:
    credentials: OnePasswordCredentials = await context.get_credentials()
    return OnePasswordClient(
        credentials.server_url,
        credentials.token,
        timeout=context.settings.http_timeout,
    )


def _dump(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def _failure(action: str, exc: Exception) -> str:
    ERROR_COUNT.labels(connector=CONNECTOR_KEY, error_type=type(exc).__name__).inc()
    logger.warning("1Password %s failed: %s", action, exc)
    return f"Failed to {action}: {exc}"


def _section_id(label: str | None) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", (label or "").lower()).strip("_")
    return slug or uuid4().hex[:8]


def build_item_fields(
    fields: Sequence[ItemField] | None,
    sections: Sequence[ItemSection] | None,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Translate tool arguments into Connect ``fields`` and ``sections`` payloads."""

    payload_fields: list[dict[str, Any]] = []
    payload_sections: list[dict[str, Any]] = []

    for item_field in fields or []:
        payload_fields.append(item_field.model_dump(exclude_none=True))

    for section in sections or []:
        section_id = _section_id(section.label)
        payload_sections.append({"id": section_id, "label": section.label or section_id})
        for item_field in section.fields or []:
            entry = item_field.model_dump(exclude_none=True)
            entry["section"] = {"id": section_id}
            payload_fields.append(entry)

    return payload_fields, payload_sections


def format_search_results(items: Sequence[Mapping[str, Any]], query: str, vault_id: str) -> str:
    """Render matched items as a numbered list."""

    if not items:
        return f'No items found matching "{query}" in vault {vault_id}'

    lines = []
    for position, item in enumerate(items, start=1):
        title = item.get("title") or item.get("name") or "Untitled"
        category = item.get("category") or "Unknown"
        lines.append(f"{position}. {title} ({category})")
    noun = "item" if len(items) == 1 else "items"
    return f"Found {len(items)} {noun}:\n" + "\n".join(lines)


async def list_vaults(context: ConnectorContext) -> str:
    try:
        async with await build_client(context) as client:
            return _dump(await client.list_vaults())
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("list vaults", exc)


async def get_vault(context: ConnectorContext, vault_id: str) -> str:
    try:
        async with await build_client(context) as client:
            return _dump(await client.get_vault(vault_id))
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("get vault", exc)


async def list_items(context: ConnectorContext, vault_id: str) -> str:
    try:
        async with await build_client(context) as client:
            return _dump(await client.list_items(vault_id))
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("list items", exc)


async def get_item(context: ConnectorContext, vault_id: str, item_id: str) -> str:
    try:
        async with await build_client(context) as client:
            return _dump(await client.get_item(vault_id, item_id))
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("get item", exc)


async def search_items(context: ConnectorContext, vault_id: str, query: str) -> str:
    try:
        async with await build_client(context) as client:
            items = await client.list_items(vault_id)
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("search items", exc)

    settings = context.settings
    try:
        index = create_index(
            items,
            max_results=settings.search_max_results,
            threshold=settings.search_threshold,
            max_records=settings.search_max_records,
        )
    except ConfigurationError as exc:
        return _failure("search items", exc)
    INDEX_RECORD_COUNT.labels(connector=CONNECTOR_KEY).set(len(index))
    matches = [result.item for result in search(index, query)]
    return format_search_results(matches, query, vault_id)


async def create_item(
    context: ConnectorContext,
    vault_id: str,
    title: str,
    category: str,
    fields: Sequence[ItemField] | None = None,
    sections: Sequence[ItemSection] | None = None,
) -> str:
    payload_fields, payload_sections = build_item_fields(fields, sections)
    item: dict[str, Any] = {
        "title": title,
        "category": category.upper(),
        "vault": {"id": vault_id},
    }
    if payload_fields:
        item["fields"] = payload_fields
    if payload_sections:
        item["sections"] = payload_sections

    try:
        async with await build_client(context) as client:
            return _dump(await client.create_item(vault_id, item))
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("create item", exc)


async def update_item(
    context: ConnectorContext,
    vault_id: str,
    item_id: str,
    title: str | None = None,
    fields: Sequence[ItemField] | None = None,
    sections: Sequence[ItemSection] | None = None,
) -> str:
    try:
        async with await build_client(context) as client:
            existing = await client.get_item(vault_id, item_id)
            if title:
                existing["title"] = title
            if fields is not None or sections is not None:
                payload_fields, payload_sections = build_item_fields(fields, sections)
                if fields is None:
                    # keep unsectioned fields when only sections are replaced
                    kept = [entry for entry in existing.get("fields") or [] if not entry.get("section")]
                    payload_fields = kept + payload_fields
                existing["fields"] = payload_fields
                if sections is not None:
                    existing["sections"] = payload_sections
            return _dump(await client.update_item(vault_id, existing))
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("update item", exc)


async def delete_item(context: ConnectorContext, vault_id: str, item_id: str) -> str:
    try:
        async with await build_client(context) as client:
            await client.delete_item(vault_id, item_id)
    except (httpx.HTTPError, OnePasswordAPIError) as exc:
        return _failure("delete item", exc)
    return "Item deleted successfully"


LIST_VAULTS = ToolDefinition("1password_list_vaults", "List all accessible 1Password vaults", list_vaults, True)
GET_VAULT = ToolDefinition("1password_get_vault", "Get details of a specific vault", get_vault, True)
LIST_ITEMS = ToolDefinition("1password_list_items", "List all items in a vault", list_items, True)
GET_ITEM = ToolDefinition(
    "1password_get_item", "Get details of a specific item including its fields", get_item, True
)
SEARCH_ITEMS = ToolDefinition(
    "1password_search_items", "Search for items in a vault by title or field labels", search_items, True
)
CREATE_ITEM = ToolDefinition("1password_create_item", "Create a new item in a vault", create_item)
UPDATE_ITEM = ToolDefinition("1password_update_item", "Update an existing item in a vault", update_item)
DELETE_ITEM = ToolDefinition("1password_delete_item", "Delete an item from a vault", delete_item)

VaultId = Annotated[str, Field(description="The ID of the vault")]
ItemId = Annotated[str, Field(description="The ID of the item")]


def register_tools(mcp: FastMCP, context: ConnectorContext) -> None:
    """Bind every 1Password tool to ``mcp`` with ``context`` captured."""

    @mcp.tool(name=LIST_VAULTS.name, description=LIST_VAULTS.description, annotations=LIST_VAULTS.annotations)
    async def onepassword_list_vaults() -> str:
        return await run_tool(context, LIST_VAULTS)

    @mcp.tool(name=GET_VAULT.name, description=GET_VAULT.description, annotations=GET_VAULT.annotations)
    async def onepassword_get_vault(vault_id: VaultId) -> str:
        return await run_tool(context, GET_VAULT, vault_id=vault_id)

    @mcp.tool(name=LIST_ITEMS.name, description=LIST_ITEMS.description, annotations=LIST_ITEMS.annotations)
    async def onepassword_list_items(vault_id: VaultId) -> str:
        return await run_tool(context, LIST_ITEMS, vault_id=vault_id)

    @mcp.tool(name=GET_ITEM.name, description=GET_ITEM.description, annotations=GET_ITEM.annotations)
    async def onepassword_get_item(vault_id: VaultId, item_id: ItemId) -> str:
        return await run_tool(context, GET_ITEM, vault_id=vault_id, item_id=item_id)

    @mcp.tool(name=SEARCH_ITEMS.name, description=SEARCH_ITEMS.description, annotations=SEARCH_ITEMS.annotations)
    async def onepassword_search_items(
        vault_id: VaultId,
        query: Annotated[str, Field(description="Search query to match against item titles and field labels")],
    ) -> str:
        return await run_tool(context, SEARCH_ITEMS, vault_id=vault_id, query=query)

    @mcp.tool(name=CREATE_ITEM.name, description=CREATE_ITEM.description, annotations=CREATE_ITEM.annotations)
    async def onepassword_create_item(
        vault_id: VaultId,
        title: Annotated[str, Field(description="Title of the new item")],
        category: Annotated[str, Field(description="Category of the item (e.g., LOGIN, SECURE_NOTE, PASSWORD)")],
        fields: Annotated[list[ItemField] | None, Field(description="Fields for the item")] = None,
        sections: Annotated[list[ItemSection] | None, Field(description="Sections for organizing fields")] = None,
    ) -> str:
        return await run_tool(
            context,
            CREATE_ITEM,
            vault_id=vault_id,
            title=title,
            category=category,
            fields=fields,
            sections=sections,
        )

    @mcp.tool(name=UPDATE_ITEM.name, description=UPDATE_ITEM.description, annotations=UPDATE_ITEM.annotations)
    async def onepassword_update_item(
        vault_id: VaultId,
        item_id: ItemId,
        title: Annotated[str | None, Field(description="New title for the item")] = None,
        fields: Annotated[list[ItemField] | None, Field(description="Updated fields for the item")] = None,
        sections: Annotated[list[ItemSection] | None, Field(description="Updated sections")] = None,
    ) -> str:
        return await run_tool(
            context,
            UPDATE_ITEM,
            vault_id=vault_id,
            item_id=item_id,
            title=title,
            fields=fields,
            sections=sections,
        )

    @mcp.tool(name=DELETE_ITEM.name, description=DELETE_ITEM.description, annotations=DELETE_ITEM.annotations)
    async def onepassword_delete_item(vault_id: VaultId, item_id: ItemId) -> str:
        return await run_tool(context, DELETE_ITEM, vault_id=vault_id, item_id=item_id)


ONEPASSWORD_CONNECTOR = ConnectorConfig(
    name="1Password",
    key=CONNECTOR_KEY,
    version="1.0.0",
    logo="https://stackone-logos.com/api/1password/filled/svg",
    description="Manage 1Password vaults and items through a 1Password Connect server",
    credentials=OnePasswordCredentials,
    register=register_tools,
    tools=(LIST_VAULTS, GET_VAULT, LIST_ITEMS, GET_ITEM, SEARCH_ITEMS, CREATE_ITEM, UPDATE_ITEM, DELETE_ITEM),
    example_prompt=(
        "List all my vaults, search for login credentials in my Personal vault, "
        "and create a new secure note with my WiFi password."
    ),
)
