"""Letta-backed implementations of the :class:`~warden.domain.ports.RemoteStore` port."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .translator import (
    block_body,
    parse_block,
    parse_template,
    parse_tool,
    template_body,
    tool_body,
)

if TYPE_CHECKING:
    from warden.domain.model import RemoteBlock, RemoteTemplate, RemoteTool
    from warden.domain.ports import FieldValues, StoreQuery

    from .client import LettaClient


class LettaBlockStore:
    """Plain (non-template) memory blocks."""

    def __init__(self, client: LettaClient) -> None:
        self._client = client

    async def list(self, query: StoreQuery) -> list[RemoteBlock]:
        payloads = await self._client.list_blocks(query)
        return [parse_block(payload) for payload in payloads if not payload.is_template]

    async def get(self, entity_id: str) -> RemoteBlock:
        return parse_block(await self._client.get_block(entity_id))

    async def create(self, spec: FieldValues) -> RemoteBlock:
        return parse_block(await self._client.create_block(block_body(spec)))

    async def update(self, entity_id: str, patch: FieldValues) -> RemoteBlock:
        return parse_block(await self._client.update_block(entity_id, block_body(patch)))

    async def delete(self, entity_id: str) -> None:
        await self._client.delete_block(entity_id)


class LettaTemplateStore:
    """Block templates; listed with ``templates_only``."""

    def __init__(self, client: LettaClient) -> None:
        self._client = client

    async def list(self, query: StoreQuery) -> list[RemoteTemplate]:
        payloads = await self._client.list_blocks(query)
        return [parse_template(payload) for payload in payloads if payload.is_template]

    async def get(self, entity_id: str) -> RemoteTemplate:
        return parse_template(await self._client.get_block(entity_id))

    async def create(self, spec: FieldValues) -> RemoteTemplate:
        return parse_template(await self._client.create_block(template_body(spec)))

    async def update(self, entity_id: str, patch: FieldValues) -> RemoteTemplate:
        return parse_template(await self._client.update_block(entity_id, dict(patch)))

    async def delete(self, entity_id: str) -> None:
        await self._client.delete_block(entity_id)


class LettaToolStore:
    """Custom tools. Management metadata is carried in tags."""

    def __init__(self, client: LettaClient) -> None:
        self._client = client

    async def list(self, query: StoreQuery) -> list[RemoteTool]:
        return [parse_tool(payload) for payload in await self._client.list_tools(query)]

    async def get(self, entity_id: str) -> RemoteTool:
        return parse_tool(await self._client.get_tool(entity_id))

    async def create(self, spec: FieldValues) -> RemoteTool:
        return parse_tool(await self._client.create_tool(tool_body(spec)))

    async def update(self, entity_id: str, patch: FieldValues) -> RemoteTool:
        body_source = dict(patch)
        if "metadata" not in patch and "tags" in patch:
            # keep existing management tags when only user tags change
            current = await self.get(entity_id)
            body_source["metadata"] = dict(current.metadata)
        current_tags: tuple[str, ...] = ()
        if "metadata" in patch and "tags" not in patch:
            current_tags = (await self.get(entity_id)).tags
        body = tool_body(body_source, current_tags=current_tags)
        return parse_tool(await self._client.update_tool(entity_id, body))

    async def delete(self, entity_id: str) -> None:
        await self._client.delete_tool(entity_id)
