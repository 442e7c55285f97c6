"""Letta REST client for blocks and tools."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from warden.adapters.http_resilience import ResilientClient

from .schema import BlockPayload, ErrorPayload, ToolPayload

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from warden.config.http_resilience import ResilienceConfig
    from warden.config.letta import LettaConfig
    from warden.domain.ports import StoreQuery

log = getLogger(__name__)

BLOCKS_PATH = "blocks/"
TOOLS_PATH = "tools/"


class LettaAPIError(RuntimeError):
    """Raised when the Letta API rejects a request or returns an unexpected payload."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def query_params(query: StoreQuery) -> dict[str, str]:
    params: dict[str, str] = {}
    for key in ("label", "label_search", "name", "search"):
        value = getattr(query, key)
        if value is not None:
            params[key] = value
    if query.templates_only is not None:
        params["templates_only"] = "true" if query.templates_only else "false"
    if query.limit is not None:
        params["limit"] = str(query.limit)
    return params


class LettaClient:
    """Low-level async client; use as ``async with LettaClient(config=...) as client``.

    One underlying HTTP client (and its rate limiter) is shared by every
    call made inside the context.
    """

    def __init__(
        self,
        *,
        config: LettaConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or _default_client_factory
        self._http: ResilientClient | None = None

    async def __aenter__(self) -> LettaClient:
        self._http = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    # blocks

    async def list_blocks(self, query: StoreQuery) -> list[BlockPayload]:
        payload = await self._request("GET", BLOCKS_PATH, params=query_params(query))
        return [
            _validate(BlockPayload, item, BLOCKS_PATH) for item in _as_list(payload, BLOCKS_PATH)
        ]

    async def get_block(self, block_id: str) -> BlockPayload:
        path = f"{BLOCKS_PATH}{block_id}"
        return _validate(BlockPayload, await self._request("GET", path), path)

    async def create_block(self, body: dict[str, object]) -> BlockPayload:
        payload = await self._request("POST", BLOCKS_PATH, json=body)
        return _validate(BlockPayload, payload, BLOCKS_PATH)

    async def update_block(self, block_id: str, body: dict[str, object]) -> BlockPayload:
        path = f"{BLOCKS_PATH}{block_id}"
        return _validate(BlockPayload, await self._request("PATCH", path, json=body), path)

    async def delete_block(self, block_id: str) -> None:
        await self._request("DELETE", f"{BLOCKS_PATH}{block_id}")

    # tools

    async def list_tools(self, query: StoreQuery) -> list[ToolPayload]:
        payload = await self._request("GET", TOOLS_PATH, params=query_params(query))
        return [_validate(ToolPayload, item, TOOLS_PATH) for item in _as_list(payload, TOOLS_PATH)]

    async def get_tool(self, tool_id: str) -> ToolPayload:
        path = f"{TOOLS_PATH}{tool_id}"
        return _validate(ToolPayload, await self._request("GET", path), path)

    async def create_tool(self, body: dict[str, object]) -> ToolPayload:
        payload = await self._request("POST", TOOLS_PATH, json=body)
        return _validate(ToolPayload, payload, TOOLS_PATH)

    async def update_tool(self, tool_id: str, body: dict[str, object]) -> ToolPayload:
        path = f"{TOOLS_PATH}{tool_id}"
        return _validate(ToolPayload, await self._request("PATCH", path, json=body), path)

    async def delete_tool(self, tool_id: str) -> None:
        await self._request("DELETE", f"{TOOLS_PATH}{tool_id}")

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, object] | None = None,
    ) -> object:
        if self._http is None:
            raise LettaAPIError("LettaClient used outside of its async context")
        log.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._http.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            msg = f"{method} {path} failed with HTTP {status}: {_error_detail(exc.response)}"
            raise LettaAPIError(msg, status=status) from exc
        except httpx.HTTPError as exc:
            msg = f"{method} {path} failed: {exc}"
            raise LettaAPIError(msg) from exc

        if response.status_code == httpx.codes.NO_CONTENT or not response.content:
            return None
        return response.json()


def _as_list(payload: object, path: str) -> list[object]:
    if not isinstance(payload, list):
        raise LettaAPIError(f"Unexpected Letta response payload for {path}: expected a list")
    return payload


def _validate[T: BlockPayload | ToolPayload](model: type[T], payload: object, path: str) -> T:
    if not isinstance(payload, dict):
        raise LettaAPIError(f"Unexpected Letta response payload for {path}")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise LettaAPIError(f"Malformed Letta response for {path}: {exc}") from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        error = ErrorPayload.model_validate(response.json())
    except (ValueError, PydanticValidationError):
        return response.text[:200] or response.reason_phrase
    return str(error.detail) if error.detail is not None else response.reason_phrase
