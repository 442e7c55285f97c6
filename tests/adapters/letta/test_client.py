from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from warden.adapters.http_resilience import ResilienceConfig, ResilientClient
from warden.adapters.letta import (
    LettaAPIError,
    LettaBlockStore,
    LettaClient,
    LettaTemplateStore,
    LettaToolStore,
)
from warden.config import LettaConfig, RetryPolicy
from warden.domain.ports import StoreQuery

BASE_URL = "https://letta.test/v1"

BLOCK_PAYLOAD = {
    "id": "block-1",
    "label": "project",
    "value": "Hello",
    "limit": 5000,
    "description": None,
    "metadata": {"managed_by": "warden", "layer": "base"},
    "is_template": False,
    "created_at": "2025-01-01T00:00:00Z",
    "updated_at": "2025-01-02T00:00:00",
}


def _config() -> LettaConfig:
    resilience = ResilienceConfig(
        name="letta-test",
        base_url=BASE_URL,
        retry=RetryPolicy(total=0),
        default_headers={"Authorization": "Bearer test-key"},
    )
    return LettaConfig(api_key="test-key", base_url="https://letta.test", resilience=resilience)


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=resilience.base_url or "",
            headers=dict(resilience.default_headers or {}),
            transport=httpx.MockTransport(async_handler),
        )
        return client

    return factory


def _run[T](
    handler: Callable[[httpx.Request], httpx.Response],
    action: Callable[[LettaClient], object],
) -> T:
    async def scenario() -> T:
        factory = _make_client_factory(handler)
        async with LettaClient(config=_config(), client_factory=factory) as client:
            return await action(client)  # type: ignore[misc]

    return asyncio.run(scenario())


def test_list_blocks_sends_query_params_and_parses_entities() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        template = {**BLOCK_PAYLOAD, "id": "t", "is_template": True}
        return httpx.Response(200, json=[BLOCK_PAYLOAD, template])

    query = StoreQuery(label="project", limit=10)
    blocks = _run(handler, lambda client: LettaBlockStore(client).list(query))

    request = seen[0]
    assert request.url.path == "/v1/blocks/"
    assert request.url.params["label"] == "project"
    assert request.url.params["limit"] == "10"
    assert request.headers["Authorization"] == "Bearer test-key"
    assert [block.id for block in blocks] == ["block-1"]  # type: ignore[attr-defined]
    assert blocks[0].metadata["managed_by"] == "warden"  # type: ignore[index]
    assert blocks[0].updated_at.tzinfo is not None  # type: ignore[index]


def test_template_store_marks_created_blocks_as_templates() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={**BLOCK_PAYLOAD, "is_template": True, "template_name": "welcome"},
        )

    created = _run(
        handler,
        lambda client: LettaTemplateStore(client).create(
            {"template_name": "welcome", "label": "persona", "value": "Hi", "metadata": {}}
        ),
    )

    assert bodies[0]["is_template"] is True
    assert bodies[0]["template_name"] == "welcome"
    assert created.template_name == "welcome"  # type: ignore[attr-defined]


def test_tool_store_encodes_metadata_as_tags() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        bodies.append(body)
        echoed = {"id": "tool-1", "name": body["name"], "tags": body["tags"]}
        return httpx.Response(200, json=echoed)

    created = _run(
        handler,
        lambda client: LettaToolStore(client).create(
            {
                "name": "search_docs",
                "source_code": "def search_docs():\n    pass\n",
                "json_schema": {"name": "search_docs"},
                "tags": ["docs"],
                "metadata": {"managed_by": "warden", "layer": "org", "org": "acme"},
            }
        ),
    )

    assert bodies[0]["tags"] == ["docs", "managed_by:warden", "layer:org", "org:acme"]
    assert "metadata" not in bodies[0]
    assert created.tags == ("docs",)  # type: ignore[attr-defined]
    expected = {"managed_by": "warden", "layer": "org", "org": "acme"}
    assert created.metadata == expected  # type: ignore[attr-defined]


def test_tool_metadata_update_keeps_user_tags() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(
                200, json={"id": "tool-1", "name": "t", "tags": ["docs", "managed_by:warden"]}
            )
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": "tool-1", "name": "t", "tags": body["tags"]})

    _run(
        handler,
        lambda client: LettaToolStore(client).update(
            "tool-1", {"metadata": {"managed_by": "warden", "layer": "base"}}
        ),
    )

    patch = requests[-1]
    assert patch.method == "PATCH"
    assert json.loads(patch.content)["tags"] == ["docs", "managed_by:warden", "layer:base"]


def test_http_errors_become_letta_api_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"detail": "label too long"})

    with pytest.raises(LettaAPIError) as excinfo:
        _run(handler, lambda client: LettaBlockStore(client).create({"label": "x", "value": "y"}))

    assert excinfo.value.status == 422
    assert "label too long" in str(excinfo.value)


def test_delete_accepts_empty_response() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    _run(handler, lambda client: LettaBlockStore(client).delete("block-1"))

    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/v1/blocks/block-1"


def test_unexpected_list_payload_is_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"items": []})

    with pytest.raises(LettaAPIError, match="expected a list"):
        _run(handler, lambda client: client.list_tools(StoreQuery(search="managed_by:warden")))


def test_client_requires_context() -> None:
    client = LettaClient(config=_config())

    with pytest.raises(LettaAPIError, match="outside of its async context"):
        asyncio.run(client.get_block("block-1"))
