from __future__ import annotations

import asyncio

from warden.domain.model import RemoteBlock, RemoteTemplate, RemoteTool
from warden.domain.ports import StoreQuery
from warden.domain.reconciliation import (
    BlockAdapter,
    TemplateAdapter,
    ToolAdapter,
    discover_candidates,
)

from tests.support.stores import MANAGED, InMemoryStore, block, template, tool


def test_block_discovery_merges_queries_without_duplicates() -> None:
    store = InMemoryStore(
        RemoteBlock,
        [block("project"), block("base_style"), block("my_notes"), block("custom_label")],
    )

    found = asyncio.run(
        discover_candidates(store, adapter=BlockAdapter(), desired_names={"custom_label"})
    )

    assert sorted(entity.label for entity in found) == ["base_style", "custom_label", "project"]
    assert len({entity.id for entity in found}) == len(found)


def test_block_queries_cover_prefixes_and_canonical_labels() -> None:
    queries = BlockAdapter().candidate_queries(set())

    prefixes = {q.label_search for q in queries if q.label_search is not None}
    labels = {q.label for q in queries if q.label is not None}
    assert prefixes == {"base_", "org_", "project_", "user_", "lane_"}
    assert "managed_state" in labels
    assert all(q.limit == 100 for q in queries if q.label_search is not None)


def test_tool_discovery_finds_managed_and_named_tools() -> None:
    store = InMemoryStore(
        RemoteTool,
        [
            tool("managed_one", metadata=MANAGED),
            tool("wanted"),
            tool("unrelated"),
        ],
    )

    found = asyncio.run(discover_candidates(store, adapter=ToolAdapter(), desired_names={"wanted"}))

    assert [entity.name for entity in found] == ["managed_one", "wanted"]
    assert ("list", StoreQuery(name="wanted", limit=10)) in store.calls


def test_template_discovery_is_scoped_to_deployment() -> None:
    store = InMemoryStore(
        RemoteTemplate,
        [
            template("mine", metadata={**MANAGED, "deployment_id": "dep-1"}),
            template("other", metadata={**MANAGED, "deployment_id": "dep-2"}),
        ],
    )

    found = asyncio.run(
        discover_candidates(
            store, adapter=TemplateAdapter(deployment_id="dep-1"), desired_names=set()
        )
    )

    assert [entity.template_name for entity in found] == ["mine"]
