from __future__ import annotations

from datetime import timedelta

import pytest

from warden.domain.model import parse_management
from warden.domain.reconciliation import (
    ActionType,
    BlockAdapter,
    Classification,
    Ownership,
    ReconciliationError,
    TemplateAdapter,
    ToolAdapter,
    build_plan,
)
from warden.domain.reconciliation import builder as builder_module

from tests.support.stores import (
    MANAGED,
    block,
    block_entry,
    template,
    template_entry,
    tool,
    tool_entry,
)

BLOCKS = BlockAdapter()


def _signature(plan: object) -> list[tuple[str, str, str | None]]:
    return [(a.type.value, a.name, a.remote_id) for a in plan.actions()]


def test_missing_entity_becomes_create() -> None:
    plan = build_plan([block_entry("project", "Hello")], [], adapter=BLOCKS)

    assert [a.name for a in plan.creates] == ["project"]
    assert plan.creates[0].type is ActionType.CREATE
    assert plan.summary.to_create == 1
    assert plan.has_changes
    assert {change.field for change in plan.creates[0].changes} >= {"label", "value"}


def test_managed_entity_with_changed_value_becomes_update() -> None:
    remote = block("project", "Old", metadata=MANAGED)

    plan = build_plan([block_entry("project", "New")], [remote], adapter=BLOCKS)

    assert len(plan.updates) == 1
    action = plan.updates[0]
    assert action.type is ActionType.UPDATE
    assert action.remote_id == remote.id
    assert [(c.field, c.old_value, c.new_value) for c in action.changes] == [
        ("value", "Old", "New")
    ]


def test_conventional_unmanaged_entity_becomes_adopt() -> None:
    plan = build_plan(
        [block_entry("project", "Hello")], [block("project", "Hello")], adapter=BLOCKS
    )

    assert len(plan.updates) == 1
    action = plan.updates[0]
    assert action.type is ActionType.ADOPT
    assert action.changes[0].field == "metadata"
    assert action.changes[0].old_value == "(none)"
    assert action.changes[0].new_value == "managed_by: warden"


def test_unconventional_unmanaged_entity_is_skipped_untouched() -> None:
    remote = block("my_notes", "theirs")

    plan = build_plan([block_entry("my_notes", "ours")], [remote], adapter=BLOCKS)

    assert plan.creates == []
    assert plan.updates == []
    assert len(plan.skipped) == 1
    assert "not managed" in plan.skipped[0].reason
    assert not plan.has_changes


def test_in_sync_entity_is_skipped() -> None:
    remote = block("project", "Hello", metadata=MANAGED)

    plan = build_plan([block_entry("project", "Hello")], [remote], adapter=BLOCKS)

    assert [a.type for a in plan.skipped] == [ActionType.SKIP]
    assert "in sync" in plan.skipped[0].reason
    assert plan.summary.unchanged == 1


def test_orphan_requires_allow_delete() -> None:
    orphan = block("base_old", metadata=MANAGED)

    kept = build_plan([], [orphan], adapter=BLOCKS)
    deleted = build_plan([], [orphan], adapter=BLOCKS, allow_delete=True)

    assert kept.deletes == []
    assert [a.name for a in kept.skipped] == ["base_old"]
    assert [a.remote_id for a in deleted.deletes] == [orphan.id]


def test_unmanaged_entities_are_never_deleted() -> None:
    entities = [block("my_notes"), block("org_acme_rules"), block("human")]

    plan = build_plan([], entities, adapter=BLOCKS, allow_delete=True)

    assert plan.deletes == []
    assert list(plan.actions()) == []


def test_plan_is_independent_of_input_order() -> None:
    entries = [block_entry("project", "a"), block_entry("human", "b"), block_entry("base_x")]
    entities = [
        block("project", "old", metadata=MANAGED),
        block("human"),
        block("base_gone", metadata=MANAGED),
    ]

    forward = build_plan(entries, entities, adapter=BLOCKS, allow_delete=True)
    backward = build_plan(
        list(reversed(entries)), list(reversed(entities)), adapter=BLOCKS, allow_delete=True
    )
    shuffled = build_plan(
        [entries[1], entries[2], entries[0]], entities, adapter=BLOCKS, allow_delete=True
    )

    for other in (backward, shuffled):
        assert sorted(_signature(forward)) == sorted(_signature(other))
        assert {a.name for a in forward.creates} == {a.name for a in other.creates}
        assert forward.summary == other.summary


def test_plan_is_deterministic_apart_from_identity() -> None:
    entries = [block_entry("project", "a"), block_entry("base_new")]
    entities = [block("project", "old", metadata=MANAGED)]

    first = build_plan(entries, entities, adapter=BLOCKS, package_version="v1")
    second = build_plan(entries, entities, adapter=BLOCKS, package_version="v1")

    assert list(first.actions()) == list(second.actions())
    assert first.plan_id != second.plan_id


def test_package_version_bump_updates_otherwise_synced_entity() -> None:
    remote = block("project", "Hello", metadata={**MANAGED, "package_version": "v1"})

    plan = build_plan(
        [block_entry("project", "Hello")], [remote], adapter=BLOCKS, package_version="v2"
    )

    assert [c.field for c in plan.updates[0].changes] == ["package_version"]


def test_remote_duplicates_prefer_newest_managed_entity_and_warn() -> None:
    stale = block("project", entity_id="b-1", metadata=MANAGED, updated_days=1)
    fresh = block("project", entity_id="b-2", metadata=MANAGED, updated_days=5)
    newest_unmanaged = block("project", entity_id="b-3", updated_days=9)

    plan = build_plan(
        [block_entry("project", "x")],
        [stale, newest_unmanaged, fresh],
        adapter=BLOCKS,
    )

    assert [a.remote_id for a in plan.updates] == ["b-2"]
    assert len(plan.warnings) == 1
    assert "b-2" in plan.warnings[0]


def test_remote_duplicates_without_management_pick_most_recent() -> None:
    older = block("project", entity_id="b-1")
    newer = block("project", entity_id="b-2", updated_days=2)

    plan = build_plan([block_entry("project")], [newer, older], adapter=BLOCKS)

    assert plan.updates[0].remote_id == "b-2"
    assert plan.updates[0].type is ActionType.ADOPT


def test_duplicate_manifest_entries_keep_the_later_one() -> None:
    plan = build_plan(
        [block_entry("project", "first"), block_entry("project", "second")],
        [],
        adapter=BLOCKS,
    )

    assert len(plan.creates) == 1
    assert plan.creates[0].entry.value == "second"  # type: ignore[union-attr]
    assert plan.warnings


def test_tool_plan_uses_tool_rules() -> None:
    remote = tool("search_docs", metadata=MANAGED)
    orphan = tool("old_tool", entity_id="t-old", metadata=MANAGED)

    plan = build_plan(
        [tool_entry("search_docs"), tool_entry("new_tool")],
        [remote, orphan],
        adapter=ToolAdapter(),
        allow_delete=True,
    )

    assert [a.name for a in plan.creates] == ["new_tool"]
    assert [a.name for a in plan.skipped] == ["search_docs"]
    assert [a.remote_id for a in plan.deletes] == ["t-old"]


def test_to_dict_uses_camel_case_summary() -> None:
    plan = build_plan([block_entry("project")], [], adapter=BLOCKS)

    payload = plan.to_dict()

    assert payload["kind"] == "block"
    assert payload["hasChanges"] is True
    assert payload["summary"] == {
        "toCreate": 1,
        "toUpdate": 0,
        "toDelete": 0,
        "unchanged": 0,
        "total": 1,
    }
    assert payload["planId"] == plan.plan_id
    assert payload["generatedAt"] == plan.generated_at.isoformat()
    assert plan.generated_at.utcoffset() == timedelta(0)


def test_templates_of_undeclared_deployments_are_left_alone() -> None:
    mine = template("old_mine", entity_id="t-mine", metadata={**MANAGED, "deployment_id": "dep-1"})
    other = template("other", entity_id="t-other", metadata={**MANAGED, "deployment_id": "dep-2"})

    plan = build_plan(
        [template_entry("welcome", deployment_id="dep-1")],
        [mine, other],
        adapter=TemplateAdapter(),
        allow_delete=True,
    )

    assert [(a.name, a.remote_id) for a in plan.deletes] == [("old_mine", "t-mine")]
    assert "other" not in {a.name for a in plan.actions()}


def test_impossible_classification_raises_reconciliation_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def always_orphaned(*_: object, **__: object) -> Classification:
        return Classification(
            ownership=Ownership.ORPHANED,
            info=parse_management(MANAGED),
            reason="forced",
        )

    monkeypatch.setattr(builder_module, "classify", always_orphaned)

    with pytest.raises(ReconciliationError, match="classified as orphaned"):
        build_plan(
            [block_entry("project", "Hello")],
            [block("project", "Hello", metadata=MANAGED)],
            adapter=BLOCKS,
        )
