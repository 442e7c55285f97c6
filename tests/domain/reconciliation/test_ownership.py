from __future__ import annotations

from warden.domain.model import Layer
from warden.domain.reconciliation import BlockAdapter, TemplateAdapter, ToolAdapter
from warden.domain.reconciliation.ownership import Ownership, classify

from tests.support.stores import MANAGED, block, template, tool

BLOCKS = BlockAdapter()


def test_managed_and_declared_is_managed() -> None:
    result = classify(block("project", metadata=MANAGED), {"project"}, adapter=BLOCKS)

    assert result.ownership is Ownership.MANAGED
    assert result.info.is_managed
    assert result.info.layer is Layer.BASE


def test_managed_but_undeclared_is_orphaned() -> None:
    result = classify(block("base_old", metadata=MANAGED), {"project"}, adapter=BLOCKS)

    assert result.ownership is Ownership.ORPHANED


def test_conventional_name_without_metadata_is_adopted_when_declared() -> None:
    result = classify(block("project"), {"project"}, adapter=BLOCKS)

    assert result.ownership is Ownership.ADOPTED


def test_conventional_name_without_metadata_is_unmanaged_when_undeclared() -> None:
    result = classify(block("org_acme_rules"), {"project"}, adapter=BLOCKS)

    assert result.ownership is Ownership.UNMANAGED


def test_unconventional_name_is_unmanaged_even_when_declared() -> None:
    result = classify(block("my_notes"), {"my_notes"}, adapter=BLOCKS)

    assert result.ownership is Ownership.UNMANAGED


def test_foreign_manager_is_never_adopted() -> None:
    entity = block("project", metadata={"managed_by": "someone-else"})

    result = classify(entity, {"project"}, adapter=BLOCKS)

    assert result.ownership is Ownership.UNMANAGED
    assert "someone-else" in result.reason


def test_content_equality_does_not_affect_ownership() -> None:
    entity = block("my_notes", value="same")

    result = classify(entity, {"my_notes"}, adapter=BLOCKS)

    assert result.ownership is Ownership.UNMANAGED


def test_tool_identifier_names_are_adoptable() -> None:
    adapter = ToolAdapter()

    assert classify(tool("search_docs"), {"search_docs"}, adapter=adapter).ownership is (
        Ownership.ADOPTED
    )
    assert classify(tool("search-docs"), {"search-docs"}, adapter=adapter).ownership is (
        Ownership.UNMANAGED
    )


def test_templates_are_never_adopted() -> None:
    result = classify(template("welcome"), {"welcome"}, adapter=TemplateAdapter())

    assert result.ownership is Ownership.UNMANAGED
