from __future__ import annotations

import pytest

from warden.domain.model import Layer
from warden.domain.reconciliation import TemplateAdapter, ToolAdapter, ValidationError
from warden.domain.reconciliation.kinds.blocks import (
    BlockAdapter,
    expected_prefix,
    infer_layer,
    is_conventional_label,
    validate_label_for_layer,
)
from warden.domain.reconciliation.kinds.tools import is_management_tag, user_tags

from tests.support.stores import block_entry, template, template_entry, tool_entry


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("project", True),
        ("managed_state", True),
        ("base_style", True),
        ("lane_review", True),
        ("projects", False),
        ("notes", False),
    ],
)
def test_conventional_labels(label: str, expected: bool) -> None:
    assert is_conventional_label(label) is expected


def test_infer_layer_from_prefix() -> None:
    assert infer_layer("org_acme_rules") is Layer.ORG
    assert infer_layer("user_acme_prefs") is Layer.USER
    assert infer_layer("project") is None


def test_expected_prefix_includes_scope() -> None:
    assert expected_prefix(Layer.ORG, org="acme") == "org_acme_"
    assert expected_prefix(Layer.PROJECT, project="web") == "project_web_"
    assert expected_prefix(Layer.USER, org="acme") == "user_acme_"
    assert expected_prefix(Layer.BASE) == "base_"


def test_canonical_labels_are_valid_in_any_layer() -> None:
    validate_label_for_layer("persona", Layer.PROJECT, project="web")


def test_label_must_match_layer_prefix() -> None:
    with pytest.raises(ValidationError, match="expected prefix 'org_acme_'"):
        validate_label_for_layer("org_other_rules", Layer.ORG, org="acme")


def test_project_layer_requires_org_and_project() -> None:
    adapter = BlockAdapter()

    with pytest.raises(ValidationError, match="requires an org"):
        adapter.validate(block_entry("project_web_notes", layer=Layer.PROJECT, project="web"))
    with pytest.raises(ValidationError, match="requires a project"):
        adapter.validate(block_entry("project_web_notes", layer=Layer.PROJECT, org="acme"))
    adapter.validate(
        block_entry("project_web_notes", layer=Layer.PROJECT, org="acme", project="web")
    )


def test_block_metadata_omits_unset_scope() -> None:
    metadata = BlockAdapter().build_metadata(
        block_entry("base_style"),
        package_version=None,
        synced_at="2025-01-01T00:00:00+00:00",
    )

    assert metadata == {
        "managed_by": "warden",
        "layer": "base",
        "last_synced": "2025-01-01T00:00:00+00:00",
    }


def test_tool_name_must_be_identifier() -> None:
    with pytest.raises(ValidationError, match="valid identifier"):
        ToolAdapter().validate(tool_entry("search-docs"))


def test_tool_source_must_not_be_blank() -> None:
    with pytest.raises(ValidationError, match="source code is empty"):
        ToolAdapter().validate(tool_entry("search_docs", "  \n"))


def test_management_tags_are_separated_from_user_tags() -> None:
    tags = ("docs", "managed_by:warden", "layer:base", "team:core")

    assert user_tags(tags) == ("docs", "team:core")
    assert is_management_tag("package_version:abc")
    assert not is_management_tag("package_version")


def test_tool_queries_search_sentinel_tag_and_names() -> None:
    queries = ToolAdapter().candidate_queries({"b_tool", "a_tool"})

    assert queries[0].search == "managed_by:warden"
    assert [q.name for q in queries[1:]] == ["a_tool", "b_tool"]


def test_template_deployment_must_match_adapter_scope() -> None:
    adapter = TemplateAdapter(deployment_id="dep-1")

    adapter.validate(template_entry("welcome"))
    with pytest.raises(ValidationError, match="does not match"):
        adapter.validate(template_entry("welcome", deployment_id="dep-2"))


def test_template_queries_use_templates_only() -> None:
    (query,) = TemplateAdapter().candidate_queries({"welcome"})

    assert query.templates_only is True
    assert query.limit == 100


def test_template_scope_follows_manifest_deployments() -> None:
    adapter = TemplateAdapter().for_manifest([template_entry("welcome", deployment_id="dep-1")])

    assert adapter.in_scope(template("welcome", metadata={"deployment_id": "dep-1"}))
    assert not adapter.in_scope(template("other", metadata={"deployment_id": "dep-2"}))
    assert not adapter.in_scope(template("bare"))


def test_configured_deployment_wins_over_manifest() -> None:
    adapter = TemplateAdapter(deployment_id="dep-1")

    assert adapter.for_manifest([template_entry("x", deployment_id="dep-2")]) is adapter


def test_block_and_tool_scope_is_unchanged_by_manifest() -> None:
    assert BlockAdapter().for_manifest([]) == BlockAdapter()
    assert ToolAdapter().for_manifest([]) == ToolAdapter()
