"""Custom tools: identifier naming and source/schema comparison.

Tools carry no free-form metadata remotely, so management keys travel as
``key:value`` tags. The store adapter splits them back out; the entity's
``tags`` only ever hold user tags.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from warden.domain.model import RemoteTool, ResourceKind, ToolEntry
from warden.domain.model.metadata import (
    ADOPTED_AT_KEY,
    LAST_SYNCED_KEY,
    LAYER_KEY,
    MANAGED_BY,
    MANAGED_BY_KEY,
    ORG_KEY,
    ORIGINAL_LABEL_KEY,
    PACKAGE_VERSION_KEY,
    PROJECT_KEY,
    SOURCE_PATH_KEY,
)
from warden.domain.ports import StoreQuery

from ..drift import Drift, text_differs
from ..errors import ValidationError
from ..plan import FieldChange
from .base import preview, scope_metadata, validate_scope

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence, Set

TOOL_NAME_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Metadata keys that round-trip through tags, in encoding order.
TAG_ENCODED_KEYS: Final[tuple[str, ...]] = (
    MANAGED_BY_KEY,
    LAYER_KEY,
    ORG_KEY,
    PROJECT_KEY,
    PACKAGE_VERSION_KEY,
    LAST_SYNCED_KEY,
    SOURCE_PATH_KEY,
    ADOPTED_AT_KEY,
    ORIGINAL_LABEL_KEY,
)


def is_management_tag(tag: str) -> bool:
    key, sep, _ = tag.partition(":")
    return bool(sep) and key in TAG_ENCODED_KEYS


def user_tags(tags: Iterable[str]) -> tuple[str, ...]:
    return tuple(tag for tag in tags if not is_management_tag(tag))


@dataclass(frozen=True, slots=True)
class ToolAdapter:
    managed_query_limit: int = 100
    name_query_limit: int = 10

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.TOOL

    @property
    def noun(self) -> str:
        return "Tool"

    def name_of(self, entity: RemoteTool) -> str:
        return entity.name

    def matches_convention(self, name: str) -> bool:
        return TOOL_NAME_PATTERN.fullmatch(name) is not None

    def in_scope(self, entity: RemoteTool) -> bool:  # noqa: ARG002
        return True

    def for_manifest(self, entries: Sequence[ToolEntry]) -> ToolAdapter:  # noqa: ARG002
        return self

    def validate(self, entry: ToolEntry) -> None:
        subject = f"Tool '{entry.name}'"
        if not self.matches_convention(entry.name):
            msg = f"{subject}: name must be a valid identifier"
            raise ValidationError(msg)
        if not entry.source_code.strip():
            msg = f"{subject}: source code is empty"
            raise ValidationError(msg)
        validate_scope(entry.layer, org=entry.org, project=entry.project, subject=subject)

    def build_metadata(
        self,
        entry: ToolEntry,
        *,
        package_version: str | None,
        synced_at: str,
    ) -> dict[str, object]:
        return scope_metadata(
            layer=entry.layer,
            org=entry.org,
            project=entry.project,
            description=None,
            source_path=entry.source_path,
            package_version=package_version,
            synced_at=synced_at,
        )

    def compare_fields(self, entry: ToolEntry, entity: RemoteTool) -> list[Drift]:
        drifts: list[Drift] = []
        if text_differs(entry.source_code, entity.source_code):
            drifts.append(Drift("source_code", entity.source_code, entry.source_code))
        if text_differs(entry.description, entity.description):
            drifts.append(Drift("description", entity.description, entry.description or ""))
        if dict(entry.json_schema) != dict(entity.json_schema):
            drifts.append(Drift("json_schema", dict(entity.json_schema), dict(entry.json_schema)))
        desired_tags = user_tags(entry.tags)
        if set(desired_tags) != set(user_tags(entity.tags)):
            drifts.append(Drift("tags", sorted(entity.tags), sorted(desired_tags)))
        if entry.tool_type is not None and entry.tool_type != entity.tool_type:
            drifts.append(Drift("tool_type", entity.tool_type, entry.tool_type))
        return drifts

    def describe_create(self, entry: ToolEntry) -> tuple[FieldChange, ...]:
        changes = [
            FieldChange(field="name", new_value=entry.name),
            FieldChange(field="source_type", new_value=str(entry.source_type)),
            FieldChange(field="source_code", new_value=preview(entry.source_code)),
        ]
        if entry.description is not None:
            changes.append(FieldChange(field="description", new_value=entry.description))
        if entry.tags:
            changes.append(FieldChange(field="tags", new_value=sorted(user_tags(entry.tags))))
        return tuple(changes)

    def create_spec(self, entry: ToolEntry, metadata: dict[str, object]) -> dict[str, object]:
        spec: dict[str, object] = {
            "name": entry.name,
            "source_type": str(entry.source_type),
            "source_code": entry.source_code,
            "json_schema": dict(entry.json_schema),
            "tags": list(user_tags(entry.tags)),
            "metadata": metadata,
        }
        if entry.description is not None:
            spec["description"] = entry.description
        if entry.tool_type is not None:
            spec["tool_type"] = entry.tool_type
        return spec

    def content_patch(self, entry: ToolEntry, entity: RemoteTool) -> dict[str, object]:
        patch: dict[str, object] = {}
        for drift in self.compare_fields(entry, entity):
            patch[drift.field] = drift.desired
        return patch

    def candidate_queries(self, desired_names: Set[str]) -> tuple[StoreQuery, ...]:
        managed = StoreQuery(
            search=f"{MANAGED_BY_KEY}:{MANAGED_BY}",
            limit=self.managed_query_limit,
        )
        by_name = [
            StoreQuery(name=name, limit=self.name_query_limit) for name in sorted(desired_names)
        ]
        return (managed, *by_name)
