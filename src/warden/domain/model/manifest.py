"""Desired-state entries produced by the manifest loader."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .enums import Layer, SourceType, TemplateEnvironment


@dataclass(frozen=True, slots=True, kw_only=True)
class BlockEntry:
    """A memory block as declared in source control."""

    label: str
    value: str
    layer: Layer
    org: str | None = None
    project: str | None = None
    description: str | None = None
    limit: int | None = None
    source_path: str | None = None

    @property
    def name(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True, kw_only=True)
class ToolEntry:
    """A custom tool as declared in source control."""

    name: str
    source_code: str
    json_schema: Mapping[str, object]
    layer: Layer
    source_type: SourceType = SourceType.PYTHON
    org: str | None = None
    project: str | None = None
    description: str | None = None
    tool_type: str | None = None
    tags: tuple[str, ...] = ()
    source_path: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TemplateEntry:
    """A block template, grouped into a deployment."""

    template_name: str
    label: str
    value: str
    deployment_id: str
    layer: Layer = Layer.PROJECT
    limit: int | None = None
    description: str | None = None
    entity_id: str | None = None
    project_id: str | None = None
    version: str | None = None
    environment: TemplateEnvironment | None = None
    source_path: str | None = None

    @property
    def name(self) -> str:
        return self.template_name


type ManifestEntry = BlockEntry | ToolEntry | TemplateEntry
