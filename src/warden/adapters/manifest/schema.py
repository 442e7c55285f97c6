"""Pydantic models for manifest documents.

Documents follow a Kubernetes-like envelope::

    apiVersion: letta.ai/v1
    kind: Block
    metadata: {name: ..., description: ..., annotations: {sourcePath: ...}}
    spec: {layer: ..., ...}

Spec fields use camelCase in YAML; unknown spec fields are ignored.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

from warden.domain.model import Layer, SourceType, TemplateEnvironment


class ManifestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ResourceMetadataDoc(ManifestModel):
    name: str = Field(min_length=1)
    description: str | None = None
    annotations: dict[str, Any] = Field(default_factory=dict)

    @property
    def source_path(self) -> str | None:
        value = self.annotations.get("sourcePath")
        return value if isinstance(value, str) else None


class ResourceDocument(ManifestModel):
    """Envelope shared by every kind; ``spec`` is validated per kind afterwards."""

    api_version: Literal["letta.ai/v1"] = Field(alias="apiVersion")
    kind: str
    metadata: ResourceMetadataDoc
    spec: dict[str, Any] = Field(default_factory=dict)


class ScopedSpec(ManifestModel):
    layer: Layer
    org: str | None = None
    project: str | None = None


class BlockSpecDoc(ScopedSpec):
    label: str = Field(min_length=1)
    value: str
    limit: PositiveInt | None = None


class ToolSpecDoc(ScopedSpec):
    source_type: SourceType = Field(default=SourceType.PYTHON, alias="sourceType")
    source_code: str = Field(min_length=1, alias="sourceCode")
    json_schema: dict[str, Any] = Field(alias="jsonSchema")
    tool_type: str | None = Field(default=None, alias="toolType")
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _function_schema(self) -> ToolSpecDoc:
        if self.json_schema.get("type", "function") != "function":
            raise ValueError("jsonSchema.type must be 'function'")
        return self

    @property
    def function_name(self) -> str | None:
        function = self.json_schema.get("function")
        if isinstance(function, dict):
            name = function.get("name")
            return name if isinstance(name, str) else None
        name = self.json_schema.get("name")
        return name if isinstance(name, str) else None


class TemplateSpecDoc(ScopedSpec):
    layer: Layer = Layer.PROJECT
    template_name: str | None = Field(default=None, alias="templateName")
    label: str = Field(min_length=1)
    value: str
    limit: PositiveInt | None = None
    deployment_id: str = Field(min_length=1, alias="deploymentId")
    entity_id: str | None = Field(default=None, alias="entityId")
    project_id: str | None = Field(default=None, alias="projectId")
    version: str | None = None
    environment: TemplateEnvironment | None = None
