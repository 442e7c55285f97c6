"""Block templates grouped by deployment.

Templates have no naming convention, so an unmanaged template is never
adopted. A run only sees templates of one deployment: the configured one,
or else the deployments the manifest declares.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Final

from warden.domain.model import RemoteTemplate, ResourceKind, TemplateEntry
from warden.domain.ports import StoreQuery

from ..drift import Drift, DriftKind, text_differs
from ..errors import ValidationError
from ..plan import FieldChange
from .base import preview, scope_metadata

if TYPE_CHECKING:
    from collections.abc import Sequence, Set

TEMPLATE_ENTITY_TYPE: Final[str] = "block"
DEPLOYMENT_ID_KEY: Final[str] = "deployment_id"
VERSION_KEY: Final[str] = "version"


@dataclass(frozen=True, slots=True)
class TemplateAdapter:
    deployment_id: str | None = None
    manifest_deployments: frozenset[str] | None = None
    query_limit: int = 100

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.TEMPLATE

    @property
    def noun(self) -> str:
        return "Template"

    def name_of(self, entity: RemoteTemplate) -> str:
        return entity.template_name

    def matches_convention(self, name: str) -> bool:  # noqa: ARG002
        return False

    def in_scope(self, entity: RemoteTemplate) -> bool:
        """Unscoped adapters accept every deployment; :meth:`for_manifest` scopes them."""
        deployment = entity.metadata.get(DEPLOYMENT_ID_KEY)
        if self.deployment_id is not None:
            return deployment == self.deployment_id
        if self.manifest_deployments is not None:
            return deployment in self.manifest_deployments
        return True

    def for_manifest(self, entries: Sequence[TemplateEntry]) -> TemplateAdapter:
        if self.deployment_id is not None or self.manifest_deployments is not None:
            return self
        return replace(
            self, manifest_deployments=frozenset(entry.deployment_id for entry in entries)
        )

    def validate(self, entry: TemplateEntry) -> None:
        subject = f"Template '{entry.template_name}'"
        if not entry.template_name.strip():
            msg = "Template name must not be empty"
            raise ValidationError(msg)
        if not entry.deployment_id.strip():
            msg = f"{subject}: deployment_id must not be empty"
            raise ValidationError(msg)
        if self.deployment_id is not None and entry.deployment_id != self.deployment_id:
            msg = (
                f"{subject}: deployment '{entry.deployment_id}' does not match "
                f"the reconciled deployment '{self.deployment_id}'"
            )
            raise ValidationError(msg)

    def build_metadata(
        self,
        entry: TemplateEntry,
        *,
        package_version: str | None,
        synced_at: str,
    ) -> dict[str, object]:
        metadata = scope_metadata(
            layer=entry.layer,
            org=None,
            project=None,
            description=entry.description,
            source_path=entry.source_path,
            package_version=package_version,
            synced_at=synced_at,
        )
        metadata["entity_type"] = TEMPLATE_ENTITY_TYPE
        metadata[DEPLOYMENT_ID_KEY] = entry.deployment_id
        optional = {
            "entity_id": entry.entity_id,
            "project_id": entry.project_id,
            VERSION_KEY: entry.version,
            "environment": str(entry.environment) if entry.environment else None,
        }
        metadata.update({key: value for key, value in optional.items() if value is not None})
        return metadata

    def compare_fields(self, entry: TemplateEntry, entity: RemoteTemplate) -> list[Drift]:
        drifts: list[Drift] = []
        if entry.value != entity.value:
            drifts.append(Drift("value", entity.value, entry.value))
        if entry.label != entity.label:
            drifts.append(Drift("label", entity.label, entry.label))
        if text_differs(entry.description, entity.description):
            drifts.append(Drift("description", entity.description, entry.description or ""))
        if entry.limit is not None and entry.limit != entity.limit:
            drifts.append(Drift("limit", entity.limit, entry.limit))
        recorded_version = entity.metadata.get(VERSION_KEY)
        if entry.version is not None and entry.version != recorded_version:
            drifts.append(Drift(VERSION_KEY, recorded_version, entry.version, DriftKind.METADATA))
        return drifts

    def describe_create(self, entry: TemplateEntry) -> tuple[FieldChange, ...]:
        changes = [
            FieldChange(field="template_name", new_value=entry.template_name),
            FieldChange(field="label", new_value=entry.label),
            FieldChange(field="value", new_value=preview(entry.value)),
            FieldChange(field="deployment_id", new_value=entry.deployment_id),
        ]
        if entry.version is not None:
            changes.append(FieldChange(field="version", new_value=entry.version))
        return tuple(changes)

    def create_spec(self, entry: TemplateEntry, metadata: dict[str, object]) -> dict[str, object]:
        spec: dict[str, object] = {
            "template_name": entry.template_name,
            "label": entry.label,
            "value": entry.value,
            "metadata": metadata,
        }
        if entry.description is not None:
            spec["description"] = entry.description
        if entry.limit is not None:
            spec["limit"] = entry.limit
        return spec

    def content_patch(self, entry: TemplateEntry, entity: RemoteTemplate) -> dict[str, object]:
        return {
            drift.field: drift.desired
            for drift in self.compare_fields(entry, entity)
            if drift.kind is DriftKind.CONTENT
        }

    def candidate_queries(self, desired_names: Set[str]) -> tuple[StoreQuery, ...]:  # noqa: ARG002
        return (StoreQuery(templates_only=True, limit=self.query_limit),)
