"""Memory blocks: label conventions and field comparison."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from warden.domain.model import BlockEntry, Layer, RemoteBlock, ResourceKind
from warden.domain.ports import StoreQuery

from ..drift import Drift, text_differs
from ..errors import ValidationError
from ..plan import FieldChange
from .base import preview, scope_metadata, validate_scope

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence, Set

CANONICAL_LABELS: Final[frozenset[str]] = frozenset(
    {
        "project",
        "decisions",
        "conventions",
        "glossary",
        "human",
        "persona",
        "managed_state",
    }
)

LAYER_PREFIXES: Final[Mapping[Layer, str]] = MappingProxyType(
    {
        Layer.BASE: "base_",
        Layer.ORG: "org_",
        Layer.PROJECT: "project_",
        Layer.USER: "user_",
        Layer.LANE: "lane_",
    }
)


def is_conventional_label(label: str) -> bool:
    """Canonical labels and layer-prefixed labels follow the convention."""

    if label in CANONICAL_LABELS:
        return True
    return any(label.startswith(prefix) for prefix in LAYER_PREFIXES.values())


def infer_layer(label: str) -> Layer | None:
    for layer, prefix in LAYER_PREFIXES.items():
        if label.startswith(prefix):
            return layer
    return None


def expected_prefix(layer: Layer, *, org: str | None = None, project: str | None = None) -> str:
    match layer:
        case Layer.ORG:
            return f"org_{org}_" if org else "org_"
        case Layer.PROJECT:
            return f"project_{project}_" if project else "project_"
        case Layer.USER:
            return f"user_{org}_" if org else "user_"
        case Layer.BASE | Layer.LANE:
            return LAYER_PREFIXES[layer]


def validate_label_for_layer(
    label: str,
    layer: Layer,
    *,
    org: str | None = None,
    project: str | None = None,
) -> None:
    if label in CANONICAL_LABELS:
        return
    prefix = expected_prefix(layer, org=org, project=project)
    if not label.startswith(prefix):
        msg = (
            f"Block label '{label}' does not match layer '{layer}': "
            f"expected prefix '{prefix}' or a canonical label"
        )
        raise ValidationError(msg)


@dataclass(frozen=True, slots=True)
class BlockAdapter:
    canonical_query_limit: int = 10
    prefix_query_limit: int = 100

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.BLOCK

    @property
    def noun(self) -> str:
        return "Block"

    def name_of(self, entity: RemoteBlock) -> str:
        return entity.label

    def matches_convention(self, name: str) -> bool:
        return is_conventional_label(name)

    def in_scope(self, entity: RemoteBlock) -> bool:  # noqa: ARG002
        return True

    def for_manifest(self, entries: Sequence[BlockEntry]) -> BlockAdapter:  # noqa: ARG002
        return self

    def validate(self, entry: BlockEntry) -> None:
        subject = f"Block '{entry.label}'"
        validate_scope(entry.layer, org=entry.org, project=entry.project, subject=subject)
        validate_label_for_layer(entry.label, entry.layer, org=entry.org, project=entry.project)

    def build_metadata(
        self,
        entry: BlockEntry,
        *,
        package_version: str | None,
        synced_at: str,
    ) -> dict[str, object]:
        return scope_metadata(
            layer=entry.layer,
            org=entry.org,
            project=entry.project,
            description=entry.description,
            source_path=entry.source_path,
            package_version=package_version,
            synced_at=synced_at,
        )

    def compare_fields(self, entry: BlockEntry, entity: RemoteBlock) -> list[Drift]:
        drifts: list[Drift] = []
        if entry.value != entity.value:
            drifts.append(Drift("value", entity.value, entry.value))
        if text_differs(entry.description, entity.description):
            drifts.append(Drift("description", entity.description, entry.description or ""))
        if entry.limit is not None and entry.limit != entity.limit:
            drifts.append(Drift("limit", entity.limit, entry.limit))
        return drifts

    def describe_create(self, entry: BlockEntry) -> tuple[FieldChange, ...]:
        changes = [
            FieldChange(field="label", new_value=entry.label),
            FieldChange(field="value", new_value=preview(entry.value)),
        ]
        if entry.description is not None:
            changes.append(FieldChange(field="description", new_value=entry.description))
        if entry.limit is not None:
            changes.append(FieldChange(field="limit", new_value=entry.limit))
        return tuple(changes)

    def create_spec(self, entry: BlockEntry, metadata: dict[str, object]) -> dict[str, object]:
        spec: dict[str, object] = {
            "label": entry.label,
            "value": entry.value,
            "metadata": metadata,
        }
        if entry.description is not None:
            spec["description"] = entry.description
        if entry.limit is not None:
            spec["limit"] = entry.limit
        return spec

    def content_patch(self, entry: BlockEntry, entity: RemoteBlock) -> dict[str, object]:
        return {drift.field: drift.desired for drift in self.compare_fields(entry, entity)}

    def candidate_queries(self, desired_names: Set[str]) -> tuple[StoreQuery, ...]:
        prefix_queries = [
            StoreQuery(label_search=prefix, limit=self.prefix_query_limit)
            for prefix in LAYER_PREFIXES.values()
        ]
        label_queries = [
            StoreQuery(label=label, limit=self.canonical_query_limit)
            for label in sorted(CANONICAL_LABELS | set(desired_names))
            if infer_layer(label) is None
        ]
        return (*prefix_queries, *label_queries)
