"""Capability set each resource kind supplies to the generic engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from warden.domain.model import Layer
from warden.domain.model.metadata import (
    DESCRIPTION_KEY,
    LAST_SYNCED_KEY,
    LAYER_KEY,
    MANAGED_BY,
    MANAGED_BY_KEY,
    ORG_KEY,
    PACKAGE_VERSION_KEY,
    PROJECT_KEY,
    SOURCE_PATH_KEY,
)

from ..errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence, Set

    from warden.domain.model import ResourceKind
    from warden.domain.ports import FieldValues, StoreQuery

    from ..drift import Drift
    from ..plan import FieldChange


class ResourceAdapter[E, R](Protocol):
    """Kind-specific rules plugged into planning, discovery and execution."""

    @property
    def kind(self) -> ResourceKind: ...

    @property
    def noun(self) -> str:
        """Capitalised singular used in reasons and warnings."""
        ...

    def name_of(self, entity: R) -> str: ...

    def matches_convention(self, name: str) -> bool:
        """Whether an unmanaged entity with this name may be adopted."""
        ...

    def in_scope(self, entity: R) -> bool:
        """Whether a discovered candidate belongs to this reconciler run."""
        ...

    def for_manifest(self, entries: Sequence[E]) -> ResourceAdapter[E, R]:
        """This adapter with its scope narrowed to what ``entries`` declare."""
        ...

    def validate(self, entry: E) -> None:
        """Raise :class:`ValidationError` if ``entry`` breaks naming or scope rules."""
        ...

    def build_metadata(
        self,
        entry: E,
        *,
        package_version: str | None,
        synced_at: str,
    ) -> dict[str, object]: ...

    def compare_fields(self, entry: E, entity: R) -> list[Drift]: ...

    def describe_create(self, entry: E) -> tuple[FieldChange, ...]: ...

    def create_spec(self, entry: E, metadata: dict[str, object]) -> FieldValues: ...

    def content_patch(self, entry: E, entity: R) -> dict[str, object]:
        """Content fields of ``entity`` that differ from ``entry``."""
        ...

    def candidate_queries(self, desired_names: Set[str]) -> tuple[StoreQuery, ...]: ...


def validate_scope(
    layer: Layer,
    *,
    org: str | None,
    project: str | None,
    subject: str,
) -> None:
    """Scoped layers must name the scope they belong to."""

    if layer in {Layer.ORG, Layer.PROJECT, Layer.USER} and not org:
        msg = f"{subject}: layer '{layer}' requires an org"
        raise ValidationError(msg)
    if layer is Layer.PROJECT and not project:
        msg = f"{subject}: layer '{layer}' requires a project"
        raise ValidationError(msg)


def scope_metadata(  # noqa: PLR0913
    *,
    layer: Layer,
    org: str | None,
    project: str | None,
    description: str | None,
    source_path: str | None,
    package_version: str | None,
    synced_at: str,
) -> dict[str, object]:
    """Management keys shared by every kind. Unset optionals are omitted."""

    metadata: dict[str, object] = {MANAGED_BY_KEY: MANAGED_BY, LAYER_KEY: str(layer)}
    optional = {
        ORG_KEY: org,
        PROJECT_KEY: project,
        DESCRIPTION_KEY: description,
        SOURCE_PATH_KEY: source_path,
        PACKAGE_VERSION_KEY: package_version,
    }
    metadata.update({key: value for key, value in optional.items() if value is not None})
    metadata[LAST_SYNCED_KEY] = synced_at
    return metadata


def preview(value: object, *, width: int = 100) -> object:
    """Shorten long text for plan display; other values pass through."""

    if isinstance(value, str) and len(value) > width:
        return value[:width] + "..."
    return value
