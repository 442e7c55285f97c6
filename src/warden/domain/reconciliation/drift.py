"""Field-level drift between one manifest entry and its remote entity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from warden.domain.model.metadata import PACKAGE_VERSION_KEY, is_managed

if TYPE_CHECKING:
    from warden.domain.model import ManifestEntry, RemoteEntity

    from .kinds.base import ResourceAdapter


class DriftKind(StrEnum):
    CONTENT = "content"
    METADATA = "metadata"


@dataclass(frozen=True, slots=True)
class Drift:
    field: str
    actual: object
    desired: object
    kind: DriftKind = DriftKind.CONTENT


def compute_drift[E: ManifestEntry, R: RemoteEntity](
    desired: E,
    actual: R,
    *,
    adapter: ResourceAdapter[E, R],
    package_version: str | None = None,
) -> list[Drift]:
    """Return the differences that must be corrected, in a fixed field order.

    Content fields are compared by the kind's adapter. Optional fields the
    entry leaves unset never drift. When ``package_version`` is given and the
    entity is managed, a stale stamp is reported as a trailing metadata drift
    even if all content matches.
    """

    drifts = list(adapter.compare_fields(desired, actual))

    if package_version is not None and is_managed(actual.metadata):
        recorded = actual.metadata.get(PACKAGE_VERSION_KEY)
        if recorded != package_version:
            drifts.append(
                Drift(
                    field=PACKAGE_VERSION_KEY,
                    actual=recorded,
                    desired=package_version,
                    kind=DriftKind.METADATA,
                )
            )

    return drifts


def text_differs(desired: str | None, actual: str | None) -> bool:
    """Compare optional text where absent and empty mean the same thing."""

    return (desired or "") != (actual or "")
