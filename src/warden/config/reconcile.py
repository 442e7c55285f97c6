"""Reconciliation defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var

DEFAULT_CONCURRENCY = 5


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    concurrency: int = DEFAULT_CONCURRENCY
    package_version: str | None = None


def get_reconcile_config() -> ReconcileConfig:
    return ReconcileConfig(
        concurrency=env_int("WARDEN_CONCURRENCY", default=DEFAULT_CONCURRENCY, minimum=1),
        package_version=optional_env_var("WARDEN_PACKAGE_VERSION"),
    )
