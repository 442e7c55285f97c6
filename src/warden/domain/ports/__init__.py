"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import FieldValues, RemoteStore, StoreQuery

__all__ = ["FieldValues", "RemoteStore", "StoreQuery"]
