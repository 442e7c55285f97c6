"""Manifest file adapter."""

from __future__ import annotations

from .loader import Manifest, ManifestError, load_manifest, load_manifest_file

__all__ = ["Manifest", "ManifestError", "load_manifest", "load_manifest_file"]
