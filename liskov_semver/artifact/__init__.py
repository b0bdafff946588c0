"""Artifact production: manifest reading, package-manager dialects, packing."""

from .dialects import Dialect, commands_for, detect_dialect
from .manifest import declared_version, entry_points, load_manifest, write_version
from .pipeline import PackagingPipeline

__all__ = [
    "Dialect",
    "PackagingPipeline",
    "commands_for",
    "declared_version",
    "detect_dialect",
    "entry_points",
    "load_manifest",
    "write_version",
]
