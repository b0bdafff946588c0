"""Repository access and reference resolution."""

from .git import GitRepository
from .refs import current_reference, highest_version_reference, is_descendant, resolve_reference

__all__ = [
    "GitRepository",
    "current_reference",
    "highest_version_reference",
    "is_descendant",
    "resolve_reference",
]
