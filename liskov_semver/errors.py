"""
Shared exception types for liskov_semver.

Every failure the engine can report derives from LiskovSemverError; the CLI
turns any of them into a single stderr line and exit status 1.
"""

from __future__ import annotations


class LiskovSemverError(Exception):
    """Base exception; catch this for any package-raised error."""


class EnvironmentSetupError(LiskovSemverError):
    """The surroundings needed for a run are missing."""


class NotARepositoryError(EnvironmentSetupError):
    def __init__(self, path: str):
        super().__init__(f"cannot determine git root for {path}")
        self.path = path


class DetachedHeadError(EnvironmentSetupError):
    def __init__(self) -> None:
        super().__init__("no current branch (detached HEAD?), pass --to explicitly")


class ToolNotFoundError(EnvironmentSetupError):
    def __init__(self, program: str):
        super().__init__(f"cannot run '{program}': executable not found")
        self.program = program


class DirtyTreeError(LiskovSemverError):
    def __init__(self, root: str):
        super().__init__(f"dirty working tree in {root}")
        self.root = root


class UnreachableError(LiskovSemverError):
    def __init__(self, older: str, newer: str):
        super().__init__(f"'{newer}' is not reachable from '{older}'")
        self.older = older
        self.newer = newer


class InvalidReferenceError(LiskovSemverError):
    def __init__(self, name: str, role: str):
        super().__init__(f"not a valid \"{role}\" ref [{name}]")
        self.name = name
        self.role = role


class MalformedManifestError(LiskovSemverError):
    """package.json missing, unparsable, not an object, or with a bad version."""


class VersionCheckError(LiskovSemverError):
    def __init__(self, expected: str, computed: str):
        super().__init__(f"version {expected} is lower than the required {computed}")
        self.expected = expected
        self.computed = computed


class StageError(LiskovSemverError):
    """An external-process stage failed for a given reference."""

    stage = "stage"

    def __init__(self, reference: str, detail: str = ""):
        message = f"failed to {self.stage} {reference}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.reference = reference
        self.detail = detail


class CloneError(StageError):
    stage = "clone"


class InstallError(StageError):
    stage = "install"


class BuildError(StageError):
    stage = "build"


class PackError(StageError):
    stage = "pack"


class TagError(StageError):
    stage = "tag"


__all__ = [
    "BuildError",
    "CloneError",
    "DetachedHeadError",
    "DirtyTreeError",
    "EnvironmentSetupError",
    "InstallError",
    "InvalidReferenceError",
    "LiskovSemverError",
    "MalformedManifestError",
    "NotARepositoryError",
    "PackError",
    "StageError",
    "TagError",
    "ToolNotFoundError",
    "UnreachableError",
    "VersionCheckError",
]
