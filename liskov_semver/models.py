"""Data model shared across the engine stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

RefKind = Literal["tag", "branch"]
Role = Literal["previous", "current"]
DecisionReason = Literal["initial", "unchanged", "computed"]


@dataclass(frozen=True)
class Reference:
    """A named pointer into history plus the commit it resolves to."""

    name: str
    kind: RefKind
    commit: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Artifact:
    """A built and packed revision of the package."""

    role: Role
    reference: Reference
    entry_points: tuple[str, ...]  # sorted, "" is the root entry
    version: str | None  # normalized, None when the manifest omits it
    archive: Path

    @property
    def package_name(self) -> str:
        return synthetic_package_name(self.role)


@dataclass(frozen=True)
class WitnessPair:
    """The two synthesized substitution programs."""

    forward_fits: str  # current assigned to the type of previous
    backward_fits: str  # previous assigned to the type of current

    FORWARD_FILE = "currentFitsPrevious.ts"
    BACKWARD_FILE = "previousFitsCurrent.ts"


@dataclass(frozen=True)
class CompatibilityResult:
    forwards_ok: bool  # current can stand in for previous
    backwards_ok: bool  # previous can stand in for current


@dataclass(frozen=True)
class Decision:
    version: str
    reason: DecisionReason
    previous: Reference | None = None
    current: Reference | None = None
    compatibility: CompatibilityResult | None = None


def synthetic_package_name(role: Role) -> str:
    return f"liskov-semver-{role}"
