"""Run settings, assembled by the CLI (options or LISKOV_SEMVER_* env vars)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

ENV_PREFIX = "LISKOV_SEMVER"


class TagPolicy(str, Enum):
    """Which tags are candidates for the previous version."""

    REACHABLE = "reachable"  # tags merged into the current reference
    ALL = "all"


@dataclass(frozen=True)
class Settings:
    error_on_dirty: bool = True
    error_on_unreachable: bool = True
    tag_policy: TagPolicy = TagPolicy.REACHABLE
    from_ref: str | None = None
    to_ref: str | None = None
    tsc: str = "tsc"
