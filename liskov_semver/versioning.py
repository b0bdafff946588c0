"""
SemVer helpers and the version decision table.

The decision is a pure function of the previous declared version, the
current declared version and the two substitution verdicts:

    forwards  backwards  previous major  bump
    ok        ok         any             patch
    ok        fail       any             minor
    fail      -          0               minor
    fail      -          >0              major

The result never drops below the version the current manifest already
declares.
"""

from __future__ import annotations

from typing import Literal

import semver

BumpKind = Literal["patch", "minor", "major"]

INITIAL_VERSION = "0.1.0"


def parse_version(text: str | None) -> semver.Version | None:
    """Parse a SemVer string, tolerating a leading 'v' or '='; None if invalid."""
    if text is None:
        return None
    candidate = str(text).strip()
    if candidate[:1] in ("v", "="):
        candidate = candidate[1:]
    if not semver.Version.is_valid(candidate):
        return None
    return semver.Version.parse(candidate)


def is_valid_version(text: str | None) -> bool:
    return parse_version(text) is not None


def increment(version: semver.Version, kind: BumpKind) -> semver.Version:
    """Bump `version`; a pre-release is first promoted to its own release."""
    if version.prerelease:
        if kind == "patch":
            return version.finalize_version()
        if kind == "minor" and version.patch == 0:
            return version.finalize_version()
        if kind == "major" and version.minor == 0 and version.patch == 0:
            return version.finalize_version()

    if kind == "major":
        return version.bump_major()
    if kind == "minor":
        return version.bump_minor()
    return version.bump_patch()


def latest(left: semver.Version, right: semver.Version | None) -> semver.Version:
    if right is None:
        return left
    return right if right > left else left


def bump_kind(previous: semver.Version, forwards_ok: bool, backwards_ok: bool) -> BumpKind:
    if forwards_ok:
        return "patch" if backwards_ok else "minor"
    # Major zero is pre-stable: breaking changes never promote past minor.
    return "minor" if previous.major == 0 else "major"


def decide_version(
    previous: str | semver.Version,
    current: str | semver.Version | None,
    forwards_ok: bool,
    backwards_ok: bool,
) -> str:
    """Return the version to report for a compared pair of revisions.

    Args:
        previous: Declared version of the previous revision (required)
        current: Declared version of the current revision, if any
        forwards_ok: Current can substitute for previous
        backwards_ok: Previous can substitute for current

    Returns:
        Normalized SemVer string
    """
    prev = _coerce(previous)
    if prev is None:
        raise ValueError(f"invalid previous version: {previous!r}")
    curr = _coerce(current) if current is not None else None
    if current is not None and curr is None:
        raise ValueError(f"invalid current version: {current!r}")

    bumped = increment(prev, bump_kind(prev, forwards_ok, backwards_ok))
    return str(latest(bumped, curr))


def _coerce(value: str | semver.Version | None) -> semver.Version | None:
    if isinstance(value, semver.Version):
        return value
    return parse_version(value)
