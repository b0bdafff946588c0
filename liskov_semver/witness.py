"""
Witness program synthesis.

A witness program imports every entry point of both artifacts, gathers each
artifact's namespaces into one aggregate object, and assigns one aggregate to
the declared type of the other. It type-checks if and only if the assigned
shape can substitute for the target shape.

Output depends only on the two entry-point tuples, so the same inputs always
produce byte-identical programs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from .models import Artifact, Role, WitnessPair, synthetic_package_name

ROOT_KEY = "."


def alias(role: Role, index: int) -> str:
    """Identifier bound to the namespace of one (artifact, entry point)."""
    return f"{role}_{index}"


def aggregate_key(entry: str) -> str:
    return ROOT_KEY if entry == "" else f"./{entry}"


def module_specifier(role: Role, entry: str) -> str:
    name = synthetic_package_name(role)
    return name if entry == "" else f"{name}/{entry}"


def _imports(role: Role, entries: Sequence[str]) -> list[str]:
    return [
        f"import * as {alias(role, i)} from {json.dumps(module_specifier(role, entry))};"
        for i, entry in enumerate(entries)
    ]


def _aggregate(role: Role, entries: Sequence[str]) -> str:
    fields = ", ".join(
        f"{json.dumps(aggregate_key(entry))}: {alias(role, i)}" for i, entry in enumerate(entries)
    )
    return f"const {role} = {{ {fields} }};"


def _assignment(target: Role, source: Role) -> str:
    return f"((_: typeof {target}): void => {{}})({source});"


def _common_source(previous_entries: Sequence[str], current_entries: Sequence[str]) -> list[str]:
    return [
        '"use strict";',
        "",
        *_imports("previous", previous_entries),
        "",
        *_imports("current", current_entries),
        "",
        _aggregate("previous", previous_entries),
        _aggregate("current", current_entries),
        "",
    ]


def build_witness_pair(previous_entries: Sequence[str], current_entries: Sequence[str]) -> WitnessPair:
    """Synthesize the forward and backward witness programs."""
    previous_entries = sorted(set(previous_entries)) or [""]
    current_entries = sorted(set(current_entries)) or [""]
    common = _common_source(previous_entries, current_entries)
    return WitnessPair(
        forward_fits="\n".join([*common, _assignment("previous", "current"), ""]),
        backward_fits="\n".join([*common, _assignment("current", "previous"), ""]),
    )


def workspace_manifest(previous: Artifact, current: Artifact) -> dict[str, Any]:
    """package.json for the comparison workspace: both archives as dependencies."""
    return {
        "name": "liskov-semver-workspace",
        "private": True,
        "dependencies": {
            previous.package_name: f"file:./{previous.archive.name}",
            current.package_name: f"file:./{current.archive.name}",
        },
    }


def write_workspace(scratch: Path, previous: Artifact, current: Artifact) -> WitnessPair:
    """Write the workspace manifest and both witness programs into `scratch`."""
    pair = build_witness_pair(previous.entry_points, current.entry_points)
    (scratch / "package.json").write_text(
        json.dumps(workspace_manifest(previous, current), indent=2) + "\n", encoding="utf-8"
    )
    (scratch / WitnessPair.FORWARD_FILE).write_text(pair.forward_fits, encoding="utf-8")
    (scratch / WitnessPair.BACKWARD_FILE).write_text(pair.backward_fits, encoding="utf-8")
    return pair
