"""
package.json reading: entry points and declared version.

Entry points are the importable module paths that carry type declarations.
The root entry point is the empty string.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..errors import MalformedManifestError
from ..versioning import parse_version

MANIFEST_NAME = "package.json"

ROOT_ENTRY = ""


def load_manifest(path: Path) -> dict[str, Any]:
    """Read and parse a package.json file; it must hold a JSON object."""
    if not path.is_file():
        raise MalformedManifestError(f"no {MANIFEST_NAME} found at {path}")
    return parse_manifest(path.read_text(encoding="utf-8"), str(path))


def parse_manifest(text: str, source: str = MANIFEST_NAME) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedManifestError(f"malformed {source}: {e}") from e
    if not isinstance(data, dict):
        raise MalformedManifestError(f"malformed {source}: not an object")
    return data


def normalize_entry(key: str) -> str | None:
    """Map an export-map key to an entry-point name; None if not importable."""
    if "*" in key:
        return None
    if key in (".", "./"):
        return ROOT_ENTRY
    if key.startswith("./"):
        key = key[2:]
    return key.strip("/")


def entry_points(manifest: dict[str, Any]) -> tuple[str, ...]:
    """Return the sorted entry points of a manifest, never empty."""
    found: set[str] = set()

    if "types" in manifest or "typings" in manifest:
        found.add(ROOT_ENTRY)

    exports = manifest.get("exports")
    if isinstance(exports, dict) and exports:
        if any(str(key).startswith(".") for key in exports):
            for key, value in exports.items():
                if isinstance(value, dict) and "types" in value:
                    entry = normalize_entry(str(key))
                    if entry is not None:
                        found.add(entry)
        elif "types" in exports:
            # Condition map: describes the root only.
            found.add(ROOT_ENTRY)

    if not found:
        found.add(ROOT_ENTRY)
    return tuple(sorted(found))


def declared_version(manifest: dict[str, Any], source: str = MANIFEST_NAME) -> str | None:
    """Return the normalized declared version, None if absent."""
    raw = manifest.get("version")
    if raw is None:
        return None
    version = parse_version(raw) if isinstance(raw, str) else None
    if version is None:
        raise MalformedManifestError(f"invalid version {raw!r} in {source}")
    return str(version)


def has_script(manifest: dict[str, Any], name: str) -> bool:
    scripts = manifest.get("scripts")
    return isinstance(scripts, dict) and bool(scripts.get(name))


def write_version(path: Path, version: str) -> None:
    """Persist `version` into the manifest at `path`, keeping key order."""
    data = load_manifest(path)
    data["version"] = version
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
