"""Package-manager command dialects, selected by lock file."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Dialect(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"


@dataclass(frozen=True)
class DialectCommands:
    rename: tuple[str, ...]  # followed by "name=<name>"
    install: tuple[str, ...]
    install_production: tuple[str, ...]
    build: tuple[str, ...]
    pack: tuple[str, ...]
    pack_filename: str | None = None  # fixed output name; else last stdout line


# Checked in order; the first lock file present wins.
LOCK_FILES: tuple[tuple[str, Dialect], ...] = (
    ("pnpm-lock.yaml", Dialect.PNPM),
    ("yarn.lock", Dialect.YARN),
    ("package-lock.json", Dialect.NPM),
    ("npm-shrinkwrap.json", Dialect.NPM),
)

COMMANDS: dict[Dialect, DialectCommands] = {
    Dialect.NPM: DialectCommands(
        rename=("npm", "pkg", "set"),
        install=("npm", "install"),
        install_production=("npm", "install", "--omit=dev"),
        build=("npm", "run", "build"),
        pack=("npm", "pack"),
    ),
    Dialect.PNPM: DialectCommands(
        rename=("pnpm", "pkg", "set"),
        install=("pnpm", "install"),
        install_production=("pnpm", "install", "--prod"),
        build=("pnpm", "run", "build"),
        pack=("pnpm", "pack"),
    ),
    Dialect.YARN: DialectCommands(
        # yarn has no `pkg` command; npm edits the manifest just the same
        rename=("npm", "pkg", "set"),
        install=("yarn", "install"),
        install_production=("yarn", "install", "--production"),
        build=("yarn", "run", "build"),
        pack=("yarn", "pack", "--filename", "package.tgz"),
        pack_filename="package.tgz",
    ),
}


def detect_dialect(directory: Path) -> Dialect:
    for marker, dialect in LOCK_FILES:
        if (directory / marker).is_file():
            return dialect
    return Dialect.NPM


def commands_for(dialect: Dialect) -> DialectCommands:
    return COMMANDS[dialect]
