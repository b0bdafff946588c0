"""Bump command implementation - compute, check, persist and report a version."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from ..artifact.manifest import MANIFEST_NAME, load_manifest, write_version
from ..config import Settings
from ..engine import Engine
from ..errors import LiskovSemverError, VersionCheckError
from ..models import Decision
from ..process import CommandRunner, SubprocessRunner
from ..repo.git import GitRepository
from ..versioning import parse_version

logger = logging.getLogger(__name__)


def run_bump(
    directory: Path,
    settings: Settings,
    *,
    expected: str | None = None,
    update: bool = False,
    tag: bool = False,
    silent: bool = False,
    runner: CommandRunner | None = None,
    console: Console | None = None,
) -> int:
    """Compute the next version for the package in `directory`.

    Args:
        directory: Directory containing package.json
        settings: Engine settings
        expected: Version the caller proposes; must not be lower than computed
        update: Write the version into package.json
        tag: Create a git tag for the version
        silent: Do not print the version
        runner: Command runner (defaults to SubprocessRunner)
        console: Console for error output (defaults to stderr)

    Returns:
        Exit code (0 = success, 1 = any failure)
    """
    console = console or Console(stderr=True)
    runner = runner or SubprocessRunner()
    directory = directory.resolve()

    try:
        repo = GitRepository.discover(directory, runner)
        load_manifest(directory / MANIFEST_NAME)
        decision = Engine(repo, directory, settings, runner).run()
        version = check_expected(decision.version, expected)

        if update:
            write_version(directory / MANIFEST_NAME, version)
            logger.info("Updated %s to %s", directory / MANIFEST_NAME, version)
        if tag:
            create_version_tag(repo, decision, version, settings)
    except LiskovSemverError as e:
        console.print(f"error: {escape(str(e))}", style="bold red", highlight=False, soft_wrap=True)
        return 1

    if not silent:
        click.echo(version)
    return 0


def check_expected(computed: str, expected: str | None) -> str:
    """Return the version to report, validating a caller-proposed one."""
    if expected is None:
        return computed
    proposed = parse_version(expected)
    if proposed is None or proposed < parse_version(computed):
        raise VersionCheckError(expected, computed)
    return str(proposed)


def create_version_tag(repo: GitRepository, decision: Decision, version: str, settings: Settings) -> None:
    target = parse_version(version)
    if any(parse_version(name) == target for name in repo.tags()):
        logger.info("Tag %s already exists, not tagging", version)
        return
    if decision.current is not None:
        commit = decision.current.commit
    else:
        commit = repo.resolve_commit(settings.to_ref or "HEAD") or "HEAD"
    repo.create_tag(version, commit)
