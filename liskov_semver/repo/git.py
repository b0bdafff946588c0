"""
Git repository collaborator.

All queries are read-only except `clone` (into a scratch directory) and
`create_tag`, which only the bump command uses after the engine is done.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import CloneError, NotARepositoryError, TagError
from ..process import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class GitRepository:
    """A local git working tree addressed by its root directory."""

    def __init__(self, root: Path, runner: CommandRunner):
        self.root = root
        self.runner = runner

    @classmethod
    def discover(cls, path: Path, runner: CommandRunner) -> GitRepository:
        """Find the repository containing `path`."""
        result = runner.run(["git", "rev-parse", "--show-toplevel"], cwd=path)
        root = result.stdout.strip()
        if not result.ok or not root:
            raise NotARepositoryError(str(path))
        return cls(Path(root).resolve(), runner)

    def _git(self, *args: str) -> CommandResult:
        return self.runner.run(["git", *args], cwd=self.root)

    def _lines(self, *args: str) -> list[str]:
        result = self._git(*args)
        if not result.ok:
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def tags(self, merged_into: str | None = None) -> list[str]:
        """List tags, optionally only those reachable from `merged_into`."""
        args = ["tag", "--list"]
        if merged_into is not None:
            args += ["--merged", merged_into]
        return sorted(set(self._lines(*args)))

    def branches(self) -> list[str]:
        return sorted(set(self._lines("branch", "--list", "--format=%(refname:short)")))

    def current_branch(self) -> str | None:
        result = self._git("branch", "--show-current")
        name = result.stdout.strip()
        return name if result.ok and name else None

    def resolve_commit(self, ref: str) -> str | None:
        result = self._git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        commit = result.stdout.strip()
        return commit if result.ok and commit else None

    def is_ancestor(self, older: str, newer: str) -> bool:
        return self._git("merge-base", "--is-ancestor", older, newer).ok

    def is_dirty(self) -> bool:
        result = self._git("status", "--porcelain")
        return not (result.ok and result.stdout.strip() == "")

    def show_file(self, ref: str, path: str) -> str | None:
        """Contents of `path` (relative to the root) at `ref`, or None."""
        result = self._git("show", f"{ref}:{path}")
        return result.stdout if result.ok else None

    # -------------------------------------------------------------------------
    # Effects
    # -------------------------------------------------------------------------

    def clone(self, ref: str, target: Path) -> None:
        """Shallow single-branch clone of `ref` (with submodules) into `target`."""
        logger.info("Cloning %s@%s into %s", self.root, ref, target)
        result = self.runner.run(
            [
                "git",
                "clone",
                "--branch",
                ref,
                "-c",
                "advice.detachedHead=false",
                "--depth",
                "1",
                "--single-branch",
                "--no-tags",
                "--recurse-submodules",
                "--shallow-submodules",
                "--",
                self.root.as_uri(),
                str(target),
            ],
            cwd=target.parent,
        )
        if not result.ok:
            raise CloneError(ref, result.detail())
        logger.info("Cloned %s@%s", self.root, ref)

    def create_tag(self, name: str, commit: str) -> None:
        result = self._git("tag", name, commit)
        if not result.ok:
            raise TagError(name, result.detail())
        logger.info("Created tag %s at %s", name, commit[:12])
