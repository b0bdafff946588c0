"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Sequence

import pytest

from liskov_semver.process import CommandResult


Handler = Callable[[list[str], Path | None], CommandResult]


class FakeRunner:
    """Recording CommandRunner; replies come from prefix-matched handlers."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []
        self._handlers: list[tuple[tuple[str, ...], Handler]] = []

    def on(self, prefix: Sequence[str], reply: CommandResult | Handler) -> None:
        handler = reply if callable(reply) else (lambda argv, cwd, r=reply: r)
        self._handlers.insert(0, (tuple(prefix), handler))

    def run(self, argv: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        args = [str(a) for a in argv]
        self.calls.append((args, cwd))
        for prefix, handler in self._handlers:
            if tuple(args[: len(prefix)]) == prefix:
                return handler(args, cwd)
        return CommandResult(0)

    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(tuple(argv[: len(prefix)]) == prefix for argv in self.commands())


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


# -----------------------------------------------------------------------------
# Real git repositories
# -----------------------------------------------------------------------------


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Test",
            "-c",
            "user.email=test@example.com",
            "-c",
            "commit.gpgsign=false",
            "-c",
            "tag.gpgsign=false",
            *args,
        ],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def write_manifest(directory: Path, **fields) -> Path:
    data = {"name": "fixture", **fields}
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return path


def commit_all(repo: Path, message: str) -> str:
    git(repo, "add", "-A")
    git(repo, "commit", "-q", "--allow-empty", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """An empty repository on branch `main`."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q", "-b", "main")
    return repo
