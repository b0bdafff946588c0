"""
Process capability used for every external call.

Git, the package manager and the type checker are all reached through a
CommandRunner so the decision logic can be exercised with a recording fake.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from .errors import ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one finished command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def last_line(self) -> str:
        lines = [line.strip() for line in self.stdout.splitlines() if line.strip()]
        return lines[-1] if lines else ""

    def detail(self) -> str:
        """Short text suitable for an error message."""
        text = (self.stderr or self.stdout).strip()
        if not text:
            return f"exit status {self.returncode}"
        return text.splitlines()[-1]


class CommandRunner(Protocol):
    """Run a command to completion and capture its output."""

    def run(self, argv: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        ...


class SubprocessRunner:
    """CommandRunner backed by subprocess.run."""

    def run(self, argv: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        args = [str(a) for a in argv]
        logger.debug("$ %s (cwd=%s)", " ".join(args), cwd or ".")
        try:
            completed = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(args[0]) from e

        if completed.returncode != 0:
            logger.debug("%s exited with status %d", args[0], completed.returncode)
        return CommandResult(completed.returncode, completed.stdout or "", completed.stderr or "")
