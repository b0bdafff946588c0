"""Type-checker oracle: pass/fail of one witness program."""

from __future__ import annotations

import logging
from pathlib import Path

from .process import CommandRunner

logger = logging.getLogger(__name__)

TSC_FLAGS: tuple[str, ...] = (
    "--noEmit",
    "--strict",
    "--skipLibCheck",
    "--module",
    "esnext",
    "--moduleResolution",
    "bundler",
    "--target",
    "es2022",
)


class TypeCheckOracle:
    """Runs `tsc` in strict no-emit mode against a single program."""

    def __init__(self, runner: CommandRunner, tsc: str = "tsc"):
        self.runner = runner
        self.tsc = tsc

    def command(self, program: str) -> list[str]:
        return [self.tsc, *TSC_FLAGS, program]

    def check(self, workspace: Path, program: str) -> bool:
        """True iff the type checker reports nothing for `program`."""
        logger.info("Running %s on %s", self.tsc, workspace / program)
        result = self.runner.run(self.command(program), cwd=workspace)
        diagnostics = (result.stdout + result.stderr).strip()
        if diagnostics:
            logger.debug("%s diagnostics for %s:\n%s", self.tsc, program, diagnostics)
        logger.info("%s on %s: %s", self.tsc, program, "ok" if result.ok else "failed")
        return result.ok
