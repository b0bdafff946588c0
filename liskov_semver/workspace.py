"""Scratch workspace: a temporary directory removed on every exit path."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

PREFIX = "liskov-semver-"
REMOVE_RETRIES = 5


@contextmanager
def scratch_workspace(prefix: str = PREFIX, base: Path | None = None) -> Iterator[Path]:
    """Create a temporary directory and remove it recursively afterwards."""
    path = Path(tempfile.mkdtemp(prefix=prefix, dir=str(base) if base else None))
    logger.debug("Created scratch workspace %s", path)
    try:
        yield path
    finally:
        remove_tree(path)


def remove_tree(path: Path, retries: int = REMOVE_RETRIES, delay: float = 0.1) -> bool:
    """Best-effort recursive removal; returns False if `path` survives."""
    for attempt in range(retries):
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.debug("Removing %s failed (attempt %d): %s", path, attempt + 1, e)
            time.sleep(delay * (attempt + 1))
            continue
        return True
    logger.warning("Could not remove temporary directory [%s]", path)
    return False
