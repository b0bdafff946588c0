"""
Version-decision engine.

Orchestrates: resolve refs → pack both revisions → synthesize witnesses →
type-check both directions → decide version.

Key invariants:
- No previous version tag: the answer is 0.1.0 and nothing is built
- Same commit on both sides: the previous declared version, unchanged
- Any failing stage aborts the run; no partial result is produced
- The scratch workspace is removed on every exit path
"""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from contextlib import AbstractContextManager
from pathlib import Path, PurePosixPath
from typing import Callable, TypeVar

from .artifact.dialects import detect_dialect
from .artifact.manifest import MANIFEST_NAME, declared_version, parse_manifest
from .artifact.pipeline import PackagingPipeline
from .config import Settings
from .errors import DirtyTreeError, MalformedManifestError, UnreachableError
from .models import Artifact, CompatibilityResult, Decision, Reference, WitnessPair
from .oracle import TypeCheckOracle
from .process import CommandRunner
from .repo import refs
from .repo.git import GitRepository
from .versioning import INITIAL_VERSION, decide_version, parse_version
from .witness import write_workspace
from .workspace import scratch_workspace

logger = logging.getLogger(__name__)

T = TypeVar("T")


def in_parallel(*calls: Callable[[], T]) -> list[T]:
    """Run `calls` concurrently; return results in order or raise the first failure."""
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(call) for call in calls]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        for future in futures:
            if future in done and future.exception() is not None:
                raise future.exception()  # type: ignore[misc]
        return [future.result() for future in futures]


class Engine:
    """Computes the next version of the package in `package_dir`.

    Args:
        repo: Repository holding the package
        package_dir: Directory containing package.json (inside `repo`)
        settings: Run settings
        runner: Command runner shared by every collaborator
        pipeline: Artifact producer (defaults to PackagingPipeline)
        oracle: Type-check oracle (defaults to TypeCheckOracle)
        workspace: Factory for the scratch directory context
    """

    def __init__(
        self,
        repo: GitRepository,
        package_dir: Path,
        settings: Settings,
        runner: CommandRunner,
        *,
        pipeline: PackagingPipeline | None = None,
        oracle: TypeCheckOracle | None = None,
        workspace: Callable[[], AbstractContextManager[Path]] = scratch_workspace,
    ):
        self.repo = repo
        self.settings = settings
        self.runner = runner
        self.package_path = _relative_posix(package_dir, repo.root)
        self.pipeline = pipeline or PackagingPipeline(repo, str(self.package_path), runner)
        self.oracle = oracle or TypeCheckOracle(runner, settings.tsc)
        self.workspace = workspace

    # -------------------------------------------------------------------------
    # Reference resolution
    # -------------------------------------------------------------------------

    def previous_reference(self) -> Reference | None:
        if self.settings.from_ref:
            return refs.resolve_reference(self.repo, self.settings.from_ref, "from")
        return refs.highest_version_reference(
            self.repo,
            self.settings.tag_policy,
            reachable_from=self.settings.to_ref,
        )

    def current_reference(self) -> Reference:
        if self.settings.to_ref:
            return refs.resolve_reference(self.repo, self.settings.to_ref, "to")
        return refs.current_reference(self.repo)

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(self) -> Decision:
        settings = self.settings
        if settings.error_on_dirty and self.repo.is_dirty():
            raise DirtyTreeError(str(self.repo.root))

        previous = self.previous_reference()
        if previous is None:
            logger.info("No previous version tag, starting at %s", INITIAL_VERSION)
            return Decision(INITIAL_VERSION, "initial")

        current = self.current_reference()
        logger.info("Comparing %s (%s) with %s (%s)", previous, previous.commit[:12], current, current.commit[:12])

        if previous.commit == current.commit:
            version = self.declared_version_at(previous)
            logger.info("%s and %s are the same commit, keeping %s", previous, current, version)
            return Decision(version, "unchanged", previous, current)

        if settings.error_on_unreachable and not refs.is_descendant(self.repo, previous, current):
            raise UnreachableError(previous.name, current.name)

        with self.workspace() as scratch:
            previous_artifact, current_artifact = in_parallel(
                lambda: self.pipeline.build(previous, "previous", scratch),
                lambda: self.pipeline.build(current, "current", scratch),
            )
            compatibility = self.compare(scratch, previous_artifact, current_artifact)

        previous_version = previous_artifact.version or self._tag_version(previous)
        version = decide_version(
            previous_version,
            current_artifact.version,
            compatibility.forwards_ok,
            compatibility.backwards_ok,
        )
        logger.info(
            "forwards=%s backwards=%s: %s -> %s",
            compatibility.forwards_ok,
            compatibility.backwards_ok,
            previous_version,
            version,
        )
        return Decision(version, "computed", previous, current, compatibility)

    def compare(self, scratch: Path, previous: Artifact, current: Artifact) -> CompatibilityResult:
        """Install both artifacts into `scratch` and run both witnesses."""
        write_workspace(scratch, previous, current)
        self.pipeline.install(scratch, detect_dialect(scratch), "workspace", production=True)

        forwards_ok, backwards_ok = in_parallel(
            lambda: self.oracle.check(scratch, WitnessPair.FORWARD_FILE),
            lambda: self.oracle.check(scratch, WitnessPair.BACKWARD_FILE),
        )
        return CompatibilityResult(forwards_ok=forwards_ok, backwards_ok=backwards_ok)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def declared_version_at(self, reference: Reference) -> str:
        """Declared version of the manifest at `reference`, read from history."""
        manifest_path = str(self.package_path / MANIFEST_NAME)
        source = f"{manifest_path} at {reference}"
        text = self.repo.show_file(reference.commit, manifest_path)
        if text is None:
            raise MalformedManifestError(f"no {source}")
        version = declared_version(parse_manifest(text, source), source)
        return version or self._tag_version(reference)

    def _tag_version(self, reference: Reference) -> str:
        version = parse_version(reference.name)
        if version is None:
            raise MalformedManifestError(f"no declared version for {reference} and its name is not a version")
        return str(version)


def _relative_posix(path: Path, root: Path) -> PurePosixPath:
    try:
        relative = path.resolve().relative_to(root.resolve())
    except ValueError as e:
        raise MalformedManifestError(f"{path} is outside the repository at {root}") from e
    return PurePosixPath(relative.as_posix())
