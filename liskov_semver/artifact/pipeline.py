"""
Clone, install, build and pack one revision of the package.

Each revision is renamed to a synthetic package name so that both can be
installed side by side into the comparison workspace.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

from ..errors import BuildError, InstallError, PackError
from ..models import Artifact, Reference, Role, synthetic_package_name
from ..process import CommandRunner
from ..repo.git import GitRepository
from .dialects import Dialect, commands_for, detect_dialect
from .manifest import MANIFEST_NAME, declared_version, entry_points, has_script, load_manifest

logger = logging.getLogger(__name__)


class PackagingPipeline:
    """Produces packed Artifacts for references of one repository.

    Args:
        repo: Repository to clone from
        package_path: Location of package.json relative to the repository
            root, as a POSIX path ("" for the root itself)
        runner: Command runner for the package manager
    """

    def __init__(self, repo: GitRepository, package_path: str, runner: CommandRunner):
        self.repo = repo
        self.package_path = PurePosixPath(package_path or ".")
        self.runner = runner

    def build(self, reference: Reference, role: Role, scratch: Path) -> Artifact:
        """Run the full sequence for `reference` under `scratch/<role>`."""
        name = synthetic_package_name(role)
        clone_dir = scratch / role
        clone_dir.mkdir()

        self.repo.clone(reference.name, clone_dir)
        package_dir = clone_dir.joinpath(*self.package_path.parts)
        manifest_path = package_dir / MANIFEST_NAME
        load_manifest(manifest_path)

        dialect = detect_dialect(package_dir)
        logger.info("Using %s for %s", dialect.value, reference)

        self.rename(package_dir, name, dialect, reference.name)
        self.install(package_dir, dialect, reference.name)
        self.run_build(package_dir, dialect, reference.name)
        archive = self.pack(package_dir, scratch / f"{name}.tgz", dialect, reference.name)

        manifest = load_manifest(manifest_path)
        return Artifact(
            role=role,
            reference=reference,
            entry_points=entry_points(manifest),
            version=declared_version(manifest, f"{MANIFEST_NAME} at {reference}"),
            archive=archive,
        )

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def rename(self, directory: Path, name: str, dialect: Dialect, reference: str) -> None:
        logger.info("Renaming package in %s to '%s'", directory, name)
        result = self.runner.run([*commands_for(dialect).rename, f"name={name}"], cwd=directory)
        if not result.ok:
            raise InstallError(reference, f"rename: {result.detail()}")

    def install(
        self,
        directory: Path,
        dialect: Dialect,
        reference: str,
        *,
        production: bool = False,
    ) -> None:
        commands = commands_for(dialect)
        argv = commands.install_production if production else commands.install
        logger.info("Installing dependencies in %s", directory)
        result = self.runner.run(list(argv), cwd=directory)
        if not result.ok:
            raise InstallError(reference, result.detail())
        logger.info("Installed dependencies in %s", directory)

    def run_build(self, directory: Path, dialect: Dialect, reference: str) -> None:
        if not has_script(load_manifest(directory / MANIFEST_NAME), "build"):
            logger.info("No build script in %s, skipping build", directory)
            return
        logger.info("Building package in %s", directory)
        result = self.runner.run(list(commands_for(dialect).build), cwd=directory)
        if not result.ok:
            raise BuildError(reference, result.detail())
        logger.info("Built package in %s", directory)

    def pack(self, directory: Path, destination: Path, dialect: Dialect, reference: str) -> Path:
        """Pack `directory` and move the archive to `destination`."""
        commands = commands_for(dialect)
        logger.info("Packing package in %s", directory)
        result = self.runner.run(list(commands.pack), cwd=directory)
        if not result.ok:
            raise PackError(reference, result.detail())

        filename = commands.pack_filename or result.last_line()
        if not filename:
            raise PackError(reference, "package manager did not report an archive name")
        packed = (directory / filename).resolve()
        if not packed.is_file():
            raise PackError(reference, f"archive {packed} not found")

        shutil.move(str(packed), str(destination))
        logger.info("Packed %s into %s", reference, destination)
        return destination
