"""
Tests for the packaging pipeline with a scripted command runner.

No real git or package manager runs: the fake clone writes a manifest and
the fake pack writes an archive.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from liskov_semver.artifact.pipeline import PackagingPipeline
from liskov_semver.errors import BuildError, CloneError, InstallError, MalformedManifestError, PackError
from liskov_semver.models import Reference
from liskov_semver.process import CommandResult
from liskov_semver.repo.git import GitRepository

REF = Reference("1.0.0", "tag", "a" * 40)


def _fake_clone(manifest: dict | None, *, subdir: str = "", extra_files: dict[str, str] | None = None):
    def handler(argv: list[str], cwd: Path | None) -> CommandResult:
        package_dir = Path(argv[-1]) / subdir if subdir else Path(argv[-1])
        package_dir.mkdir(parents=True, exist_ok=True)
        if manifest is not None:
            (package_dir / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
        for name, content in (extra_files or {}).items():
            (package_dir / name).write_text(content, encoding="utf-8")
        return CommandResult(0)

    return handler


def _fake_pack(argv: list[str], cwd: Path | None) -> CommandResult:
    assert cwd is not None
    name = json.loads((cwd / "package.json").read_text(encoding="utf-8"))["name"]
    archive = f"{name}-1.0.0.tgz"
    (cwd / archive).write_bytes(b"tgz")
    return CommandResult(0, f"npm notice Tarball Contents\n{archive}\n")


def _fake_rename(argv: list[str], cwd: Path | None) -> CommandResult:
    assert cwd is not None
    path = cwd / "package.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    data["name"] = argv[-1].split("=", 1)[1]
    path.write_text(json.dumps(data), encoding="utf-8")
    return CommandResult(0)


@pytest.fixture
def pipeline(fake_runner, tmp_path: Path) -> PackagingPipeline:
    fake_runner.on(["npm", "pkg", "set"], _fake_rename)
    fake_runner.on(["pnpm", "pkg", "set"], _fake_rename)
    fake_runner.on(["npm", "pack"], _fake_pack)
    fake_runner.on(["pnpm", "pack"], _fake_pack)
    repo = GitRepository(tmp_path / "origin", fake_runner)
    return PackagingPipeline(repo, "", fake_runner)


@pytest.fixture
def scratch(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


def test_build_produces_artifact(pipeline, fake_runner, scratch: Path):
    manifest = {
        "name": "real-name",
        "version": "1.0.0",
        "types": "index.d.ts",
        "exports": {"./extra": {"types": "./extra.d.ts"}},
        "scripts": {"build": "tsc -p ."},
    }
    fake_runner.on(["git", "clone"], _fake_clone(manifest))

    artifact = pipeline.build(REF, "previous", scratch)

    assert artifact.role == "previous"
    assert artifact.entry_points == ("", "extra")
    assert artifact.version == "1.0.0"
    assert artifact.archive == scratch / "liskov-semver-previous.tgz"
    assert artifact.archive.is_file()

    stages = [argv[:2] for argv in fake_runner.commands()]
    assert stages == [
        ["git", "clone"],
        ["npm", "pkg"],
        ["npm", "install"],
        ["npm", "run"],
        ["npm", "pack"],
    ]
    assert fake_runner.commands()[1][-1] == "name=liskov-semver-previous"


def test_clone_arguments(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0"}))
    pipeline.build(REF, "current", scratch)

    clone = fake_runner.commands()[0]
    assert clone[clone.index("--branch") + 1] == "1.0.0"
    for flag in ("--depth", "--single-branch", "--no-tags", "--recurse-submodules", "--shallow-submodules"):
        assert flag in clone
    assert clone[-1] == str(scratch / "current")


def test_build_step_skipped_without_script(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0"}))
    pipeline.build(REF, "current", scratch)
    assert not fake_runner.ran("npm", "run", "build")


def test_lock_file_selects_dialect(pipeline, fake_runner, scratch: Path):
    fake_runner.on(
        ["git", "clone"],
        _fake_clone({"version": "1.0.0"}, extra_files={"pnpm-lock.yaml": "lockfileVersion: 9\n"}),
    )
    pipeline.build(REF, "current", scratch)
    assert fake_runner.ran("pnpm", "install")
    assert not fake_runner.ran("npm", "install")


def test_package_in_subdirectory(fake_runner, scratch: Path, tmp_path: Path):
    fake_runner.on(["npm", "pkg", "set"], _fake_rename)
    fake_runner.on(["npm", "pack"], _fake_pack)
    fake_runner.on(["git", "clone"], _fake_clone({"version": "2.0.0"}, subdir="packages/lib"))
    pipeline = PackagingPipeline(GitRepository(tmp_path / "origin", fake_runner), "packages/lib", fake_runner)

    artifact = pipeline.build(REF, "current", scratch)

    assert artifact.version == "2.0.0"
    install_cwd = [cwd for argv, cwd in fake_runner.calls if argv[:2] == ["npm", "install"]][0]
    assert install_cwd == scratch / "current" / "packages" / "lib"


def test_missing_version_is_none(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"types": "index.d.ts"}))
    assert pipeline.build(REF, "previous", scratch).version is None


def test_clone_failure(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], CommandResult(128, "", "fatal: Remote branch 1.0.0 not found"))
    with pytest.raises(CloneError, match="Remote branch"):
        pipeline.build(REF, "previous", scratch)
    assert not fake_runner.ran("npm")


def test_missing_manifest(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone(None))
    with pytest.raises(MalformedManifestError):
        pipeline.build(REF, "previous", scratch)


def test_rename_failure_is_install_error(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0"}))
    fake_runner.on(["npm", "pkg", "set"], CommandResult(1, "", "npm ERR! pkg"))
    with pytest.raises(InstallError, match="rename"):
        pipeline.build(REF, "previous", scratch)


def test_install_failure_stops_pipeline(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0", "scripts": {"build": "tsc"}}))
    fake_runner.on(["npm", "install"], CommandResult(1, "", "npm ERR! network"))
    with pytest.raises(InstallError) as excinfo:
        pipeline.build(REF, "previous", scratch)
    assert excinfo.value.reference == "1.0.0"
    assert not fake_runner.ran("npm", "run", "build")
    assert not fake_runner.ran("npm", "pack")


def test_build_failure(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0", "scripts": {"build": "tsc"}}))
    fake_runner.on(["npm", "run", "build"], CommandResult(2, "src/index.ts(1,1): error TS1005", ""))
    with pytest.raises(BuildError, match="build 1.0.0"):
        pipeline.build(REF, "previous", scratch)
    assert not fake_runner.ran("npm", "pack")


def test_pack_failure(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0"}))
    fake_runner.on(["npm", "pack"], CommandResult(1, "", "npm ERR! pack"))
    with pytest.raises(PackError):
        pipeline.build(REF, "previous", scratch)


def test_pack_without_archive(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "1.0.0"}))
    fake_runner.on(["npm", "pack"], CommandResult(0, "ghost-1.0.0.tgz\n"))
    with pytest.raises(PackError, match="not found"):
        pipeline.build(REF, "previous", scratch)


def test_malformed_version_is_hard_failure(pipeline, fake_runner, scratch: Path):
    fake_runner.on(["git", "clone"], _fake_clone({"version": "one"}))
    with pytest.raises(MalformedManifestError, match="invalid version"):
        pipeline.build(REF, "previous", scratch)
