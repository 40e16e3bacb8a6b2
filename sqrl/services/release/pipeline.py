"""The release pipeline: one sequential pass over all stages.

    manifest -> resolve -> save_version -> package -> notes -> releasify -> publish

Each stage records a StageOk or StageFailed in the report. The first failure
stops the run; what earlier stages left on disk (rewritten manifest, package,
note, release set) stays there for inspection or a manual retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Literal

from sqrl.core.config import ReleaseOptions
from sqrl.core.result import Err
from sqrl.git.repository import Repository
from sqrl.output.console import ConsoleProtocol
from sqrl.services.release.errors import PublishWarning, ReleaseError
from sqrl.services.release.manifest import load_manifest, save_version
from sqrl.services.release.notes import write_release_note
from sqrl.services.release.package import build_package
from sqrl.services.release.probe import VersionProbe, read_file_version
from sqrl.services.release.publish import publish_release
from sqrl.services.release.releasify import releasify
from sqrl.services.release.resolver import resolve_version
from sqrl.services.release.version import SemanticVersion

StageName = Literal[
    "manifest",
    "resolve",
    "save_version",
    "package",
    "notes",
    "releasify",
    "publish",
]


@dataclass(frozen=True, slots=True)
class StageOk:
    stage: StageName
    detail: str


@dataclass(frozen=True, slots=True)
class StageFailed:
    stage: StageName
    error: ReleaseError


StageResult = StageOk | StageFailed


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    stages: tuple[StageResult, ...]
    version: SemanticVersion | None = None
    package: Path | None = None

    @property
    def failure(self) -> StageFailed | None:
        for s in self.stages:
            if isinstance(s, StageFailed):
                return s
        return None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_warning_only(self) -> bool:
        """True when everything was built and only publishing failed."""
        f = self.failure
        return f is not None and isinstance(f.error, PublishWarning)


def run_release(
    options: ReleaseOptions,
    *,
    console: ConsoleProtocol,
    probe: VersionProbe = read_file_version,
    today: date | None = None,
) -> ReleaseReport:
    stages: list[StageResult] = []

    def stop(
        stage: StageName,
        error: ReleaseError,
        *,
        version: SemanticVersion | None = None,
        package: Path | None = None,
    ) -> ReleaseReport:
        stages.append(StageFailed(stage=stage, error=error))
        return ReleaseReport(stages=tuple(stages), version=version, package=package)

    console.header("Manifest")
    loaded = load_manifest(options.manifest_path)
    if isinstance(loaded, Err):
        return stop("manifest", loaded.error)
    manifest = loaded.value
    stages.append(StageOk("manifest", f"{manifest.package_id} {manifest.declared_version}"))
    console.print(f"{manifest.package_id} {manifest.declared_version}")

    console.header("Version")
    resolved = resolve_version(
        version_spec=options.version_spec,
        manifest=manifest,
        probe=probe,
    )
    if isinstance(resolved, Err):
        return stop("resolve", resolved.error)
    version = resolved.value
    stages.append(StageOk("resolve", str(version)))
    console.success(f"version {manifest.declared_version} -> {version}")

    saved = save_version(manifest, version)
    if isinstance(saved, Err):
        return stop("save_version", saved.error, version=version)
    manifest = saved.value
    stages.append(StageOk("save_version", str(options.manifest_path)))

    console.header("Package")
    package = build_package(options=options, manifest=manifest, version=version, console=console)
    if isinstance(package, Err):
        return stop("package", package.error, version=version)
    stages.append(StageOk("package", str(package.value)))
    console.success(package.value.name)

    console.header("Release note")
    note = write_release_note(content_repo=options.content_repo, version=version, today=today)
    if isinstance(note, Err):
        return stop("notes", note.error, version=version, package=package.value)
    stages.append(StageOk("notes", note.value.rel_path))
    console.success(note.value.rel_path)

    console.header("Releasify")
    release_dir = releasify(options=options, package=package.value, console=console)
    if isinstance(release_dir, Err):
        return stop("releasify", release_dir.error, version=version, package=package.value)
    stages.append(StageOk("releasify", str(release_dir.value)))
    console.success(str(release_dir.value))

    console.header("Publish")
    published = publish_release(
        repo=Repository(options.content_repo),
        version=version,
        release_filter=options.release_filter,
        push=options.push,
        console=console,
    )
    if isinstance(published, Err):
        return stop("publish", published.error, version=version, package=package.value)
    outcome = published.value
    detail = f"{len(outcome.committed)} file(s) committed, pushed={outcome.pushed}"
    stages.append(StageOk("publish", detail))

    return ReleaseReport(stages=tuple(stages), version=version, package=package.value)
