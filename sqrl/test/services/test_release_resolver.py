from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from sqrl.core.result import Err, Ok, Result
from sqrl.services.release.errors import (
    ArtifactMetadataUnreadable,
    ArtifactNotFound,
    InvalidVersionFormat,
)
from sqrl.services.release.manifest import PackageManifest, load_manifest
from sqrl.services.release.resolver import resolve_version
from sqrl.services.release.version import SemanticVersion


class RecordingProbe:
    def __init__(
        self, result: Result[SemanticVersion, ArtifactMetadataUnreadable] | None = None
    ) -> None:
        self.result = result or Ok(SemanticVersion(2, 0, 0, 0))
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> Result[SemanticVersion, ArtifactMetadataUnreadable]:
        self.calls.append(path)
        return self.result


@pytest.fixture
def manifest(write_nuspec: Callable[..., Path]) -> PackageManifest:
    return load_manifest(write_nuspec(package_id="App", version="1.2.0")).unwrap()


def test_pinned_version_is_used_as_given(manifest: PackageManifest) -> None:
    probe = RecordingProbe()

    result = resolve_version(version_spec="1.4.0", manifest=manifest, probe=probe)

    assert result == Ok(SemanticVersion(1, 4, 0))
    assert probe.calls == []


def test_pinned_version_may_be_lower_than_declared(manifest: PackageManifest) -> None:
    result = resolve_version(version_spec="0.9", manifest=manifest, probe=RecordingProbe())

    assert result == Ok(SemanticVersion(0, 9, 0))


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ("+0.1.0", SemanticVersion(1, 3, 0)),
        ("+0.0.1", SemanticVersion(1, 2, 1)),
        ("+1.0", SemanticVersion(2, 2, 0)),
        (" +0.1.0 ", SemanticVersion(1, 3, 0)),
    ],
)
def test_relative_version_adds_to_declared(
    manifest: PackageManifest, spec: str, expected: SemanticVersion
) -> None:
    assert resolve_version(version_spec=spec, manifest=manifest) == Ok(expected)


def test_relative_version_resets_revision(write_nuspec: Callable[..., Path]) -> None:
    m = load_manifest(write_nuspec(version="1.2.5.9")).unwrap()

    assert resolve_version(version_spec="+0.1.0", manifest=m) == Ok(SemanticVersion(1, 3, 5, 0))


@pytest.mark.parametrize(
    ("declared", "spec", "expected"),
    [
        ("1.2.0", "+0.1.0", SemanticVersion(1, 3, 0)),
        ("1.2.5", "+0.1.0", SemanticVersion(1, 3, 5)),
        ("1.9.3", "+0.1.0", SemanticVersion(1, 10, 3)),
        ("1.2.5.7", "+0.1.0.4", SemanticVersion(1, 3, 5)),
    ],
)
def test_relative_version_has_no_carry(
    write_nuspec: Callable[..., Path], declared: str, spec: str, expected: SemanticVersion
) -> None:
    m = load_manifest(write_nuspec(version=declared)).unwrap()

    assert resolve_version(version_spec=spec, manifest=m) == Ok(expected)


def test_relative_version_with_bad_increment(manifest: PackageManifest) -> None:
    result = resolve_version(version_spec="+x", manifest=manifest)

    assert result == Err(InvalidVersionFormat(text="+x"))


def test_relative_version_with_unparseable_declared(write_nuspec: Callable[..., Path]) -> None:
    m = load_manifest(write_nuspec(version="$version$")).unwrap()

    result = resolve_version(version_spec="+0.1.0", manifest=m)

    assert result == Err(InvalidVersionFormat(text="$version$", source="App.nuspec"))


def test_bad_pinned_version(manifest: PackageManifest) -> None:
    result = resolve_version(version_spec="latest", manifest=manifest)

    assert result == Err(InvalidVersionFormat(text="latest"))


@pytest.mark.parametrize("spec", [None, "", "   "])
def test_probe_used_when_no_version_given(manifest: PackageManifest, spec: str | None) -> None:
    probe = RecordingProbe(Ok(SemanticVersion(2, 0, 0, 0)))

    result = resolve_version(version_spec=spec, manifest=manifest, probe=probe)

    assert result == Ok(SemanticVersion(2, 0, 0, 0))
    assert probe.calls == [manifest.directory / "bin" / "Release" / "App.exe"]


def test_probe_error_is_returned(manifest: PackageManifest) -> None:
    error = ArtifactMetadataUnreadable(path=Path("App.exe"), reason="no version resource")

    result = resolve_version(version_spec=None, manifest=manifest, probe=RecordingProbe(Err(error)))

    assert result == Err(error)


def test_artifact_not_listed(write_nuspec: Callable[..., Path]) -> None:
    text = "<package><metadata><id>App</id><version>1.0</version></metadata></package>"
    m = load_manifest(write_nuspec(text=text)).unwrap()
    probe = RecordingProbe()

    result = resolve_version(version_spec=None, manifest=m, probe=probe)

    assert result == Err(ArtifactNotFound(package_id="App", expected_name="App.exe"))
    assert probe.calls == []
