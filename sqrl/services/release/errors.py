from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sqrl.core.config import ConfigurationError


# Manifest


@dataclass(frozen=True, slots=True)
class ManifestNotFound:
    path: Path


@dataclass(frozen=True, slots=True)
class ManifestParseError:
    path: Path
    reason: str


@dataclass(frozen=True, slots=True)
class ManifestWriteFailed:
    path: Path
    reason: str


ManifestError = ManifestNotFound | ManifestParseError | ManifestWriteFailed


# Version resolution


@dataclass(frozen=True, slots=True)
class InvalidVersionFormat:
    text: str
    source: str = "--version"


@dataclass(frozen=True, slots=True)
class ArtifactNotFound:
    package_id: str
    expected_name: str


@dataclass(frozen=True, slots=True)
class ArtifactMetadataUnreadable:
    path: Path
    reason: str


ResolutionError = InvalidVersionFormat | ArtifactNotFound | ArtifactMetadataUnreadable


# External tools


@dataclass(frozen=True, slots=True)
class PackagingFailed:
    reason: str
    expected: Path
    returncode: int | None = None


@dataclass(frozen=True, slots=True)
class ReleaseBuildFailed:
    reason: str
    returncode: int | None = None


@dataclass(frozen=True, slots=True)
class NoteWriteFailed:
    path: Path
    reason: str


ToolInvocationError = PackagingFailed | ReleaseBuildFailed | NoteWriteFailed


# Publishing


@dataclass(frozen=True, slots=True)
class PublishWarning:
    """A commit or push failed after the release artifacts were built.

    Nothing is rolled back: the local commit (if any) stays in place.
    """

    step: str
    message: str
    committed: tuple[str, ...] = ()


ReleaseError = (
    ConfigurationError | ManifestError | ResolutionError | ToolInvocationError | PublishWarning
)
