"""Error presentation utilities.

One human-readable message per failure, plus an optional dim hint. Every
release error maps to the same exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqrl.core.config import ConfigurationError
from sqrl.core.errors import ErrorCode
from sqrl.output.console import Style
from sqrl.services.release.errors import (
    ArtifactMetadataUnreadable,
    ArtifactNotFound,
    InvalidVersionFormat,
    ManifestNotFound,
    ManifestParseError,
    ManifestWriteFailed,
    NoteWriteFailed,
    PackagingFailed,
    PublishWarning,
    ReleaseBuildFailed,
    ReleaseError,
)

if TYPE_CHECKING:
    from sqrl.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a release error with appropriate formatting."""
    match error:
        case ConfigurationError(message=message, hint=hint):
            console.error(message)
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case ManifestNotFound(path=path):
            console.error(f"{path} does not exist")
        case ManifestParseError(path=path, reason=reason):
            console.error(f"invalid manifest: {path} ({reason})")
        case ManifestWriteFailed(path=path, reason=reason):
            console.error(f"failed to write manifest: {path} ({reason})")
        case InvalidVersionFormat(text=text, source=source):
            console.error(f"invalid version '{text}' ({source})")
            console.print(
                "hint: expected MAJOR.MINOR[.BUILD[.REVISION]] or +MAJOR.MINOR.BUILD",
                Style.DIM,
            )
        case ArtifactNotFound(package_id=package_id, expected_name=expected_name):
            console.error(f"no <file> named {expected_name} in the {package_id} manifest")
            console.print("hint: pass --version to set the version explicitly", Style.DIM)
        case ArtifactMetadataUnreadable(path=path, reason=reason):
            console.error(f"cannot read version from {path}: {reason}")
        case PackagingFailed(reason=reason, expected=expected):
            console.error(f"packaging failed: {reason}")
            console.print(f"expected: {expected}", Style.DIM)
        case ReleaseBuildFailed(reason=reason):
            console.error(f"releasify failed: {reason}")
        case NoteWriteFailed(path=path, reason=reason):
            console.error(f"failed to write release note: {path} ({reason})")
        case PublishWarning(step=step, message=message, committed=committed):
            console.warning(f"publish incomplete, git {step} failed: {message}")
            if committed:
                console.print(
                    f"hint: the local commit is kept; push {len(committed)} file(s) manually",
                    Style.DIM,
                )


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    del error
    return int(ErrorCode.FAILURE)
