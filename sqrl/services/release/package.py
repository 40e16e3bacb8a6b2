"""Build the .nupkg with the external packaging tool.

The tool's exit code alone is not trusted: the stage only succeeds when the
expected `<id>.<version>.nupkg` exists in the working directory afterwards.
A stale file with that name is removed first, so an old package can never
be mistaken for the new one.
"""

from __future__ import annotations

from pathlib import Path

from sqrl.core.config import ReleaseOptions
from sqrl.core.result import Err, Ok, Result
from sqrl.output.console import ConsoleProtocol, Style
from sqrl.platform.process import run as run_process
from sqrl.services.release.errors import PackagingFailed
from sqrl.services.release.manifest import PackageManifest
from sqrl.services.release.timeouts import PACKAGER_TIMEOUT_SECONDS
from sqrl.services.release.version import SemanticVersion

PACKAGE_EXTENSION = ".nupkg"


def expected_package_path(
    *, work_dir: Path, manifest: PackageManifest, version: SemanticVersion
) -> Path:
    return work_dir / f"{manifest.package_id}.{version}{PACKAGE_EXTENSION}"


def remove_stale(path: Path, *, console: ConsoleProtocol) -> None:
    """Delete a leftover package. Failure is reported and ignored."""
    if not path.exists():
        return
    try:
        path.unlink()
        console.print(f"removed stale {path.name}", Style.DIM)
    except OSError as e:
        console.warning(f"could not remove stale {path.name}: {e}")


def build_package(
    *,
    options: ReleaseOptions,
    manifest: PackageManifest,
    version: SemanticVersion,
    console: ConsoleProtocol,
) -> Result[Path, PackagingFailed]:
    expected = expected_package_path(work_dir=options.work_dir, manifest=manifest, version=version)
    remove_stale(expected, console=console)

    cmd = [str(options.packager_exe), "pack", str(options.manifest_path)]
    console.print(" ".join(cmd), Style.DIM)
    result = run_process(
        cmd,
        cwd=options.work_dir,
        timeout=PACKAGER_TIMEOUT_SECONDS,
        sink=console,
    )
    if isinstance(result, Err):
        e = result.error
        return Err(
            PackagingFailed(
                reason=f"could not run {options.packager_exe.name}: {e.stderr}",
                expected=expected,
                returncode=e.returncode,
            )
        )

    proc = result.value
    if not proc.succeeded:
        return Err(
            PackagingFailed(
                reason=f"{options.packager_exe.name} exited with {proc.returncode}",
                expected=expected,
                returncode=proc.returncode,
            )
        )

    if not expected.is_file():
        return Err(
            PackagingFailed(
                reason=f"{options.packager_exe.name} did not produce {expected.name}",
                expected=expected,
                returncode=proc.returncode,
            )
        )

    return Ok(expected)
