from __future__ import annotations

from pathlib import Path

from sqrl.core.config import ReleaseOptions
from sqrl.core.result import Err, Ok, Result
from sqrl.output.console import ConsoleProtocol, Style
from sqrl.platform.process import run as run_process
from sqrl.services.release.errors import ReleaseBuildFailed
from sqrl.services.release.timeouts import RELEASER_TIMEOUT_SECONDS


def releasify(
    *,
    options: ReleaseOptions,
    package: Path,
    console: ConsoleProtocol,
) -> Result[Path, ReleaseBuildFailed]:
    """Turn the built package into a Squirrel release set in release_dir.

    Only the exit code is checked; the layout of the release directory
    belongs to the release builder.
    """
    release_dir = options.release_dir
    try:
        release_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Err(ReleaseBuildFailed(reason=f"cannot create {release_dir}: {e}"))

    cmd = [
        str(options.releaser_exe),
        "--releasify",
        str(package),
        f"--releaseDir={release_dir}",
    ]
    console.print(" ".join(cmd), Style.DIM)
    result = run_process(
        cmd,
        cwd=options.work_dir,
        timeout=RELEASER_TIMEOUT_SECONDS,
        sink=console,
    )
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseBuildFailed(
                reason=f"could not run {options.releaser_exe.name}: {e.stderr}",
                returncode=e.returncode,
            )
        )

    proc = result.value
    if not proc.succeeded:
        return Err(
            ReleaseBuildFailed(
                reason=f"{options.releaser_exe.name} exited with {proc.returncode}",
                returncode=proc.returncode,
            )
        )

    return Ok(release_dir)
