from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from sqrl.core.config import build_options
from sqrl.core.result import Err
from sqrl.output.console import ConsoleProtocol, RichConsole, Style
from sqrl.output.errors import print_release_error, release_error_exit_code
from sqrl.services.release.pipeline import ReleaseReport, StageOk, run_release


def _console() -> ConsoleProtocol:
    return RichConsole()


def _exit(code: int) -> NoReturn:
    raise typer.Exit(code=code)


def _print_summary(report: ReleaseReport, console: ConsoleProtocol) -> None:
    console.header("Summary")
    for stage in report.stages:
        if isinstance(stage, StageOk):
            console.print(f"{stage.stage:<13} {stage.detail}", Style.DIM)
        else:
            console.print(f"{stage.stage:<13} FAILED", Style.BOLD)


def release(
    nuspec: Path | None = typer.Option(
        None, "--nuspec", "-t", help="Package descriptor (.nuspec)"
    ),
    nuget: Path | None = typer.Option(
        None, "--nuget", "-n", help="NuGet.exe (default: .nuget/NuGet.exe above the nuspec)"
    ),
    squirrel: Path | None = typer.Option(
        None,
        "--squirrel",
        "-s",
        help="Squirrel release builder (default: squirrel.com above the nuspec)",
    ),
    version: str | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Version to release: 1.2.0, +0.1.0 (bump), or omit to read it from <id>.exe",
    ),
    release_dir: Path | None = typer.Option(
        None, "--releasedir", "-r", help="Release output directory (default: working dir)"
    ),
    local_repo: Path | None = typer.Option(
        None, "--localrepo", help="Local clone of the site/content repository"
    ),
    package: Path | None = typer.Option(
        None, "--package", "-p", help="JSON options bundle; fills options not given as flags"
    ),
    release_filter: str | None = typer.Option(
        None,
        "--filter",
        help="Only commit changed paths containing this text (default: Releases)",
    ),
    push: bool | None = typer.Option(
        None, "--push/--no-push", help="Push the content repository after committing"
    ),
) -> None:
    """Bump the version, pack, releasify and publish a release."""
    console = _console()

    options = build_options(
        manifest=nuspec,
        packager=nuget,
        releaser=squirrel,
        version_spec=version,
        release_dir=release_dir,
        content_repo=local_repo,
        bundle=package,
        release_filter=release_filter,
        push=push,
    )
    if isinstance(options, Err):
        print_release_error(options.error, console)
        _exit(release_error_exit_code(options.error))

    report = run_release(options.value, console=console)
    _print_summary(report, console)

    failure = report.failure
    if failure is not None:
        console.newline()
        print_release_error(failure.error, console)
        _exit(release_error_exit_code(failure.error))

    console.newline()
    console.success(f"released {report.version}")
