from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from sqrl import __version__
from sqrl.cli.app import app
from sqrl.core.errors import ErrorCode
from sqrl.core.result import Err, Ok, Result
from sqrl.git.repository import GitError, GitStatus, StatusEntry
from sqrl.output.console import MockConsole

NUGET_BODY = """\
manifest = pathlib.Path(sys.argv[2]).read_text(encoding="utf-8")
version = manifest.split("<version>", 1)[1].split("</version>", 1)[0]
pathlib.Path(f"App.{version}.nupkg").write_bytes(b"PK")
"""

SQUIRREL_BODY = """\
release_dir = pathlib.Path(sys.argv[3].split("=", 1)[1])
(release_dir / "RELEASES").write_text("x")
"""


class FakeRepo:
    push_error: GitError | None = None

    def __init__(self, path: Path) -> None:
        self.path = path

    def status(self) -> Result[GitStatus, GitError]:
        return Ok(GitStatus(branch="master", entries=(StatusEntry("??", "Releases/RELEASES"),)))

    def add(self, paths: list[str]) -> Result[None, GitError]:
        return Ok(None)

    def commit(self, message: str, paths: list[str]) -> Result[str, GitError]:
        return Ok("")

    def push(self, remote: str, branch: str) -> Result[str, GitError]:
        if self.push_error is not None:
            return Err(self.push_error)
        return Ok("")


@pytest.fixture
def console(monkeypatch: pytest.MonkeyPatch) -> MockConsole:
    import sqrl.cli.commands.release_cmd as release_cmd

    mock = MockConsole()
    monkeypatch.setattr(release_cmd, "_console", lambda: mock)
    return mock


@pytest.fixture
def project(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    write_nuspec: Callable[..., Path],
    fake_tool: Callable[[str, str], Path],
) -> Path:
    import sqrl.services.release.pipeline as pipeline_mod

    write_nuspec(package_id="App", version="1.2.0")
    fake_tool("nuget", NUGET_BODY)
    fake_tool("squirrel", SQUIRREL_BODY)
    (tmp_path / "site").mkdir()
    FakeRepo.push_error = None
    monkeypatch.setattr(pipeline_mod, "Repository", FakeRepo)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _release(**overrides: object) -> None:
    import sqrl.cli.commands.release_cmd as release_cmd

    args: dict[str, object] = {
        "nuspec": None,
        "nuget": None,
        "squirrel": None,
        "version": None,
        "release_dir": None,
        "local_repo": None,
        "package": None,
        "release_filter": None,
        "push": None,
    }
    args.update(overrides)
    release_cmd.release(**args)  # type: ignore[arg-type]


def _flags() -> dict[str, object]:
    return {
        "nuspec": Path("App.nuspec"),
        "nuget": Path("tools/nuget"),
        "squirrel": Path("tools/squirrel"),
        "local_repo": Path("site"),
        "release_dir": Path("site/Releases"),
    }


def test_release_succeeds(project: Path, console: MockConsole) -> None:
    _release(**_flags(), version="+0.1.0")

    assert "OK released 1.3.0" in console.messages
    assert (project / "App.1.3.0.nupkg").is_file()
    assert "<version>1.3.0</version>" in (project / "App.nuspec").read_text(encoding="utf-8")
    assert any(m.startswith("publish ") for m in console.messages)


def test_release_from_bundle(project: Path, console: MockConsole) -> None:
    bundle = project / "squirrel.json"
    bundle.write_text(
        json.dumps(
            {
                "NuSpec": "App.nuspec",
                "NugetExe": "tools/nuget",
                "SquirrelCom": "tools/squirrel",
                "Version": "2.0",
                "ReleaseDir": "site/Releases",
                "LocalRepo": "site",
            }
        ),
        encoding="utf-8",
    )

    _release(package=Path("squirrel.json"))

    assert "OK released 2.0.0" in console.messages
    assert (project / "site" / "Releases" / "RELEASES").is_file()


def test_configuration_error_exits_before_pipeline(project: Path, console: MockConsole) -> None:
    with pytest.raises(typer.Exit) as exc:
        _release(local_repo=Path("site"))

    assert exc.value.exit_code == int(ErrorCode.FAILURE)
    assert console.messages == ["error: no manifest given", "hint: pass --nuspec <file.nuspec>"]
    assert "<version>1.2.0</version>" in (project / "App.nuspec").read_text(encoding="utf-8")


def test_stage_failure_exits_with_summary(project: Path, console: MockConsole) -> None:
    with pytest.raises(typer.Exit) as exc:
        _release(**_flags(), version="one.two")

    assert exc.value.exit_code == int(ErrorCode.FAILURE)
    assert f"{'resolve':<13} FAILED" in console.messages
    assert console.has_error()


def test_push_failure_exits_nonzero_with_warning(project: Path, console: MockConsole) -> None:
    FakeRepo.push_error = GitError(command="push origin master", message="rejected")

    with pytest.raises(typer.Exit) as exc:
        _release(**_flags(), version="1.3.0")

    assert exc.value.exit_code == int(ErrorCode.FAILURE)
    assert not console.has_error()
    assert "warning: publish incomplete, git push failed: rejected" in console.messages
    assert (project / "site" / "Releases" / "RELEASES").is_file()


runner = CliRunner()


def test_app_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_app_release_flags_are_parsed(project: Path, console: MockConsole) -> None:
    result = runner.invoke(
        app,
        [
            "release",
            "-t",
            "App.nuspec",
            "-n",
            "tools/nuget",
            "-s",
            "tools/squirrel",
            "-v",
            "+0.0.1",
            "-r",
            "site/Releases",
            "--localrepo",
            "site",
            "--no-push",
        ],
    )

    assert result.exit_code == 0, console.text
    assert "OK released 1.2.1" in console.messages
    assert any(m.endswith("pushed=False") for m in console.messages)
