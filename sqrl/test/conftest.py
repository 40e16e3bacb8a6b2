from __future__ import annotations

import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from sqrl.core.config import ReleaseOptions

NUSPEC_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
  <!-- kept verbatim -->
  <metadata>
    <id>{id}</id>
    <version>{version}</version>
    <title>{id}</title>
    <authors>Someone</authors>
    <description>Desktop app &amp; friends</description>
    <dependencies>
      <dependency id="Squirrel.Windows" version="1.4.4" />
    </dependencies>
  </metadata>
  <files>
    <file src="bin\\Release\\{id}.exe" target="lib\\net45\\{id}.exe" />
    <file src="bin\\Release\\{id}.exe.config" target="lib\\net45" />
  </files>
</package>
"""


@pytest.fixture
def write_nuspec(tmp_path: Path) -> Callable[..., Path]:
    """Write a .nuspec under tmp_path and return its path."""

    def write(
        *,
        package_id: str = "App",
        version: str = "1.2.0",
        name: str | None = None,
        text: str | None = None,
    ) -> Path:
        path = tmp_path / (name or f"{package_id}.nuspec")
        content = text
        if content is None:
            content = NUSPEC_TEMPLATE.format(id=package_id, version=version)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        return path

    return write


@pytest.fixture
def fake_tool(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create an executable Python script standing in for an external tool.

    The body runs with `sys` and `pathlib` imported; argv is available as
    `sys.argv`.
    """
    if sys.platform == "win32":
        pytest.skip("script-based fake tools need a POSIX shebang")

    def make(name: str, body: str) -> Path:
        tools = tmp_path / "tools"
        tools.mkdir(exist_ok=True)
        path = tools / name
        path.write_text(
            f"#!{sys.executable}\nimport sys\nimport pathlib\n{body}\n",
            encoding="utf-8",
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return make


@pytest.fixture
def isolated_git_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Make real git calls independent of the user's global config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Release Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "release@example.invalid")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Release Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "release@example.invalid")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)


@pytest.fixture
def make_options(tmp_path: Path) -> Callable[..., ReleaseOptions]:
    """Build ReleaseOptions rooted at tmp_path; keyword overrides win."""

    def make(**overrides: object) -> ReleaseOptions:
        site = tmp_path / "site"
        site.mkdir(exist_ok=True)
        values: dict[str, object] = {
            "manifest_path": tmp_path / "App.nuspec",
            "packager_exe": tmp_path / "tools" / "nuget",
            "releaser_exe": tmp_path / "tools" / "squirrel",
            "content_repo": site,
            "release_dir": site / "Releases",
            "work_dir": tmp_path,
        }
        values.update(overrides)
        return ReleaseOptions(**values)  # type: ignore[arg-type]

    return make
