"""Release options: command-line flags merged with an optional JSON bundle.

A bundle is a JSON object kept next to the project, so a release can be cut
with `sqrl release -p squirrel.json`. Its values only fill fields that were
not given on the command line. When a bundle is used, relative paths (from
either source) are resolved against the bundle's directory, which is also
where the packaging tool runs.

Example bundle:

    {
      "NuSpec": "App/App.nuspec",
      "Version": "+0.0.1",
      "ReleaseDir": "site/Releases",
      "LocalRepo": "site"
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from sqrl.platform.files import find_upward

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_first_str

__all__ = [
    "ConfigurationError",
    "DEFAULT_RELEASE_FILTER",
    "PACKAGER_SEARCH_PATHS",
    "RELEASER_SEARCH_PATHS",
    "ReleaseOptions",
    "build_options",
    "load_bundle",
]

DEFAULT_RELEASE_FILTER = "Releases"

# Looked up from the manifest's directory upwards when not given explicitly.
PACKAGER_SEARCH_PATHS = (".nuget/NuGet.exe", ".nuget/nuget.exe")
RELEASER_SEARCH_PATHS = ("squirrel.com", "Squirrel.exe")


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    """Missing or invalid configuration. The pipeline does not start."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Validated options for one release run. Never mutated."""

    manifest_path: Path
    packager_exe: Path
    releaser_exe: Path
    content_repo: Path
    release_dir: Path
    work_dir: Path
    version_spec: str | None = None
    release_filter: str = DEFAULT_RELEASE_FILTER
    push: bool = True


def load_bundle(path: Path) -> Result[StrDict, ConfigurationError]:
    """Read an options bundle (JSON object)."""
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        return Err(ConfigurationError(f"options bundle '{path}' does not exist"))
    except OSError as e:
        return Err(ConfigurationError(f"cannot read options bundle: {e}", hint=str(path)))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ConfigurationError(f"invalid JSON in options bundle: {e}", hint=str(path)))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigurationError("options bundle must be a JSON object", hint=str(path)))
    return Ok(data)


def _resolve(base: Path, value: Path | str) -> Path:
    p = Path(value).expanduser()
    if not p.is_absolute():
        p = base / p
    return p.resolve()


def _discover_tool(
    explicit: Path | None,
    *,
    base: Path,
    start: Path,
    search: tuple[str, ...],
    label: str,
    flag: str,
) -> Result[Path, ConfigurationError]:
    if explicit is not None:
        path = _resolve(base, explicit)
        if not path.is_file():
            return Err(ConfigurationError(f"{label} not found: {path}", hint=f"check {flag}"))
        return Ok(path)

    for rel in search:
        found = find_upward(start, rel)
        if found is not None:
            return Ok(found.resolve())

    return Err(
        ConfigurationError(
            f"{label} not found",
            hint=f"pass {flag} or place {search[0]} above {start}",
        )
    )


def build_options(
    *,
    manifest: Path | None = None,
    packager: Path | None = None,
    releaser: Path | None = None,
    version_spec: str | None = None,
    release_dir: Path | None = None,
    content_repo: Path | None = None,
    bundle: Path | None = None,
    release_filter: str | None = None,
    push: bool | None = None,
    cwd: Path | None = None,
) -> Result[ReleaseOptions, ConfigurationError]:
    """Merge flags and bundle, then validate paths and discover tools."""
    base = (cwd or Path.cwd()).resolve()

    data: StrDict = {}
    if bundle is not None:
        bundle_path = _resolve(base, bundle)
        loaded = load_bundle(bundle_path)
        if isinstance(loaded, Err):
            return loaded
        data = loaded.value
        base = bundle_path.parent

    def pick(flag: Path | str | None, *keys: str) -> Path | str | None:
        if flag is not None:
            return flag
        return get_first_str(data, *keys)

    manifest_v = pick(manifest, "NuSpec", "nuspec")
    if manifest_v is None:
        return Err(ConfigurationError("no manifest given", hint="pass --nuspec <file.nuspec>"))
    manifest_path = _resolve(base, manifest_v)
    if not manifest_path.is_file():
        return Err(ConfigurationError(f"{manifest_path} does not exist"))

    packager_v = pick(packager, "NugetExe", "nuget_exe")
    packager_r = _discover_tool(
        Path(packager_v) if packager_v is not None else None,
        base=base,
        start=manifest_path.parent,
        search=PACKAGER_SEARCH_PATHS,
        label="NuGet.exe",
        flag="--nuget",
    )
    if isinstance(packager_r, Err):
        return packager_r

    releaser_v = pick(releaser, "SquirrelCom", "squirrel_com")
    releaser_r = _discover_tool(
        Path(releaser_v) if releaser_v is not None else None,
        base=base,
        start=manifest_path.parent,
        search=RELEASER_SEARCH_PATHS,
        label="Squirrel",
        flag="--squirrel",
    )
    if isinstance(releaser_r, Err):
        return releaser_r

    repo_v = pick(content_repo, "LocalRepo", "local_repo")
    if repo_v is None:
        return Err(ConfigurationError("no content repository given", hint="pass --localrepo <dir>"))
    repo_path = _resolve(base, repo_v)
    if not repo_path.is_dir():
        return Err(ConfigurationError(f"content repository {repo_path} does not exist"))

    release_dir_v = pick(release_dir, "ReleaseDir", "release_dir")
    release_path = _resolve(base, release_dir_v) if release_dir_v is not None else base

    version_v = pick(version_spec, "Version", "version")
    filter_v = pick(release_filter, "ReleaseFilter", "release_filter")
    push_v = push if push is not None else get_bool(data, "Push")

    return Ok(
        ReleaseOptions(
            manifest_path=manifest_path,
            packager_exe=packager_r.value,
            releaser_exe=releaser_r.value,
            content_repo=repo_path,
            release_dir=release_path,
            work_dir=base,
            version_spec=str(version_v) if version_v is not None else None,
            release_filter=str(filter_v) if filter_v is not None else DEFAULT_RELEASE_FILTER,
            push=True if push_v is None else push_v,
        )
    )
