"""NuGet package descriptor (.nuspec) access.

The pipeline reads the package id, the declared version and the <files>
list, and rewrites exactly one thing: the text of <metadata>/<version>. The
rewrite is a text splice on the original document (not an XML re-serialize),
so comments, attribute order, namespaces, encoding BOM and line endings all
survive unchanged.
"""

from __future__ import annotations

import codecs
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path, PureWindowsPath

from sqrl.core.result import Err, Ok, Result
from sqrl.platform.files import atomic_write_text
from sqrl.services.release.errors import (
    ManifestError,
    ManifestNotFound,
    ManifestParseError,
    ManifestWriteFailed,
)
from sqrl.services.release.version import SemanticVersion

_METADATA_OPEN_RE = re.compile(r"<(?:[\w.-]+:)?metadata\b[^>]*>")
_VERSION_ELEMENT_RE = re.compile(
    r"(<(?P<prefix>[\w.-]+:)?version\s*>)(?P<value>.*?)(</(?P=prefix)?version\s*>)",
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class ManifestFile:
    source: str
    target: str | None = None


@dataclass(frozen=True, slots=True)
class PackageManifest:
    path: Path
    package_id: str
    declared_version: str
    files: tuple[ManifestFile, ...] = ()
    text: str = field(default="", repr=False, compare=False)
    has_bom: bool = field(default=False, repr=False, compare=False)

    @property
    def directory(self) -> Path:
        return self.path.parent


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    for c in elem:
        if _local(c.tag) == name:
            return c
    return None


def _read(path: Path) -> Result[tuple[str, bool], ManifestError]:
    if not path.is_file():
        return Err(ManifestNotFound(path=path))
    try:
        raw = path.read_bytes()
    except OSError as e:
        return Err(ManifestParseError(path=path, reason=str(e)))

    has_bom = raw.startswith(codecs.BOM_UTF8)
    try:
        return Ok((raw.decode("utf-8-sig"), has_bom))
    except UnicodeDecodeError as e:
        return Err(ManifestParseError(path=path, reason=f"not UTF-8: {e}"))


def parse_manifest(
    path: Path, text: str, *, has_bom: bool = False
) -> Result[PackageManifest, ManifestError]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        return Err(ManifestParseError(path=path, reason=f"invalid XML: {e}"))

    if _local(root.tag) != "package":
        return Err(ManifestParseError(path=path, reason=f"unexpected root <{_local(root.tag)}>"))

    metadata = _child(root, "metadata")
    if metadata is None:
        return Err(ManifestParseError(path=path, reason="missing <metadata>"))

    id_elem = _child(metadata, "id")
    package_id = (id_elem.text or "").strip() if id_elem is not None else ""
    if not package_id:
        return Err(ManifestParseError(path=path, reason="missing <metadata>/<id>"))

    version_elem = _child(metadata, "version")
    declared = (version_elem.text or "").strip() if version_elem is not None else ""
    if not declared:
        return Err(ManifestParseError(path=path, reason="missing <metadata>/<version>"))

    files: list[ManifestFile] = []
    files_elem = _child(root, "files")
    if files_elem is not None:
        for f in files_elem:
            if _local(f.tag) != "file":
                continue
            src = f.get("src")
            if not src:
                continue
            files.append(ManifestFile(source=src, target=f.get("target")))

    return Ok(
        PackageManifest(
            path=path,
            package_id=package_id,
            declared_version=declared,
            files=tuple(files),
            text=text,
            has_bom=has_bom,
        )
    )


def load_manifest(path: Path) -> Result[PackageManifest, ManifestError]:
    """Load a .nuspec file.

    Returns:
        Ok(PackageManifest) on success
        Err(ManifestNotFound) if the file does not exist
        Err(ManifestParseError) if it is not a valid package descriptor
    """
    read = _read(path)
    if isinstance(read, Err):
        return read
    text, has_bom = read.value
    return parse_manifest(path, text, has_bom=has_bom)


def find_embedded_artifact(manifest: PackageManifest) -> Path | None:
    """Locate the packaged executable named after the package id.

    Looks for a <file> whose src file name is "<id>.exe" (then, failing that,
    whose target file name is), compared case-insensitively as Windows does.
    The returned path is the src resolved against the manifest's directory.
    """
    expected = f"{manifest.package_id}.exe".lower()

    def file_name(p: str) -> str:
        return PureWindowsPath(p).name.lower()

    match = next((f for f in manifest.files if file_name(f.source) == expected), None)
    if match is None:
        match = next(
            (f for f in manifest.files if f.target and file_name(f.target) == expected),
            None,
        )
    if match is None:
        return None

    rel = PureWindowsPath(match.source).as_posix()
    return manifest.directory / rel


def save_version(
    manifest: PackageManifest, version: SemanticVersion
) -> Result[PackageManifest, ManifestError]:
    """Rewrite <metadata>/<version> in place and reload the descriptor.

    Overwrites manifest.path; everything outside the version element's text
    is written back byte for byte.
    """
    text = manifest.text
    meta = _METADATA_OPEN_RE.search(text)
    if meta is None:
        return Err(ManifestParseError(path=manifest.path, reason="missing <metadata>"))

    m = _VERSION_ELEMENT_RE.search(text, meta.end())
    if m is None:
        return Err(ManifestParseError(path=manifest.path, reason="missing <metadata>/<version>"))

    out = text[: m.start("value")] + str(version) + text[m.end("value") :]
    try:
        atomic_write_text(
            manifest.path,
            out,
            encoding="utf-8-sig" if manifest.has_bom else "utf-8",
        )
    except OSError as e:
        return Err(ManifestWriteFailed(path=manifest.path, reason=str(e)))

    return load_manifest(manifest.path)
