"""Read the version baked into a built Windows executable.

The binary is inspected, never executed: its PE version resource
(VS_FIXEDFILEINFO) is parsed with pefile and the four FileVersion fields are
returned verbatim.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pefile

from sqrl.core.result import Err, Ok, Result
from sqrl.services.release.errors import ArtifactMetadataUnreadable
from sqrl.services.release.version import SemanticVersion

VersionProbe = Callable[[Path], Result[SemanticVersion, ArtifactMetadataUnreadable]]


def read_file_version(path: Path) -> Result[SemanticVersion, ArtifactMetadataUnreadable]:
    if not path.is_file():
        return Err(ArtifactMetadataUnreadable(path=path, reason="file not found"))

    try:
        pe = pefile.PE(name=str(path))
    except pefile.PEFormatError as e:
        return Err(ArtifactMetadataUnreadable(path=path, reason=f"not a PE image: {e.value}"))
    except OSError as e:
        return Err(ArtifactMetadataUnreadable(path=path, reason=str(e)))

    try:
        infos = getattr(pe, "VS_FIXEDFILEINFO", None)
        if not infos:
            return Err(ArtifactMetadataUnreadable(path=path, reason="no version resource"))
        info = infos[0] if isinstance(infos, list) else infos
        ms = int(info.FileVersionMS)
        ls = int(info.FileVersionLS)
    finally:
        pe.close()

    return Ok(SemanticVersion(ms >> 16, ms & 0xFFFF, ls >> 16, ls & 0xFFFF))
