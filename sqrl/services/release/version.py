from __future__ import annotations

import re
from dataclasses import dataclass

from sqrl.core.result import Err, Ok, Result
from sqrl.services.release.errors import InvalidVersionFormat


# Two to four dotted decimal components, like System.Version.
_VERSION_RE = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


@dataclass(frozen=True, slots=True, order=True)
class SemanticVersion:
    major: int
    minor: int
    build: int = 0
    revision: int = 0

    def __str__(self) -> str:
        # NuGet normalizes a zero revision away, so does the package file name.
        if self.revision:
            return f"{self.major}.{self.minor}.{self.build}.{self.revision}"
        return self.short()

    def short(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"

    def bump(self, increment: SemanticVersion) -> SemanticVersion:
        """Add increment component-wise. No carry; revision is reset to 0."""
        return SemanticVersion(
            self.major + increment.major,
            self.minor + increment.minor,
            self.build + increment.build,
            0,
        )


def parse_version(
    text: str, *, source: str = "--version"
) -> Result[SemanticVersion, InvalidVersionFormat]:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(InvalidVersionFormat(text=text, source=source))
    parts = [int(g) if g is not None else 0 for g in m.groups()]
    return Ok(SemanticVersion(*parts))
