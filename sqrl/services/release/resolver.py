"""Decide which version is about to be released.

Three sources, picked by the shape of the --version value:

- "1.4.0"   pin: used as given.
- "+0.1.0"  relative: added component-wise to the manifest's declared
            version, revision reset to 0. There is no carry between
            components, so "+0.1.0" on 1.9.3 gives 1.10.3.
- absent    probe: read from the version resource of the "<id>.exe" listed
            in the manifest's <files>.
"""

from __future__ import annotations

from sqrl.core.result import Err, Ok, Result
from sqrl.services.release.errors import (
    ArtifactNotFound,
    InvalidVersionFormat,
    ResolutionError,
)
from sqrl.services.release.manifest import PackageManifest, find_embedded_artifact
from sqrl.services.release.probe import VersionProbe, read_file_version
from sqrl.services.release.version import SemanticVersion, parse_version


def resolve_version(
    *,
    version_spec: str | None,
    manifest: PackageManifest,
    probe: VersionProbe = read_file_version,
) -> Result[SemanticVersion, ResolutionError]:
    if version_spec is not None and version_spec.strip():
        spec = version_spec.strip()
        if not spec.startswith("+"):
            return parse_version(spec)

        base = parse_version(manifest.declared_version, source=manifest.path.name)
        if isinstance(base, Err):
            return base
        increment = parse_version(spec[1:])
        if isinstance(increment, Err):
            return Err(InvalidVersionFormat(text=spec))
        return Ok(base.value.bump(increment.value))

    artifact = find_embedded_artifact(manifest)
    if artifact is None:
        return Err(
            ArtifactNotFound(
                package_id=manifest.package_id,
                expected_name=f"{manifest.package_id}.exe",
            )
        )
    return probe(artifact)
