from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path

from sqrl.core.result import Err, Ok, Result
from sqrl.platform.files import atomic_write_text
from sqrl.services.release.errors import NoteWriteFailed
from sqrl.services.release.version import SemanticVersion

POSTS_DIR = "_posts"
NOTE_EXTENSION = ".markdown"


@dataclass(frozen=True, slots=True)
class WrittenNote:
    rel_path: str
    abs_path: Path


def note_path_for(*, version: SemanticVersion, day: date) -> str:
    """Same day and version always map to the same post."""
    return f"{POSTS_DIR}/{day.isoformat()}-v{version.short()}{NOTE_EXTENSION}"


def render_note(*, version: SemanticVersion, day: date) -> str:
    lines = [
        "---",
        "layout: post",
        f"title: v{version.short()}",
        f"date: {day.isoformat()}",
        "categories: release",
        "---",
    ]
    return "\n".join(lines) + "\n"


def write_release_note(
    *,
    content_repo: Path,
    version: SemanticVersion,
    today: date | None = None,
) -> Result[WrittenNote, NoteWriteFailed]:
    """Write the Jekyll post announcing version into content_repo/_posts."""
    day = today or date.today()
    rel = note_path_for(version=version, day=day)
    path = content_repo / rel

    try:
        atomic_write_text(path, render_note(version=version, day=day))
    except OSError as e:
        return Err(NoteWriteFailed(path=path, reason=str(e)))

    return Ok(WrittenNote(rel_path=rel, abs_path=path))
