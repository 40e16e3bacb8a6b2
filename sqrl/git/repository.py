"""Git repository abstraction.

This module provides the Repository class for the handful of git operations
the release publisher needs: working-tree status, staging an explicit list of
paths, committing and pushing. All operations shell out to the `git` client
and return Result types.

Usage:
    repo = Repository(Path("/path/to/site"))

    match repo.status():
        case Ok(status):
            for entry in status.untracked:
                print(entry.path)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from sqrl.core.result import Err, Ok, Result
from sqrl.platform.process import ProcessError, ProcessResult
from sqrl.platform.process import run_checked as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path relative to the repository root. For renames and
            copies this is the destination path.
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        """True if file has staged changes."""
        return self.xy != "??" and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        """True if file has unstaged changes."""
        return self.xy != "??" and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    @property
    def is_modified(self) -> bool:
        """True for tracked files whose content changed (deletions excluded)."""
        return not self.is_untracked and "D" not in self.xy

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed git status.

    Attributes:
        branch: Current branch name
        upstream: Upstream branch (e.g., "origin/master"), None if not set
        ahead: Number of commits ahead of upstream
        behind: Number of commits behind upstream
        entries: All status entries (staged, unstaged, untracked)
    """

    branch: str
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0

    @property
    def staged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_staged]

    @property
    def unstaged(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_unstaged]

    @property
    def untracked(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_untracked]

    @property
    def modified(self) -> list[StatusEntry]:
        return [e for e in self.entries if e.is_modified]


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository (.git dir or gitfile)."""
        return (self.path / ".git").exists()

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status.

        Runs `git status --porcelain=v1 -b --untracked-files=all` so new files
        inside untracked directories are listed one by one.
        """
        result = self._run(["status", "--porcelain=v1", "-b", "--untracked-files=all"])
        match result:
            case Err(e):
                return Err(_git_error("status", e, "git status failed"))
            case Ok(proc):
                return Ok(self._parse_status(proc.stdout))

    def add(self, paths: list[str]) -> Result[None, GitError]:
        """Stage exactly the given paths."""
        if not paths:
            return Ok(None)
        result = self._run(["add", "--", *paths])
        if isinstance(result, Err):
            return Err(_git_error("add", result.error, "git add failed"))
        return Ok(None)

    def commit(self, message: str, paths: list[str]) -> Result[str, GitError]:
        """Commit only the given paths, leaving anything else in the index staged.

        Returns git's summary output.
        """
        result = self._run(["commit", "--only", "-m", message, "--", *paths])
        match result:
            case Err(e):
                hint = e.stderr.strip() or e.stdout.strip()
                return Err(
                    GitError(
                        command="commit",
                        message=hint or "git commit failed (check git user.name/user.email)",
                        returncode=e.returncode,
                    )
                )
            case Ok(proc):
                return Ok(proc.stdout.strip())

    def push(self, remote: str, branch: str) -> Result[str, GitError]:
        """Push branch to remote. Pushing with nothing new succeeds."""
        result = self._run(["push", remote, branch])
        match result:
            case Err(e):
                return Err(_git_error(f"push {remote} {branch}", e, "git push failed"))
            case Ok(proc):
                # git reports push progress on stderr
                return Ok((proc.stderr or proc.stdout).strip())

    def _run(self, args: list[str]) -> Result[ProcessResult, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(
            ["git", "-C", str(self.path), "-c", "core.quotePath=false", *args],
            cwd=self.path,
            timeout=timeout,
        )

    def _parse_status(self, output: str) -> GitStatus:
        """Parse git status --porcelain=v1 -b output."""
        lines = [ln for ln in output.splitlines() if ln.strip()]

        if not lines:
            return GitStatus(branch="")

        # First line is branch info: ## branch...upstream [ahead N, behind M]
        branch_line = lines[0]
        branch, upstream = self._parse_branch_line(branch_line)
        ahead, behind = self._parse_ahead_behind(branch_line)

        entries: list[StatusEntry] = []
        for line in lines[1:]:
            entry = self._parse_entry(line)
            if entry:
                entries.append(entry)

        return GitStatus(
            branch=branch,
            upstream=upstream,
            ahead=ahead,
            behind=behind,
            entries=tuple(entries),
        )

    def _parse_branch_line(self, line: str) -> tuple[str, str | None]:
        """Parse branch line: ## branch...upstream [info]"""
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()

        s = s.split(" [", 1)[0].strip()

        if "..." in s:
            left, right = s.split("...", 1)
            return (left.strip(), right.strip())

        return (s, None)

    def _parse_ahead_behind(self, line: str) -> tuple[int, int]:
        """Extract ahead/behind counts from branch line."""
        match = re.search(r"\[([^\]]+)\]", line)
        if not match:
            return (0, 0)

        inside = match.group(1)
        ahead_match = re.search(r"ahead\s+(\d+)", inside)
        behind_match = re.search(r"behind\s+(\d+)", inside)

        ahead = int(ahead_match.group(1)) if ahead_match else 0
        behind = int(behind_match.group(1)) if behind_match else 0
        return (ahead, behind)

    def _parse_entry(self, line: str) -> StatusEntry | None:
        """Parse a single status entry line: XY path, or XY old -> new."""
        if len(line) < 4:
            return None

        xy = line[:2]
        path = line[3:]
        if xy[0] in "RC" and " -> " in path:
            path = path.split(" -> ", 1)[1]

        return StatusEntry(xy=xy, path=_unquote(path))


_C_ESCAPES = {
    "a": b"\a",
    "b": b"\b",
    "t": b"\t",
    "n": b"\n",
    "v": b"\v",
    "f": b"\f",
    "r": b"\r",
    '"': b'"',
    "\\": b"\\",
}
_ESCAPE_RE = re.compile(r'\\([0-7]{3}|[abtnvfr"\\])')


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of paths with special characters.

    Octal escapes are raw bytes of the UTF-8 encoded name, so the unescaped
    text is reassembled as bytes before decoding.
    """
    if not (len(path) >= 2 and path.startswith('"') and path.endswith('"')):
        return path

    def _byte(m: re.Match[str]) -> bytes:
        code = m.group(1)
        return _C_ESCAPES.get(code) or bytes([int(code, 8)])

    raw = bytearray()
    inner = path[1:-1]
    pos = 0
    for m in _ESCAPE_RE.finditer(inner):
        raw += inner[pos : m.start()].encode("utf-8")
        raw += _byte(m)
        pos = m.end()
    raw += inner[pos:].encode("utf-8")
    return raw.decode("utf-8", errors="surrogateescape")


def _git_error(command: str, error: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=error.stderr.strip() or error.stdout.strip() or fallback,
        returncode=error.returncode,
    )
