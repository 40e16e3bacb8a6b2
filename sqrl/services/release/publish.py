"""Commit the new release files to the content repository and push.

Only files whose path contains the release filter (default "Releases") are
staged; anything else that happens to be dirty in the working copy is left
alone. The push runs even when nothing was committed, so an earlier commit
whose push failed gets published on the next run.

Failures here never undo anything: the package and release set already
exist on disk, and a local commit stays in place if the push fails.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqrl.core.result import Err, Ok, Result
from sqrl.git.repository import GitStatus, Repository
from sqrl.output.console import ConsoleProtocol, Style
from sqrl.services.release.errors import PublishWarning
from sqrl.services.release.timeouts import GIT_BRANCH, GIT_REMOTE
from sqrl.services.release.version import SemanticVersion


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    committed: tuple[str, ...]
    pushed: bool


def commit_message(version: SemanticVersion) -> str:
    return f"Release v.{version}"


def select_release_paths(status: GitStatus, *, release_filter: str) -> list[str]:
    """Untracked and modified paths under the release output, in status order."""
    seen: set[str] = set()
    out: list[str] = []
    for entry in [*status.untracked, *status.modified]:
        if release_filter not in entry.path or entry.path in seen:
            continue
        seen.add(entry.path)
        out.append(entry.path)
    return out


def publish_release(
    *,
    repo: Repository,
    version: SemanticVersion,
    release_filter: str,
    push: bool,
    console: ConsoleProtocol,
) -> Result[PublishOutcome, PublishWarning]:
    status = repo.status()
    if isinstance(status, Err):
        return Err(PublishWarning(step="status", message=status.error.message))

    paths = select_release_paths(status.value, release_filter=release_filter)
    committed: tuple[str, ...] = ()
    if paths:
        message = commit_message(version)
        console.print(f"git add -- {' '.join(paths)}", Style.DIM)
        added = repo.add(paths)
        if isinstance(added, Err):
            return Err(PublishWarning(step="add", message=added.error.message))

        console.print(f"git commit --only -m {message!r} -- {' '.join(paths)}", Style.DIM)
        commit = repo.commit(message, paths)
        if isinstance(commit, Err):
            return Err(PublishWarning(step="commit", message=commit.error.message))
        committed = tuple(paths)
        console.success(f"committed {len(paths)} file(s): {message}")
    else:
        console.print(f"nothing new under '{release_filter}' to commit", Style.DIM)

    if not push:
        console.print("push skipped (--no-push)", Style.DIM)
        return Ok(PublishOutcome(committed=committed, pushed=False))

    console.print(f"git push {GIT_REMOTE} {GIT_BRANCH}", Style.DIM)
    pushed = repo.push(GIT_REMOTE, GIT_BRANCH)
    if isinstance(pushed, Err):
        return Err(
            PublishWarning(step="push", message=pushed.error.message, committed=committed)
        )
    if pushed.value:
        console.print(pushed.value, Style.DIM)

    return Ok(PublishOutcome(committed=committed, pushed=True))
