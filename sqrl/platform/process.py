"""Subprocess execution with Result-based error handling.

Runs an external program without a shell and captures stdout and stderr as
separate line sequences. Both pipes are drained on dedicated threads while
the caller waits for exit, so a chatty tool can never block on a full pipe
buffer.

Launch failures (missing executable, permission denied) and timeouts are
errors. A non-zero exit is not: the caller gets the full ProcessResult and
decides what the exit code means for its stage.

Usage:
    result = run(["nuget.exe", "pack", "App.nuspec"], cwd=work_dir)
    match result:
        case Ok(proc) if proc.succeeded:
            print("\\n".join(proc.stdout_lines))
        case Ok(proc):
            print(f"exit {proc.returncode}")
        case Err(error):
            print(f"could not start: {error.stderr}")
"""

from __future__ import annotations

import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING

from sqrl.core.result import Err, Ok, Result
from sqrl.output.console import Style

if TYPE_CHECKING:
    from sqrl.output.console import ConsoleProtocol

# A grandchild that inherited the pipes can keep them open after the tool exits.
_DRAIN_JOIN_SECONDS = 5.0

__all__ = ["ProcessError", "ProcessResult", "echo_output", "run", "run_checked"]


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Outcome of a process that was started and ran to exit.

    Attributes:
        command: The argv that was executed.
        returncode: The exit code of the process.
        stdout_lines: Standard output, one entry per line, newline stripped.
        stderr_lines: Standard error, one entry per line, newline stripped.
    """

    command: tuple[str, ...]
    returncode: int
    stdout_lines: tuple[str, ...] = ()
    stderr_lines: tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def stdout(self) -> str:
        return "\n".join(self.stdout_lines)

    @property
    def stderr(self) -> str:
        return "\n".join(self.stderr_lines)


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a process that could not be run to a successful exit.

    Attributes:
        command: The command that was executed.
        returncode: The exit code, or -1 when the process never started or
            was killed after a timeout.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS/timeout message.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _drain(stream: IO[str], lines: list[str]) -> None:
    with stream:
        for line in stream:
            lines.append(line.rstrip("\r\n"))


def run(
    cmd: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    sink: ConsoleProtocol | None = None,
) -> Result[ProcessResult, ProcessError]:
    """Execute a command, draining both output streams concurrently.

    Args:
        cmd: Command and arguments. Never passed through a shell.
        cwd: Working directory (current directory if None).
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).
        sink: Optional console that receives the captured lines once the
            process has exited.

    Returns:
        Ok(ProcessResult) once the process exited, whatever its exit code.
        Err(ProcessError) if it could not be started or timed out.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        return Err(ProcessError(command=command, returncode=-1, stdout="", stderr=str(e)))

    assert proc.stdout is not None and proc.stderr is not None
    out_lines: list[str] = []
    err_lines: list[str] = []
    drains = [
        threading.Thread(target=_drain, args=(proc.stdout, out_lines), daemon=True),
        threading.Thread(target=_drain, args=(proc.stderr, err_lines), daemon=True),
    ]
    for t in drains:
        t.start()

    try:
        returncode = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()
        for t in drains:
            t.join(timeout=_DRAIN_JOIN_SECONDS)
        partial = ProcessResult(
            command=command,
            returncode=-1,
            stdout_lines=tuple(out_lines),
            stderr_lines=tuple(err_lines),
        )
        if sink is not None:
            echo_output(partial, sink)
        return Err(
            ProcessError(
                command=command,
                returncode=-1,
                stdout=partial.stdout,
                stderr="\n".join([*err_lines, f"Command timed out after {timeout}s"]),
            )
        )

    for t in drains:
        t.join(timeout=_DRAIN_JOIN_SECONDS)

    result = ProcessResult(
        command=command,
        returncode=returncode,
        stdout_lines=tuple(out_lines),
        stderr_lines=tuple(err_lines),
    )
    if sink is not None:
        echo_output(result, sink)
    return Ok(result)


def run_checked(
    cmd: list[str],
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[ProcessResult, ProcessError]:
    """Like run(), but a non-zero exit is returned as Err(ProcessError)."""
    result = run(cmd, cwd=cwd, env=env, timeout=timeout)
    if isinstance(result, Err):
        return result

    proc = result.value
    if not proc.succeeded:
        return Err(
            ProcessError(
                command=proc.command,
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )
    return Ok(proc)


def echo_output(result: ProcessResult, sink: ConsoleProtocol) -> None:
    """Print captured lines: stdout dimmed, stderr as errors."""
    for line in result.stdout_lines:
        sink.print(line, Style.DIM)
    for line in result.stderr_lines:
        sink.print(line, Style.ERROR)
