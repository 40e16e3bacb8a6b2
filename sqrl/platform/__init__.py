"""Platform abstraction layer."""

from .files import atomic_write_text, find_upward
from .process import (
    ProcessError,
    ProcessResult,
    echo_output,
    run,
    run_checked,
)

__all__ = [
    # files
    "atomic_write_text",
    "find_upward",
    # process
    "ProcessError",
    "ProcessResult",
    "echo_output",
    "run",
    "run_checked",
]
