"""Exit codes for the CLI.

The release pipeline has a single failure code. The printed message, not the
code, tells the operator which stage failed.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values must remain stable for CI scripts."""

    OK = 0
    FAILURE = 1

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
