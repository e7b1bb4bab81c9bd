"""Exit codes for the CLI.

These values are process exit codes and should remain stable:
- 0: Success (individual FAIL lines do not change this unless --strict)
- 1: Usage or setup error (bad release id, missing credentials/tools/env)
- 3: One or more repositories could not be checked or branched
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the audit command."""

    OK = 0
    USER_ERROR = 1
    REPO_ERROR = 3

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
