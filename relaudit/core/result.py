"""Result type for explicit error handling.

Every operation that talks to the outside world (processes, HTTP, git)
returns ``Ok(value)`` or ``Err(error)`` instead of raising, so callers
decide per stage whether a failure aborts the run or is collected.

Usage:
    match provider.remote_branches("framework"):
        case Ok(branches):
            ...
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
