"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from relaudit.core.errors import ErrorCode
from relaudit.core.result import Err, Result
from relaudit.output.console import ConsoleProtocol

T = TypeVar("T")
E = TypeVar("E")


def exit_on_error[T, E](
    result: Result[T, E],
    console: ConsoleProtocol,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the Ok value, or report the error and exit.

    Expects error objects to have 'message' and optional 'hint' attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        console.error(message)
        if hint:
            console.hint(hint)
        exit_with_code(int(error_code))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
