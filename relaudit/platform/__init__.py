"""Process execution helpers."""

from .process import ProcessError, format_command, run

__all__ = ["ProcessError", "format_command", "run"]
