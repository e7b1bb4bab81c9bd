"""Console output abstraction.

Services write through ``ConsoleProtocol`` so the CLI can use Rich while
tests capture output with ``MockConsole``. Report lines go to stdout;
errors, hints and trace lines go to stderr so stdout stays parseable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Literal, Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]

Stream = Literal["stdout", "stderr"]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    DIM = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message to stdout.

        The message is printed literally (no markup interpretation).
        """
        ...

    def error(self, message: str) -> None:
        """Print ``error: <message>`` to stderr."""
        ...

    def hint(self, message: str) -> None:
        """Print ``hint: <message>`` to stderr."""
        ...

    def trace(self, message: str) -> None:
        """Print a dim ``+ <message>`` line to stderr."""
        ...

    def note(self, message: str) -> None:
        """Print a dim status note to stderr, outside the report."""
        ...


class RichConsole:
    """Console implementation using the Rich library."""

    def __init__(self) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        # soft_wrap keeps long report lines intact when piped
        self._out = Console(highlight=False, soft_wrap=True)
        self._err = Console(stderr=True, highlight=False, soft_wrap=True)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.DIM: "dim",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        self._out.print(message, style=rich_style or None, markup=False)

    def error(self, message: str) -> None:
        self._err.print(f"[red bold]error:[/red bold] {_escape(message)}")

    def hint(self, message: str) -> None:
        self._err.print(f"hint: {message}", style="dim", markup=False)

    def trace(self, message: str) -> None:
        self._err.print(f"+ {message}", style="dim", markup=False)

    def note(self, message: str) -> None:
        self._err.print(message, style="dim", markup=False)


def _escape(message: str) -> str:
    from rich.markup import escape

    return escape(message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style
    stream: Stream = "stdout"


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR, "stderr"))

    def hint(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"hint: {message}", Style.DIM, "stderr"))

    def trace(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"+ {message}", Style.DIM, "stderr"))

    def note(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.DIM, "stderr"))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def stdout_lines(self) -> list[str]:
        return [o.message for o in self.outputs if o.stream == "stdout"]

    @property
    def stderr_lines(self) -> list[str]:
        return [o.message for o in self.outputs if o.stream == "stderr"]

