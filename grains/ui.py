"""User interaction for the command line and the interactive shell."""

from __future__ import annotations

from typing import Protocol

from rich.console import Console


class UI(Protocol):
    def read_line(self, prompt: str) -> str:
        """Read one command; raises EOFError when input is exhausted."""

    def print(self, *args) -> None:
        ...

    def print_err(self, *args) -> None:
        ...


class ConsoleUI:
    """
    UI on top of a rich console.

    Messages go to stderr, since stdout is reserved for report data.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def read_line(self, prompt: str) -> str:
        return self.console.input(prompt)

    def print(self, *args) -> None:
        self.console.print("".join(str(a) for a in args), markup=False, highlight=False)

    def print_err(self, *args) -> None:
        self.console.print("".join(str(a) for a in args), style="red", markup=False, highlight=False)
