"""Display and output formatting for the REPL.

All REPL output (results, listings, errors) goes to stdout through one rich
Console. Markup and highlighting are off so user values print verbatim.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping
from typing import Any

from rich.console import Console
from rich.pretty import pretty_repr
from rich.theme import Theme

from lineloop.core.history import HistoryEntry

COMPACT = 1
PRETTY = 2

REPL_THEME = Theme(
    {
        "error": "bold red",
        "detail": "dim",
        "recall": "cyan",
        "history.index": "dim cyan",
        "banner": "bold",
    }
)

HELP_TEXT = """\
Available commands:
  :h       Help - print this text
  :?       Alias for :h
  :x       Exit
  :q       Quit - alias for :x
  :c       Clear current buffer
  :r file  Read and execute contents of file
  :l file  Load - alias for :r
  :s       Show variables and their values (concise form)
  :S       Show variables and their values in pretty printed form
  :p       Purge variables
  :e arg   Enable/disable stack traces for errors (true - enable, false - disable)
  :H [n]   Show recent history (last n entries - defaults to 50)
  :! n     Recall history entry with given number
"""


def format_value(value: Any, level: int = COMPACT) -> str:
    """Render a value for display.

    Args:
        value: Any object.
        level: COMPACT for one line, PRETTY (or higher) for an indented
            multi-line layout.
    """
    if level <= COMPACT:
        return pretty_repr(value, max_width=sys.maxsize)
    return pretty_repr(value, max_width=80, indent_size=2)


def create_console() -> Console:
    """Console configured for plain REPL output on stdout."""
    return Console(theme=REPL_THEME, markup=False, highlight=False, emoji=False, soft_wrap=True)


class ReplDisplay:
    """Output surface shared by the loop, commands and accumulator."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or create_console()

    def print_line(self, text: str = "", style: str | None = None) -> None:
        self.console.print(text, style=style)

    def print_banner(self, version: str) -> None:
        python_version = sys.version.split()[0]
        self.print_line(f"lineloop {version} (Python {python_version})", style="banner")
        self.print_line("Type :h for help")

    def print_help(self) -> None:
        self.print_line()
        self.print_line(HELP_TEXT)

    def print_value(self, value: Any) -> None:
        self.print_line(format_value(value))

    def print_error(self, message: str, detail: str | None = None) -> None:
        """Print an error message, plus the diagnostic detail when given."""
        self.print_line(message, style="error")
        if detail:
            self.print_line(detail.rstrip("\n"), style="detail")

    def print_variables(self, variables: Mapping[str, Any], level: int = COMPACT) -> None:
        for name, value in variables.items():
            self.print_line(f"{name}={format_value(value, level)}")

    def print_history(self, entries: Iterable[HistoryEntry]) -> None:
        for entry in entries:
            self.print_line(f"{entry.index}: {entry.text}")

    def print_recall(self, text: str) -> None:
        """Echo a line recalled with ``:!`` before it runs."""
        self.print_line(text, style="recall")
