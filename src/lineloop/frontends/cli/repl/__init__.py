"""Interactive REPL for lineloop.

Public API:
    Repl: Read-eval-print loop over one session
    run_interactive: Start a REPL on the terminal
    dispatch_command: Run a ``:`` command line against a CommandContext
    LineSource: Protocol for blocking line readers
"""

from __future__ import annotations

from lineloop.frontends.cli.repl.core import Repl, run_interactive
from lineloop.frontends.cli.repl.display import ReplDisplay, format_value
from lineloop.frontends.cli.repl.line_source import (
    CommandCompleter,
    LineSource,
    PromptLineSource,
    StreamLineSource,
)
from lineloop.frontends.cli.repl.registry import (
    CommandAction,
    CommandContext,
    CommandKind,
    CommandResult,
    dispatch_command,
    parse_command,
)

__all__ = [
    "Repl",
    "run_interactive",
    "ReplDisplay",
    "format_value",
    "LineSource",
    "PromptLineSource",
    "StreamLineSource",
    "CommandCompleter",
    "CommandAction",
    "CommandContext",
    "CommandKind",
    "CommandResult",
    "dispatch_command",
    "parse_command",
]
