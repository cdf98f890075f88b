"""Command registry and dispatch for the REPL.

This module provides:
- CommandKind: every ``:`` command the REPL knows, keyed by its character
- ParsedCommand: a ``:`` line split into kind and argument
- CommandContext: the state command handlers work on
- CommandResult: what the loop should do after a command
- COMMAND_HANDLERS: kind -> handler table, and dispatch_command()

A ``:`` line is only inspected for its first command character. ``x``/``q``,
``c`` and ``h``/``?`` work at any time. Everything else works only at the
primary prompt; mid-statement the line is code (so ``:=`` inside a
continued statement is not taken for a command).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from lineloop.core.config import ReplConfig
from lineloop.core.errors import (
    CommandArgumentError,
    FileAccessError,
    HistoryOutOfRangeError,
)
from lineloop.core.history import HistoryLog
from lineloop.core.session import Session
from lineloop.frontends.cli.repl.display import COMPACT, PRETTY, ReplDisplay

logger = logging.getLogger(__name__)

_ARG_PREFIX = re.compile(r"^:.\s*", re.DOTALL)


class CommandKind(Enum):
    """Session commands."""

    HELP = auto()
    EXIT = auto()
    CLEAR = auto()
    SHOW = auto()
    SHOW_PRETTY = auto()
    PURGE = auto()
    STACK_TRACES = auto()
    LOAD = auto()
    HISTORY = auto()
    RECALL = auto()
    UNKNOWN = auto()


COMMAND_CHARS: dict[str, CommandKind] = {
    "h": CommandKind.HELP,
    "?": CommandKind.HELP,
    "x": CommandKind.EXIT,
    "q": CommandKind.EXIT,
    "c": CommandKind.CLEAR,
    "s": CommandKind.SHOW,
    "S": CommandKind.SHOW_PRETTY,
    "p": CommandKind.PURGE,
    "e": CommandKind.STACK_TRACES,
    "r": CommandKind.LOAD,
    "l": CommandKind.LOAD,
    "H": CommandKind.HISTORY,
    "!": CommandKind.RECALL,
}

# Honored even while a statement is pending.
ALWAYS_AVAILABLE = frozenset({CommandKind.HELP, CommandKind.EXIT, CommandKind.CLEAR})

# One-line summaries for completion menus.
COMMAND_SUMMARIES: dict[str, str] = {
    "h": "Help",
    "?": "Help",
    "x": "Exit",
    "q": "Quit",
    "c": "Clear current buffer",
    "r": "Read and execute file",
    "l": "Load and execute file",
    "s": "Show variables",
    "S": "Show variables (pretty)",
    "p": "Purge variables",
    "e": "Stack traces on/off",
    "H": "Show recent history",
    "!": "Recall history entry",
}


class CommandAction(Enum):
    """Control flow actions from command handlers."""

    CONTINUE = auto()  # Command consumed the line, read the next one
    EXIT = auto()  # End the session (exit code 0)
    EVALUATE = auto()  # Submit result.source to the accumulator
    FALLTHROUGH = auto()  # Not a command here; treat the line as code


@dataclass(frozen=True)
class ParsedCommand:
    """A ``:`` line split into command character and argument."""

    kind: CommandKind
    char: str
    arg: str


@dataclass
class CommandContext:
    """All state needed by command handlers."""

    session: Session
    history: HistoryLog
    display: ReplDisplay
    config: ReplConfig
    # History index of the line being handled, when it was recorded
    line_index: int | None = None


@dataclass
class CommandResult:
    """Result from a command handler."""

    action: CommandAction = CommandAction.CONTINUE
    source: str | None = None  # Text to evaluate for EVALUATE
    from_file: bool = False  # Source came from :r/:l


CommandHandler = Callable[[CommandContext, str], CommandResult]


def parse_command(line: str) -> ParsedCommand | None:
    """Split a ``:`` line into a ParsedCommand, or None if it is not one.

    The argument is everything after the command character and the
    whitespace following it, trimmed.
    """
    text = line.strip()
    if not text.startswith(":"):
        return None
    char = text[1:2]
    kind = COMMAND_CHARS.get(char, CommandKind.UNKNOWN) if char else CommandKind.UNKNOWN
    arg = _ARG_PREFIX.sub("", text, count=1).strip() if char else ""
    return ParsedCommand(kind=kind, char=char, arg=arg)


def _parse_int(arg: str, usage: str) -> int:
    try:
        return int(arg)
    except ValueError:
        raise CommandArgumentError(f"Expected a number, got '{arg}'. Usage: {usage}") from None


# =============================================================================
# Command Handlers
# =============================================================================


def cmd_help(ctx: CommandContext, arg: str) -> CommandResult:
    """Print help text."""
    ctx.display.print_help()
    return CommandResult()


def cmd_exit(ctx: CommandContext, arg: str) -> CommandResult:
    """End the session."""
    return CommandResult(action=CommandAction.EXIT)


def cmd_clear(ctx: CommandContext, arg: str) -> CommandResult:
    """Discard pending input."""
    if ctx.session.buffer is not None:
        logger.debug("discarding %d pending lines", ctx.session.buffer.count("\n") + 1)
    ctx.session.reset()
    return CommandResult()


def cmd_show(ctx: CommandContext, arg: str) -> CommandResult:
    """List variables, one line each."""
    ctx.display.print_variables(ctx.session.globals, COMPACT)
    return CommandResult()


def cmd_show_pretty(ctx: CommandContext, arg: str) -> CommandResult:
    """List variables, pretty printed."""
    ctx.display.print_variables(ctx.session.globals, PRETTY)
    return CommandResult()


def cmd_purge(ctx: CommandContext, arg: str) -> CommandResult:
    """Forget all variables."""
    ctx.session.purge()
    return CommandResult()


def cmd_stack_traces(ctx: CommandContext, arg: str) -> CommandResult:
    """Turn error detail on or off."""
    value = arg.lower()
    if value not in ("true", "false"):
        raise CommandArgumentError(f"Expected true or false, got '{arg}'. Usage: :e true|false")
    ctx.session.show_stack_traces = value == "true"
    return CommandResult()


def cmd_load(ctx: CommandContext, arg: str) -> CommandResult:
    """Read a whole file and evaluate it as one submission."""
    if not arg:
        raise CommandArgumentError("No file given. Usage: :r <file>")
    path = Path(arg).expanduser()
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(str(e)) from e
    logger.debug("loaded %d characters from %s", len(source), path)
    return CommandResult(action=CommandAction.EVALUATE, source=source, from_file=True)


def cmd_history(ctx: CommandContext, arg: str) -> CommandResult:
    """Show the most recent history entries."""
    count = _parse_int(arg, ":H [n]") if arg else ctx.config.history_window
    if count <= 0:
        raise CommandArgumentError(f"Count must be positive, got {count}. Usage: :H [n]")
    # Leave out the :H line itself.
    end = ctx.line_index - 1 if ctx.line_index is not None else None
    ctx.display.print_history(ctx.history.tail(count, end=end))
    return CommandResult()


def cmd_recall(ctx: CommandContext, arg: str) -> CommandResult:
    """Re-run a history entry, recording it again."""
    if not arg:
        raise CommandArgumentError("No history entry given. Usage: :! <n>")
    index = _parse_int(arg, ":! <n>")
    try:
        text = ctx.history.get(index)
    except HistoryOutOfRangeError as e:
        raise CommandArgumentError(str(e)) from e
    ctx.display.print_recall(text)
    ctx.history.append(text)
    return CommandResult(action=CommandAction.EVALUATE, source=text)


def cmd_unknown(ctx: CommandContext, arg: str) -> CommandResult:
    """Reject an unrecognized command."""
    ctx.display.print_error("Unknown command (type :h for help)")
    return CommandResult()


COMMAND_HANDLERS: dict[CommandKind, CommandHandler] = {
    CommandKind.HELP: cmd_help,
    CommandKind.EXIT: cmd_exit,
    CommandKind.CLEAR: cmd_clear,
    CommandKind.SHOW: cmd_show,
    CommandKind.SHOW_PRETTY: cmd_show_pretty,
    CommandKind.PURGE: cmd_purge,
    CommandKind.STACK_TRACES: cmd_stack_traces,
    CommandKind.LOAD: cmd_load,
    CommandKind.HISTORY: cmd_history,
    CommandKind.RECALL: cmd_recall,
    CommandKind.UNKNOWN: cmd_unknown,
}


def dispatch_command(ctx: CommandContext, line: str) -> CommandResult:
    """Run the command on ``line`` if there is one.

    Returns FALLTHROUGH when the line is code: it does not start with ``:``,
    or a statement is pending and the command is not one of ALWAYS_AVAILABLE.

    Raises:
        CommandArgumentError: Bad argument; nothing was changed.
        FileAccessError: ``:r``/``:l`` could not read the file.
    """
    command = parse_command(line)
    if command is None:
        return CommandResult(action=CommandAction.FALLTHROUGH)
    if command.kind not in ALWAYS_AVAILABLE and not ctx.session.is_primary:
        return CommandResult(action=CommandAction.FALLTHROUGH)

    logger.debug("command :%s (%s) arg=%r", command.char, command.kind.name, command.arg)
    handler = COMMAND_HANDLERS[command.kind]
    return handler(ctx, command.arg)
