"""Line sources for the REPL loop.

A line source blocks until one line is available and returns it without
its trailing newline. It raises KeyboardInterrupt when the read is
interrupted (the partial line is lost) and EOFError at end of input.

- PromptLineSource: interactive terminal via prompt_toolkit, with command
  and file-name completion
- StreamLineSource: any text stream (piped stdin, files), no prompts
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol, TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion, PathCompleter
from prompt_toolkit.document import Document
from prompt_toolkit.history import History

from lineloop.frontends.cli.repl.registry import COMMAND_SUMMARIES

# Commands whose argument is a file path.
PATH_COMMANDS = (":r", ":l")


class LineSource(Protocol):
    """Blocking reader of one logical line."""

    def read_line(self, prompt: str) -> str: ...


class CommandCompleter(Completer):
    """Completer for ``:`` commands.

    Typing ``:`` lists the commands with their summaries. After ``:r `` or
    ``:l `` the rest of the line completes as a file path. Ordinary code gets
    no completions, and nothing is offered while ``is_active()`` is False
    (the REPL passes "prompt is primary", since commands are code otherwise).

    Example:
        >>> completer = CommandCompleter()
        >>> # User types ":r ~/scr" then Tab
        >>> # Dropdown shows: scripts/
    """

    def __init__(self, is_active: Callable[[], bool] | None = None) -> None:
        self.is_active = is_active or (lambda: True)
        self.path_completer = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        if not self.is_active():
            return

        text = document.text_before_cursor
        stripped = text.lstrip()
        if not stripped.startswith(":"):
            return

        # File argument for :r / :l
        for command in PATH_COMMANDS:
            if stripped.startswith(command) and len(stripped) > len(command):
                if not stripped[len(command)].isspace():
                    break
                path_text = stripped[len(command) :].lstrip()
                path_document = Document(path_text, cursor_position=len(path_text))
                yield from self.path_completer.get_completions(path_document, complete_event)
                return

        # Command name
        if len(stripped) <= 2 and " " not in stripped:
            for char, summary in COMMAND_SUMMARIES.items():
                name = f":{char}"
                if name.startswith(stripped):
                    yield Completion(
                        text=name,
                        start_position=-len(stripped),
                        display=name,
                        display_meta=summary,
                    )


class PromptLineSource:
    """Terminal line source backed by a prompt_toolkit PromptSession."""

    def __init__(
        self,
        history: History | None = None,
        is_primary: Callable[[], bool] | None = None,
    ) -> None:
        """Create the prompt session.

        Args:
            history: Editor history for up-arrow recall (see LogBackedHistory).
            is_primary: Callable reporting whether the REPL is at the primary
                prompt; command completion is offered only then.
        """
        self.completer = CommandCompleter(is_active=is_primary)
        self._prompt_session: PromptSession[str] = PromptSession(
            history=history,
            completer=self.completer,
            complete_while_typing=False,
        )

    def read_line(self, prompt: str) -> str:
        return self._prompt_session.prompt(prompt)


class StreamLineSource:
    """Read lines from a text stream, ignoring prompts.

    Used when stdin is not a terminal, so ``cat script.txt | lineloop``
    runs each line as if typed.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def read_line(self, prompt: str) -> str:
        line = self.stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")
