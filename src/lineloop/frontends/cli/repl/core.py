"""Core REPL loop.

One cycle: read a line, record it in history, let the command registry
look at it, hand code to the accumulator. Everything runs on one thread;
the only blocking call is the line read.
"""

from __future__ import annotations

import logging
import sys
import traceback

from lineloop.__version__ import __version__
from lineloop.core.accumulator import InputAccumulator
from lineloop.core.config import ReplConfig
from lineloop.core.errors import CommandArgumentError, FileAccessError
from lineloop.core.evaluator import Evaluator, PythonEvaluator
from lineloop.core.history import HistoryLog, LogBackedHistory
from lineloop.core.session import Session
from lineloop.frontends.cli.repl.display import ReplDisplay
from lineloop.frontends.cli.repl.line_source import (
    LineSource,
    PromptLineSource,
    StreamLineSource,
)
from lineloop.frontends.cli.repl.registry import (
    CommandAction,
    CommandContext,
    dispatch_command,
)

logger = logging.getLogger(__name__)


class Repl:
    """Read-eval-print loop over one session.

    Example:
        >>> repl = Repl(line_source=StreamLineSource(io.StringIO("1 + 1\\n")))
        >>> repl.run()
        2
        0
    """

    def __init__(
        self,
        line_source: LineSource,
        evaluator: Evaluator | None = None,
        history: HistoryLog | None = None,
        display: ReplDisplay | None = None,
        config: ReplConfig | None = None,
        session: Session | None = None,
    ) -> None:
        self.config = config or ReplConfig(history_file=None)
        self.line_source = line_source
        self.history = history if history is not None else HistoryLog()
        self.display = display or ReplDisplay()
        self.session = session or Session(show_stack_traces=self.config.show_stack_traces)
        self.accumulator = InputAccumulator(evaluator or PythonEvaluator(), self.display)
        self.context = CommandContext(
            session=self.session,
            history=self.history,
            display=self.display,
            config=self.config,
        )

    @property
    def prompt(self) -> str:
        if self.session.is_primary:
            return self.config.primary_prompt
        return self.config.continuation_prompt

    def run(self) -> int:
        """Loop until :x/:q or end of input.

        Returns:
            Process exit code (always 0; startup failures never get here).
        """
        while True:
            try:
                line = self.line_source.read_line(self.prompt)
            except KeyboardInterrupt:
                # Only the line being typed is lost.
                continue
            except EOFError:
                logger.debug("end of input")
                return 0

            try:
                if self.handle_line(line) is CommandAction.EXIT:
                    return 0
            except KeyboardInterrupt:
                # Interrupted evaluation: drop pending input, keep the variables.
                logger.debug("evaluation interrupted")
                self.session.reset()
                self.display.print_error("KeyboardInterrupt")
            except Exception as e:
                logger.debug("unexpected error handling line", exc_info=True)
                detail = traceback.format_exc() if self.session.show_stack_traces else None
                self.display.print_error(f"Error: {e}", detail)

    def handle_line(self, line: str) -> CommandAction:
        """Process one line read from the line source.

        Returns:
            EXIT when the session should end, CONTINUE otherwise.
        """
        if not line.strip():
            return CommandAction.CONTINUE

        self.context.line_index = self.history.append(line)

        try:
            result = dispatch_command(self.context, line)
        except CommandArgumentError as e:
            self.display.print_error(f"Error: {e}")
            return CommandAction.CONTINUE
        except FileAccessError as e:
            self.display.print_error(f"Error accessing file: {e}")
            return CommandAction.CONTINUE

        if result.action is CommandAction.EXIT:
            return CommandAction.EXIT
        if result.action is CommandAction.EVALUATE:
            assert result.source is not None
            self.accumulator.submit(self.session, result.source, from_file=result.from_file)
        elif result.action is CommandAction.FALLTHROUGH:
            self.accumulator.submit(self.session, line)
        return CommandAction.CONTINUE


def create_line_source(history: HistoryLog, session: Session) -> LineSource:
    """Pick a line source for the current stdin.

    Args:
        history: Log exposed to the line editor for up-arrow recall.
        session: Session whose prompt mode gates command completion.
    """
    if not sys.stdin.isatty():
        return StreamLineSource(sys.stdin)
    return PromptLineSource(
        history=LogBackedHistory(history),
        is_primary=lambda: session.is_primary,
    )


def run_interactive(config: ReplConfig, evaluator: Evaluator | None = None) -> int:
    """Start a REPL session on the terminal.

    Args:
        config: Resolved configuration.
        evaluator: Evaluator to use. Defaults to PythonEvaluator.

    Returns:
        Exit code: 0 on normal exit, 1 if the session could not start.
    """
    display = ReplDisplay()
    history = HistoryLog.open(
        config.history_path(),
        max_entries=config.history_size,
        max_bytes=config.history_max_bytes,
    )
    session = Session(show_stack_traces=config.show_stack_traces)
    try:
        line_source = create_line_source(history, session)
    except Exception as e:
        logger.debug("line source initialization failed", exc_info=True)
        display.print_error(f"Error: could not initialize terminal: {e}")
        history.close()
        return 1

    repl = Repl(
        line_source=line_source,
        evaluator=evaluator,
        history=history,
        display=display,
        config=config,
        session=session,
    )

    display.print_banner(__version__)
    try:
        return repl.run()
    finally:
        history.close()
