"""Input accumulation state machine.

Lines are joined into the session buffer until the evaluator accepts or
rejects the whole thing:

    PRIMARY ──IncompleteInput──▶ CONTINUATION ──IncompleteInput──┐
       ▲                              │    ▲                      │
       │        Value / Error         │    └──────────────────────┘
       └──────────────────────────────┘

Only the evaluator can tell "needs more tokens" from "wrong as written";
the accumulator decides what each answer does to the session.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from lineloop.core.evaluator import (
    EvalResult,
    EvaluationError,
    Evaluator,
    IncompleteInput,
    Value,
)
from lineloop.core.session import Session

logger = logging.getLogger(__name__)


class OutcomeReporter(Protocol):
    """Where evaluation outcomes are shown."""

    def print_value(self, value: Any) -> None: ...

    def print_error(self, message: str, detail: str | None = None) -> None: ...


class InputAccumulator:
    """Feeds lines to an evaluator and applies the resulting transition."""

    def __init__(self, evaluator: Evaluator, reporter: OutcomeReporter) -> None:
        self.evaluator = evaluator
        self.reporter = reporter

    def submit(self, session: Session, line: str, from_file: bool = False) -> EvalResult:
        """Append ``line`` to the pending buffer and evaluate it.

        Args:
            session: Session whose buffer, prompt mode and globals are used.
            line: One typed line, a replayed history entry, or file contents.
            from_file: True for ``:r``/``:l`` content, which must be complete.

        Returns:
            The evaluator's result, after the session has been updated.
        """
        source = session.pending_source(line)
        result = self.evaluator.evaluate(source, session.globals)

        if isinstance(result, IncompleteInput):
            if from_file:
                logger.debug("incomplete file input treated as error")
                self.reporter.print_error(result.message)
                session.reset()
            else:
                session.continue_with(source)
                logger.debug("buffer continued: %d lines", source.count("\n") + 1)
        elif isinstance(result, Value):
            if result.value is not None:
                self.reporter.print_value(result.value)
            session.reset()
        elif isinstance(result, EvaluationError):
            detail = result.detail if session.show_stack_traces else None
            self.reporter.print_error(result.message, detail)
            session.reset()
        else:
            raise TypeError(f"Evaluator returned unsupported result: {result!r}")
        return result
