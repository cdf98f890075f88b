"""Pytest configuration and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from lineloop.core.config import ReplConfig
from lineloop.core.evaluator import EvalResult, EvaluationError, IncompleteInput, Value
from lineloop.core.history import HistoryLog
from lineloop.core.session import Session
from lineloop.frontends.cli.repl.display import ReplDisplay
from lineloop.frontends.cli.repl.registry import CommandContext


class BraceEvaluator:
    """Tiny brace-block language for driving the state machine.

    - Input with more ``{`` than ``}`` is incomplete.
    - Lines ending in ``{`` and lines that are just ``}`` are structure only.
    - ``name = expr`` assigns into globals; anything else is a Python
      expression whose value is the result of the last line.
    - Failures come back as EvaluationError with a fake trace as detail.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []

    def evaluate(self, source: str, globals: dict[str, Any]) -> EvalResult:
        self.calls.append(source)
        if source.count("{") > source.count("}"):
            return IncompleteInput()

        value: Any = None
        try:
            for raw in source.splitlines():
                stmt = raw.strip()
                if not stmt or stmt.endswith("{") or stmt == "}":
                    continue
                name, sep, expr = stmt.partition("=")
                if sep and name.strip().isidentifier() and not expr.startswith("="):
                    globals[name.strip()] = eval(expr, {}, dict(globals))
                    value = None
                else:
                    value = eval(stmt, {}, dict(globals))
        except Exception as e:
            return EvaluationError(f"{type(e).__name__}: {e}", "Trace:\n  at line 1")
        return Value(value)


class ScriptedLineSource:
    """Line source that replays a fixed script.

    Items are returned in order. Exception classes or instances in the
    script are raised instead (e.g. KeyboardInterrupt). EOFError is raised
    once the script runs out.
    """

    def __init__(self, lines: list[Any]) -> None:
        self.lines = list(lines)
        self.prompts: list[str] = []

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        item = self.lines.pop(0)
        if isinstance(item, BaseException) or (
            isinstance(item, type) and issubclass(item, BaseException)
        ):
            raise item
        return item


@pytest.fixture
def brace_evaluator() -> BraceEvaluator:
    return BraceEvaluator()


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def history() -> HistoryLog:
    return HistoryLog()


@pytest.fixture
def display() -> ReplDisplay:
    return ReplDisplay()


@pytest.fixture
def config() -> ReplConfig:
    return ReplConfig(history_file=None)


@pytest.fixture
def command_context(
    session: Session, history: HistoryLog, display: ReplDisplay, config: ReplConfig
) -> CommandContext:
    return CommandContext(session=session, history=history, display=display, config=config)


@pytest.fixture
def scripted_source() -> type[ScriptedLineSource]:
    """Factory for ScriptedLineSource, so test modules need not import conftest."""
    return ScriptedLineSource
