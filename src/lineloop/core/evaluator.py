"""Evaluator boundary.

The session hands accumulated source text plus its variable mapping to an
``Evaluator`` and gets back exactly one of three results:

- ``Value``: the code ran; ``value`` is None when there is nothing to show
- ``IncompleteInput``: the text is a valid prefix of a longer construct
- ``EvaluationError``: the code is wrong or failed while running

Any language can sit behind the protocol. ``PythonEvaluator`` is the one
lineloop ships with.
"""

from __future__ import annotations

import ast
import logging
import traceback
from code import compile_command
from dataclasses import dataclass
from typing import Any, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Value:
    """Successful evaluation."""

    value: Any = None


@dataclass(frozen=True)
class IncompleteInput:
    """The parser needs more lines before it can decide."""

    message: str = "Unexpected end of input"


@dataclass(frozen=True)
class EvaluationError:
    """The code as given is wrong, or raised while running."""

    message: str
    detail: str | None = None


EvalResult = Union[Value, IncompleteInput, EvaluationError]


class Evaluator(Protocol):
    """Evaluates source text against a session's variables.

    Calls are synchronous and never reentrant. Implementations may read and
    write ``globals``; changes must be visible to later calls.
    """

    def evaluate(self, source: str, globals: dict[str, Any]) -> EvalResult: ...


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class PythonEvaluator:
    """Evaluate Python source.

    Completeness is decided by ``code.compile_command`` in "exec" mode, so a
    fragment is complete as soon as it parses: ``for i in range(3):`` asks
    for more, the first body line completes it. If the last statement is an
    expression its value is returned, like an interactive interpreter.
    """

    filename = "<repl>"

    def evaluate(self, source: str, globals: dict[str, Any]) -> EvalResult:
        try:
            # The trailing newline closes an indented block, as a blank line would.
            if compile_command(source + "\n", self.filename, "exec") is None:
                return IncompleteInput()
            tree = ast.parse(source, self.filename, "exec")
        except (SyntaxError, OverflowError, ValueError) as e:
            return EvaluationError(_describe(e), traceback.format_exc())

        body = tree.body
        last_expr: ast.expr | None = None
        if body and isinstance(body[-1], ast.Expr):
            last_expr = body.pop().value

        had_builtins = "__builtins__" in globals
        try:
            if body:
                module = ast.Module(body=body, type_ignores=[])
                exec(compile(module, self.filename, "exec"), globals)
            if last_expr is None:
                return Value(None)
            expression = ast.Expression(body=last_expr)
            return Value(eval(compile(expression, self.filename, "eval"), globals))
        except Exception as e:
            logger.debug("evaluation raised %s", type(e).__name__)
            return EvaluationError(_describe(e), traceback.format_exc())
        finally:
            if not had_builtins:
                globals.pop("__builtins__", None)
