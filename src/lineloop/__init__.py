"""lineloop - Interactive front-end for scripting languages.

lineloop reads lines from a terminal, joins them into complete fragments,
hands each fragment to an evaluator and prints the result. A small command
language (``:h`` for help) controls the session.

Layers:
    core/       Session state, input accumulation, evaluation, history
    frontends/  Terminal REPL and CLI entry point

Quick Start (embed with your own evaluator):
    >>> from lineloop import Repl, StreamLineSource, Value
    >>>
    >>> class Upper:
    ...     def evaluate(self, source, globals):
    ...         return Value(source.upper())
    >>>
    >>> Repl(StreamLineSource(io.StringIO("hi\\n")), evaluator=Upper()).run()
    'HI'
    0
"""

from lineloop.__version__ import __version__
from lineloop.core import (
    EvalResult,
    EvaluationError,
    Evaluator,
    HistoryLog,
    IncompleteInput,
    InputAccumulator,
    PromptMode,
    PythonEvaluator,
    ReplConfig,
    Session,
    Value,
    load_config,
)
from lineloop.frontends.cli.repl import (
    LineSource,
    PromptLineSource,
    Repl,
    StreamLineSource,
    run_interactive,
)

__all__ = [
    "__version__",
    # Core
    "Session",
    "PromptMode",
    "InputAccumulator",
    "HistoryLog",
    "ReplConfig",
    "load_config",
    # Evaluation
    "Evaluator",
    "EvalResult",
    "Value",
    "IncompleteInput",
    "EvaluationError",
    "PythonEvaluator",
    # REPL
    "Repl",
    "run_interactive",
    "LineSource",
    "PromptLineSource",
    "StreamLineSource",
]
