"""Core of lineloop: session state, accumulation, evaluation, history.

Nothing here touches the terminal; output goes through an OutcomeReporter
and input arrives one line at a time from the caller.
"""

from lineloop.core.accumulator import InputAccumulator, OutcomeReporter
from lineloop.core.config import ReplConfig, load_config
from lineloop.core.errors import (
    CommandArgumentError,
    ConfigError,
    FileAccessError,
    HistoryOutOfRangeError,
    LineloopError,
)
from lineloop.core.evaluator import (
    EvalResult,
    EvaluationError,
    Evaluator,
    IncompleteInput,
    PythonEvaluator,
    Value,
)
from lineloop.core.history import HistoryEntry, HistoryLog, LogBackedHistory
from lineloop.core.session import PromptMode, Session

__all__ = [
    # State
    "Session",
    "PromptMode",
    # Accumulation
    "InputAccumulator",
    "OutcomeReporter",
    # Evaluation
    "Evaluator",
    "EvalResult",
    "Value",
    "IncompleteInput",
    "EvaluationError",
    "PythonEvaluator",
    # History
    "HistoryLog",
    "HistoryEntry",
    "LogBackedHistory",
    # Config
    "ReplConfig",
    "load_config",
    # Errors
    "LineloopError",
    "CommandArgumentError",
    "FileAccessError",
    "HistoryOutOfRangeError",
    "ConfigError",
]
