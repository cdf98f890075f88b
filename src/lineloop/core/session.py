"""REPL session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class PromptMode(Enum):
    """Which prompt the next read uses."""

    PRIMARY = auto()  # No statement pending
    CONTINUATION = auto()  # Mid multi-line statement


@dataclass
class Session:
    """State shared by the loop, command dispatcher and accumulator.

    ``buffer`` is None exactly when ``prompt_mode`` is PRIMARY; use
    ``continue_with`` and ``reset`` rather than setting them separately.
    """

    globals: dict[str, Any] = field(default_factory=dict)
    show_stack_traces: bool = False
    buffer: str | None = None
    prompt_mode: PromptMode = PromptMode.PRIMARY

    @property
    def is_primary(self) -> bool:
        return self.prompt_mode is PromptMode.PRIMARY

    def pending_source(self, line: str) -> str:
        """Buffer with ``line`` appended, as the evaluator should see it."""
        return line if self.buffer is None else f"{self.buffer}\n{line}"

    def continue_with(self, source: str) -> None:
        """Keep ``source`` pending and switch to the continuation prompt."""
        self.buffer = source
        self.prompt_mode = PromptMode.CONTINUATION

    def reset(self) -> None:
        """Drop any pending input and return to the primary prompt."""
        self.buffer = None
        self.prompt_mode = PromptMode.PRIMARY

    def purge(self) -> None:
        """Forget every variable."""
        self.globals = {}
