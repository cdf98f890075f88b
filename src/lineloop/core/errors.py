"""Error types for lineloop.

Evaluation outcomes are not exceptions (see ``lineloop.core.evaluator``);
these cover the session's own failure modes.
"""

from __future__ import annotations


class LineloopError(Exception):
    """Base error for lineloop operations."""


class CommandArgumentError(LineloopError):
    """A ``:`` command received an argument it cannot use.

    Raised when:
    - ``:e`` is given something other than ``true``/``false``
    - ``:H`` or ``:!`` is given something that is not a valid count/index
    - ``:r``/``:l`` is given no path
    """


class FileAccessError(LineloopError):
    """A file named by ``:r``/``:l`` could not be read."""


class HistoryOutOfRangeError(LineloopError, IndexError):
    """History index is negative, no longer retained, or not yet written."""

    def __init__(self, index: int, first: int, last: int) -> None:
        self.index = index
        self.first = first
        self.last = last
        if last < first:
            super().__init__(f"No history entry {index} (history is empty)")
        else:
            super().__init__(f"No history entry {index} (available: {first}-{last})")


class ConfigError(LineloopError):
    """Invalid configuration value from arguments, environment or file."""
