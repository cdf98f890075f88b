"""Submitted-line history.

Every line the session accepts (typed or replayed with ``:!``) is appended
to a ``HistoryLog`` exactly once. Entries carry a monotonic index that keeps
counting across runs when the log is backed by a file, so the first index
seen by a process is usually not 0.

File format is JSONL, one entry per line:

    {"index": 12, "text": "x = 1", "timestamp": "2026-10-17T09:30:00+00:00"}

Error Handling Policy: FAIL-SOFT
- Corrupt lines are logged and skipped; oversized files keep their newest
  entries. An unreadable file disables persistence for the session
- The file never holds more than max_entries entries or max_bytes bytes
- Write failures are logged once and the log continues in memory
- Only ``get`` raises (HistoryOutOfRangeError)
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

from prompt_toolkit.history import History

from lineloop.core.errors import HistoryOutOfRangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """One recorded line."""

    index: int
    text: str


@dataclass
class HistoryLog:
    """Ordered, append-only, indexable log of submitted lines.

    Example:
        >>> log = HistoryLog.open("~/.lineloop_history", max_entries=10_000)
        >>> log.append("1 + 1")
        42
        >>> log.get(42)
        '1 + 1'
    """

    path: Path | None = None
    max_entries: int = 10_000
    max_bytes: int = 1_000_000
    _entries: list[HistoryEntry] = field(default_factory=list, repr=False)
    _next_index: int = field(default=0, repr=False)
    _file: IO[str] | None = field(default=None, repr=False)
    _write_failed: bool = field(default=False, repr=False)
    _file_bytes: int = field(default=0, repr=False)

    @classmethod
    def open(
        cls,
        path: str | Path | None,
        max_entries: int = 10_000,
        max_bytes: int = 1_000_000,
    ) -> HistoryLog:
        """Create a log, loading any entries persisted at ``path``.

        Args:
            path: JSONL history file, or None for an in-memory log.
            max_entries: Entries retained from the file (oldest dropped).
            max_bytes: Maximum file size; only the newest entries that fit are kept.
        """
        log = cls(
            path=Path(path).expanduser() if path else None,
            max_entries=max_entries,
            max_bytes=max_bytes,
        )
        if log.path is not None:
            log._load()
        return log

    def _load(self) -> None:
        assert self.path is not None
        try:
            if not self.path.exists():
                return
            size = self.path.stat().st_size
            truncated = size > self.max_bytes
            with open(self.path, "rb") as f:
                if truncated:
                    logger.warning(
                        "history file %s is too large (%d bytes > %d), keeping the newest entries",
                        self.path,
                        size,
                        self.max_bytes,
                    )
                    # One extra byte shows whether the cut fell on a line boundary.
                    f.seek(size - self.max_bytes - 1)
                    _, _, data = f.read().partition(b"\n")
                else:
                    data = f.read()
        except OSError as e:
            logger.warning("history persistence disabled, could not read %s: %s", self.path, e)
            self._write_failed = True
            return

        raw_lines = data.splitlines()
        loaded: list[HistoryEntry] = []
        for lineno, raw in enumerate(raw_lines, start=1):
            if not raw.strip():
                continue
            try:
                record = json.loads(raw)
                entry = HistoryEntry(index=int(record["index"]), text=str(record["text"]))
                if entry.index < 0:
                    raise ValueError(f"negative index {entry.index}")
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("skipping corrupt history line %s:%d: %s", self.path, lineno, e)
                continue
            if loaded and entry.index <= loaded[-1].index:
                logger.warning(
                    "skipping out-of-order history index %d at %s:%d",
                    entry.index,
                    self.path,
                    lineno,
                )
                continue
            loaded.append(entry)

        dropped = len(loaded) - self.max_entries
        if dropped > 0:
            loaded = loaded[dropped:]

        renumbered = False
        if loaded:
            # Renumber backwards from the newest index so the window has no gaps.
            last = loaded[-1].index
            first = last - len(loaded) + 1
            renumbered = first != loaded[0].index
            self._entries = [HistoryEntry(first + i, e.text) for i, e in enumerate(loaded)]
            self._next_index = last + 1
        logger.debug("loaded %d history entries from %s", len(self._entries), self.path)

        if truncated or dropped > 0 or renumbered or len(loaded) != len(raw_lines):
            self._compact()
        else:
            self._file_bytes = size

    def _compact(self) -> None:
        """Rewrite the file with the retained entries.

        The oldest entries are dropped (in memory too) until the file fits in
        ``max_bytes``; the newest entry is always kept.
        """
        assert self.path is not None
        self.close()
        lines = [self._encode(entry) + "\n" for entry in self._entries]
        total = sum(len(line) for line in lines)
        start = 0
        while total > self.max_bytes and start < len(lines) - 1:
            total -= len(lines[start])
            start += 1
        if start:
            logger.debug("dropping %d history entries to fit %d bytes", start, self.max_bytes)
            self._entries = self._entries[start:]

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.writelines(lines[start:])
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning("history persistence disabled, could not rewrite %s: %s", self.path, e)
            self._write_failed = True
            return
        self._file_bytes = total

    @staticmethod
    def _encode(entry: HistoryEntry) -> str:
        # ASCII only, so len() of a line is its size in bytes.
        return json.dumps(
            {
                "index": entry.index,
                "text": entry.text,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            ensure_ascii=True,
        )

    def _persist(self, entry: HistoryEntry, rewrite: bool = False) -> None:
        if self.path is None or self._write_failed:
            return
        line = self._encode(entry) + "\n"
        if rewrite or self._file_bytes + len(line) > self.max_bytes:
            self._compact()
            return
        try:
            if self._file is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self.path, "a", encoding="utf-8")
            self._file.write(line)
            self._file.flush()
        except OSError as e:
            # Keep going in memory; one warning is enough.
            logger.warning("history persistence disabled, write to %s failed: %s", self.path, e)
            self._write_failed = True
            return
        self._file_bytes += len(line)

    def append(self, text: str) -> int:
        """Record ``text`` and return its index.

        Past ``max_entries`` the oldest entry is dropped, so ``first_index``
        moves forward; the file is rewritten whenever it would exceed either
        limit.
        """
        entry = HistoryEntry(self._next_index, text)
        self._entries.append(entry)
        self._next_index += 1
        excess = len(self._entries) - self.max_entries
        if excess > 0:
            del self._entries[:excess]
        self._persist(entry, rewrite=excess > 0)
        return entry.index

    def first_index(self) -> int:
        """Index of the oldest retained entry (next index when empty)."""
        return self._entries[0].index if self._entries else self._next_index

    def last_index(self) -> int:
        """Index of the newest entry, ``first_index() - 1`` when empty."""
        return self._next_index - 1

    def get(self, index: int) -> str:
        """Return the text recorded at ``index``.

        Raises:
            HistoryOutOfRangeError: If ``index`` is not a retained entry.
        """
        first = self.first_index()
        if index < 0 or index < first or index > self.last_index():
            raise HistoryOutOfRangeError(index, first, self.last_index())
        return self._entries[index - first].text

    def tail(self, count: int, end: int | None = None) -> list[HistoryEntry]:
        """Return up to ``count`` entries ending at ``end`` (inclusive), oldest first.

        Args:
            count: Maximum number of entries.
            end: Last index in the window. Defaults to the newest entry.
        """
        if count <= 0:
            return []
        if end is None:
            end = self.last_index()
        stop = max(end - self.first_index() + 1, 0)
        start = max(stop - count, 0)
        return self._entries[start:stop]

    def entries(self) -> list[HistoryEntry]:
        """All retained entries, oldest first."""
        return list(self._entries)

    def close(self) -> None:
        """Close the history file handle if one is open."""
        if self._file is not None:
            try:
                self._file.close()
            except OSError as e:
                logger.warning("error closing history file %s: %s", self.path, e)
            self._file = None

    def __len__(self) -> int:
        return len(self._entries)


class LogBackedHistory(History):
    """prompt_toolkit history view over a HistoryLog.

    Gives the line editor up-arrow recall of persisted lines. The session loop
    owns recording (so blank and repeated lines follow the log's rules),
    therefore ``store_string`` does not write to the log. The log is re-read
    for every prompt, so lines replayed with ``:!`` are reachable too.
    """

    def __init__(self, log: HistoryLog) -> None:
        super().__init__()
        self.log = log

    async def load(self) -> AsyncGenerator[str, None]:
        self._loaded_strings = list(self.load_history_strings())
        self._loaded = True
        for item in self._loaded_strings:
            yield item

    def load_history_strings(self) -> Iterable[str]:
        # prompt_toolkit expects newest first.
        for entry in reversed(self.log.entries()):
            yield entry.text

    def store_string(self, string: str) -> None:
        pass
