"""Bounded in-memory history of recent samples for display."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque

from . import constants
from .core import HistoryEntry, Sample

DISPLAY_TIME_FORMAT = "%H:%M:%S"


class HistoryBuffer:
    """Insertion-ordered ring of the most recent samples.

    Appends evict the oldest entry once ``capacity`` is reached. Reads may come
    from another thread (the status server), so access is lock-guarded and
    ``snapshot`` always returns a copy.
    """

    def __init__(self, capacity: int = constants.HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._entries: Deque[HistoryEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def record(self, sample: Sample) -> HistoryEntry:
        entry = HistoryEntry(
            display_time=_format_display_time(sample),
            value=sample.value,
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def snapshot(self) -> tuple[HistoryEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def as_chart_data(self) -> list[dict[str, object]]:
        return [entry.as_dict() for entry in self.snapshot()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _format_display_time(sample: Sample) -> str:
    # Local wall-clock time, as shown on the chart axis.
    return sample.timestamp.astimezone().strftime(DISPLAY_TIME_FORMAT)
