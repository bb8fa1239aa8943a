from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Deque, List, Optional

from models.records import Reading


class HistoryStore:
    """Fixed-capacity FIFO of the most recent readings, oldest first."""

    def __init__(self, capacity: int = 100) -> None:
        if capacity <= 0:
            raise ValueError("History capacity must be positive.")
        self.capacity = capacity
        self._readings: Deque[Reading] = deque(maxlen=capacity)
        self._lock = Lock()

    def append(self, reading: Reading) -> None:
        # deque(maxlen=...) drops the head as part of the same append.
        with self._lock:
            self._readings.append(reading)

    def snapshot(self, limit: Optional[int] = None) -> List[Reading]:
        """Return up to ``limit`` most recent readings, oldest first."""

        with self._lock:
            items = list(self._readings)
        if limit is None:
            return items
        if limit <= 0:
            return []
        return items[-limit:]

    def latest(self) -> Optional[Reading]:
        with self._lock:
            if not self._readings:
                return None
            return self._readings[-1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)
