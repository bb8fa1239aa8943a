"""Synthetic temperature source."""

from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import Callable, Optional

from models.records import Reading

MIN_TEMPERATURE = 20.0
MAX_TEMPERATURE = 45.0

# sin(now_ms / 60000) has a period of roughly 6.28 minutes.
_TREND_PERIOD_MS = 60000.0
_TREND_AMPLITUDE = 3.0
_TREND_WEIGHT = 0.1


def _uniform_variation() -> float:
    return random.uniform(-1.0, 1.0)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class ReadingGenerator:
    """Bounded random walk with a slow sinusoidal drift.

    ``variation`` and ``clock`` are injectable so the walk can be driven
    deterministically in tests.
    """

    def __init__(
        self,
        initial_temperature: float = 28.5,
        variation: Optional[Callable[[], float]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._current = _clamp(initial_temperature)
        self._variation = variation or _uniform_variation
        self._clock = clock or _utc_now
        self._last_id = 0

    @property
    def current_temperature(self) -> float:
        return self._current

    def generate(self) -> Reading:
        captured_at = self._clock()
        now_ms = _epoch_ms(captured_at)
        trend = math.sin(now_ms / _TREND_PERIOD_MS) * _TREND_AMPLITUDE

        self._current = _clamp(self._current + self._variation() + trend * _TREND_WEIGHT)

        # Two ticks inside the same millisecond still get distinct, ordered ids.
        self._last_id = max(now_ms, self._last_id + 1)
        return Reading(
            temperature=round(self._current, 1),
            timestamp=captured_at,
            id=self._last_id,
        )


def _clamp(value: float) -> float:
    return max(MIN_TEMPERATURE, min(MAX_TEMPERATURE, value))
