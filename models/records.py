"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Reading:
    """A single synthetic temperature measurement."""

    temperature: float
    timestamp: datetime
    id: int
