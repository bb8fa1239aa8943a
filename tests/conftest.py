from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from models.records import Reading

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


class RecordingViewer:
    """In-memory viewer that records every message it is sent."""

    def __init__(
        self,
        viewer_id: str,
        fail: bool = False,
        gate: Optional[asyncio.Event] = None,
    ) -> None:
        self.viewer_id = viewer_id
        self.fail = fail
        self.gate = gate
        self.messages: List[Dict[str, Any]] = []
        self.closed = False

    async def send(self, message: Dict[str, Any]) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionError(f"{self.viewer_id} went away")
        self.messages.append(message)

    async def close(self) -> None:
        self.closed = True

    @property
    def types(self) -> List[str]:
        return [message["type"] for message in self.messages]


@pytest.fixture
def make_viewer() -> Callable[..., RecordingViewer]:
    return RecordingViewer


@pytest.fixture
def make_reading() -> Callable[..., Reading]:
    def factory(reading_id: int, temperature: float = 25.0) -> Reading:
        return Reading(
            temperature=temperature,
            timestamp=BASE + timedelta(seconds=reading_id),
            id=reading_id,
        )

    return factory
