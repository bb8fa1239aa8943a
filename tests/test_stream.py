"""Tests for the client-side live feed and reconnect loop."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List

from cli.stream import LiveFeed, watch


def _reading(reading_id: int, temperature: float = 25.0) -> Dict[str, Any]:
    return {
        "temperature": temperature,
        "timestamp": f"2024-01-01T00:00:{reading_id:02d}Z",
        "id": reading_id,
    }


def _initial(history: List[Dict[str, Any]], current: float = 25.0) -> Dict[str, Any]:
    return {"type": "initial", "data": {"current": current, "history": history}}


def _push(reading: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "temperature", "data": reading}


class FakeConnection:
    def __init__(self, frames: List[Dict[str, Any]]) -> None:
        self.frames = [json.dumps(frame) for frame in frames]

    async def __aenter__(self) -> "FakeConnection":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    def __aiter__(self):
        return self._frames()

    async def _frames(self):
        for frame in self.frames:
            yield frame


def test_bootstrap_replaces_local_state() -> None:
    feed = LiveFeed(window_size=50)
    feed.apply(_push(_reading(1)))

    feed.apply(_initial([_reading(7), _reading(8)], current=26.0))

    assert feed.current == 26.0
    assert [r["id"] for r in feed.readings] == [7, 8]


def test_push_appends_and_trims_window() -> None:
    feed = LiveFeed(window_size=3)
    feed.apply(_initial([]))

    for reading_id in range(1, 6):
        feed.apply(_push(_reading(reading_id, 20.0 + reading_id)))

    assert [r["id"] for r in feed.readings] == [3, 4, 5]
    assert feed.current == 25.0


def test_duplicate_or_stale_push_is_ignored() -> None:
    feed = LiveFeed()
    feed.apply(_initial([_reading(1), _reading(2)]))

    assert feed.apply(_push(_reading(2))) is None
    assert feed.apply(_push(_reading(1))) is None
    assert feed.apply(_push(_reading(3))) is not None
    assert [r["id"] for r in feed.readings] == [1, 2, 3]


def test_unknown_message_type_is_ignored() -> None:
    feed = LiveFeed()

    assert feed.apply({"type": "noise", "data": {}}) is None
    assert feed.readings == []


def test_alert_threshold() -> None:
    feed = LiveFeed(alert_threshold=35.0)

    assert feed.is_alert(_reading(1, 35.1)) is True
    assert feed.is_alert(_reading(2, 35.0)) is False


def test_watch_reconnects_and_resynchronizes() -> None:
    attempts: List[str] = []
    sessions = [
        OSError("connection refused"),
        FakeConnection([_initial([_reading(1)]), _push(_reading(2)), _push(_reading(3))]),
        FakeConnection([_initial([_reading(3), _reading(4)]), _push(_reading(5))]),
    ]
    sleeps: List[float] = []
    events: List[str] = []

    def connect(url: str):
        attempts.append(url)
        session = sessions.pop(0)
        if isinstance(session, Exception):
            raise session
        return session

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    feed = LiveFeed()
    received = asyncio.run(
        watch(
            "ws://test/ws",
            feed,
            lambda kind, data: events.append(kind),
            reconnect_delay=3.0,
            max_readings=3,
            connect=connect,
            sleep=fake_sleep,
        )
    )

    assert received == 3
    assert attempts == ["ws://test/ws"] * 3
    assert sleeps == [3.0, 3.0]
    assert events == [
        "disconnected",
        "connected",
        "initial",
        "reading",
        "reading",
        "disconnected",
        "connected",
        "initial",
        "reading",
    ]
    assert [r["id"] for r in feed.readings] == [3, 4, 5]
