"""Live WebSocket feed consumed by the ``watch`` command."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets
from websockets.exceptions import WebSocketException

EventHandler = Callable[[str, Dict[str, Any]], None]


class LiveFeed:
    """Client-side view of the server state, rebuilt from each bootstrap."""

    def __init__(self, window_size: int = 50, alert_threshold: float = 35.0) -> None:
        self.window_size = window_size
        self.alert_threshold = alert_threshold
        self.current: Optional[float] = None
        self.readings: List[Dict[str, Any]] = []

    @property
    def last_id(self) -> Optional[int]:
        return self.readings[-1]["id"] if self.readings else None

    def apply(self, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Fold one server message in; returns the reading it added, if any."""
        kind = message.get("type")
        data = message.get("data") or {}
        if kind == "initial":
            self.current = data.get("current")
            self.readings = list(data.get("history") or [])[-self.window_size :]
            return None
        if kind != "temperature":
            return None

        last_id = self.last_id
        if last_id is not None and data.get("id", 0) <= last_id:
            return None
        self.readings.append(data)
        del self.readings[: -self.window_size]
        self.current = data.get("temperature")
        return data

    def is_alert(self, reading: Dict[str, Any]) -> bool:
        return reading.get("temperature", 0.0) > self.alert_threshold


async def watch(
    url: str,
    feed: LiveFeed,
    on_event: EventHandler,
    reconnect_delay: float,
    max_readings: Optional[int] = None,
    connect: Callable[[str], Any] = websockets.connect,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Stream readings into ``feed``, re-attaching after every disconnect.

    Returns the number of live readings received once ``max_readings`` is
    reached; without a limit it runs until cancelled.
    """
    received = 0
    while True:
        reason: Optional[str] = None
        try:
            async with connect(url) as connection:
                on_event("connected", {"url": url})
                async for raw in connection:
                    message = json.loads(raw)
                    reading = feed.apply(message)
                    if message.get("type") == "initial":
                        on_event("initial", message.get("data") or {})
                        continue
                    if reading is None:
                        continue
                    received += 1
                    on_event("reading", reading)
                    if max_readings is not None and received >= max_readings:
                        return received
        except (OSError, WebSocketException) as exc:
            reason = str(exc) or exc.__class__.__name__
        on_event("disconnected", {"reason": reason, "retry_in": reconnect_delay})
        await sleep(reconnect_delay)
