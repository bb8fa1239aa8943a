"""Fan-out of live readings to attached viewers."""

from __future__ import annotations

import asyncio
import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Protocol

from app.schemas import InitialData, InitialMessage, ReadingSchema, TemperatureMessage
from models.records import Reading
from storage.history import HistoryStore

logger = logging.getLogger(__name__)


class Viewer(Protocol):
    """Transport able to push a JSON message to one connected client."""

    viewer_id: str

    async def send(self, message: Dict[str, Any]) -> None:
        ...

    async def close(self) -> None:
        ...


class BroadcastChannel:
    """Keeps every attached viewer in step with the history store.

    ``attach`` and ``publish`` are serialized by one asyncio lock, so a viewer
    always receives its bootstrap before any push, and pushes arrive in the
    order ``publish`` was called. Membership itself is guarded by a thread
    lock so ``detach`` is safe from any context.
    """

    def __init__(
        self,
        history: HistoryStore,
        bootstrap_size: int = 20,
        fallback_current: Callable[[], float] = lambda: 0.0,
    ) -> None:
        self.history = history
        self.bootstrap_size = bootstrap_size
        self._fallback_current = fallback_current
        # dict keeps attach order for delivery
        self._viewers: Dict[int, Viewer] = {}
        self._members_lock = Lock()
        self._send_lock = asyncio.Lock()

    @property
    def viewer_count(self) -> int:
        with self._members_lock:
            return len(self._viewers)

    def is_attached(self, viewer: Viewer) -> bool:
        with self._members_lock:
            return id(viewer) in self._viewers

    async def attach(self, viewer: Viewer) -> bool:
        """Register ``viewer`` and deliver its bootstrap snapshot."""
        async with self._send_lock:
            with self._members_lock:
                self._viewers[id(viewer)] = viewer
                count = len(self._viewers)
            logger.info(
                "Viewer attached",
                extra={"viewer_id": viewer.viewer_id, "viewer_count": count},
            )
            return await self._deliver(viewer, self.bootstrap_message())

    def detach(self, viewer: Viewer) -> bool:
        """Remove ``viewer``; unknown or already detached viewers are ignored."""
        with self._members_lock:
            removed = self._viewers.pop(id(viewer), None)
            count = len(self._viewers)
        if removed is None:
            return False
        logger.info(
            "Viewer detached",
            extra={"viewer_id": viewer.viewer_id, "viewer_count": count},
        )
        return True

    async def publish(self, reading: Reading) -> int:
        """Push ``reading`` to every attached viewer; returns delivery count."""
        message = TemperatureMessage(data=ReadingSchema.from_reading(reading)).model_dump(
            mode="json"
        )
        delivered = 0
        async with self._send_lock:
            for viewer in self._members():
                # A viewer may detach while an earlier send is in flight.
                if not self.is_attached(viewer):
                    continue
                if await self._deliver(viewer, message):
                    delivered += 1
        return delivered

    def bootstrap_message(self) -> Dict[str, Any]:
        latest = self.history.latest()
        current = latest.temperature if latest is not None else self._fallback_current()
        recent = self.history.snapshot(self.bootstrap_size)
        return InitialMessage(
            data=InitialData(
                current=current,
                history=[ReadingSchema.from_reading(item) for item in recent],
            )
        ).model_dump(mode="json")

    async def close_all(self) -> None:
        """Detach every viewer and close its transport."""
        with self._members_lock:
            viewers = list(self._viewers.values())
            self._viewers.clear()
        for viewer in viewers:
            try:
                await viewer.close()
            except Exception as exc:  # noqa: BLE001 - transport may already be gone
                logger.debug(
                    "Viewer close failed",
                    extra={"viewer_id": viewer.viewer_id, "reason": repr(exc)},
                )

    def _members(self) -> List[Viewer]:
        with self._members_lock:
            return list(self._viewers.values())

    async def _deliver(self, viewer: Viewer, message: Dict[str, Any]) -> bool:
        try:
            await viewer.send(message)
        except Exception as exc:  # noqa: BLE001 - any transport failure drops the viewer
            logger.warning(
                "Delivery failed; dropping viewer",
                extra={"viewer_id": viewer.viewer_id, "reason": repr(exc)},
            )
            self.detach(viewer)
            return False
        return True
