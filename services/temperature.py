"""Lifecycle owner for the generator, history buffer and broadcast channel."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Optional

from app.schemas import CurrentTemperature, ServiceHealth
from models.records import Reading
from services.broadcast import BroadcastChannel, Viewer
from services.export import render_csv
from services.generator import ReadingGenerator
from settings import get_settings
from storage.history import HistoryStore

logger = logging.getLogger(__name__)


class TemperatureService:
    """Drives the periodic ``generate -> append -> publish`` cycle."""

    def __init__(
        self,
        generator: ReadingGenerator,
        history: HistoryStore,
        channel: BroadcastChannel,
        tick_interval: float = 5.0,
        environment: str = "development",
    ) -> None:
        self.generator = generator
        self.history = history
        self.channel = channel
        self.tick_interval = tick_interval
        self.environment = environment
        self._cycle_lock = asyncio.Lock()
        self._ticker: Optional[asyncio.Task[None]] = None
        self._started_at = time.monotonic()
        self._stopping = False

    @property
    def running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._started_at

    def seed(self) -> Optional[Reading]:
        """Store one reading without publishing it, if the buffer is empty."""
        if len(self.history):
            return None
        reading = self.generator.generate()
        self.history.append(reading)
        return reading

    def start(self) -> None:
        """Seed the buffer and start the timer on the running event loop."""
        if self.running:
            return
        self._stopping = False
        self._started_at = time.monotonic()
        self.seed()
        self._ticker = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            "Temperature simulation started",
            extra={"interval_s": self.tick_interval, "history_size": len(self.history)},
        )

    async def tick(self) -> Reading:
        async with self._cycle_lock:
            reading = self.generator.generate()
            self.history.append(reading)
            delivered = await self.channel.publish(reading)
        logger.debug(
            "Tick published",
            extra={
                "reading_id": reading.id,
                "temperature": reading.temperature,
                "viewer_count": delivered,
            },
        )
        return reading

    async def attach(self, viewer: Viewer) -> bool:
        # Shares the cycle lock so a reading lands in the bootstrap or in a
        # push, never both.
        async with self._cycle_lock:
            if self._stopping:
                return False
            return await self.channel.attach(viewer)

    def detach(self, viewer: Viewer) -> bool:
        return self.channel.detach(viewer)

    async def shutdown(self) -> None:
        """Stop the timer, then release viewer transports."""
        self._stopping = True
        ticker, self._ticker = self._ticker, None
        if ticker is not None:
            ticker.cancel()
            try:
                await ticker
            except asyncio.CancelledError:
                pass
        await self.channel.close_all()
        logger.info("Temperature simulation stopped")

    def current(self) -> CurrentTemperature:
        latest = self.history.latest()
        value = latest.temperature if latest is not None else self.generator.current_temperature
        return CurrentTemperature(current=value, timestamp=datetime.now(timezone.utc))

    def recent(self, limit: Optional[int] = None) -> List[Reading]:
        return self.history.snapshot(limit)

    def export_csv(self) -> str:
        return render_csv(self.history.snapshot())

    def health(self) -> ServiceHealth:
        return ServiceHealth(
            uptime=round(self.uptime_seconds, 3),
            readings=len(self.history),
            websocket_clients=self.channel.viewer_count,
            environment=self.environment,
        )

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            try:
                await self.tick()
            except Exception:  # noqa: BLE001 - keep the timer alive
                logger.exception("Tick failed")


@lru_cache
def build_default_service() -> TemperatureService:
    """Factory that wires the service from environment settings."""
    settings = get_settings()
    generator = ReadingGenerator(initial_temperature=settings.initial_temperature)
    history = HistoryStore(capacity=settings.history_capacity)
    channel = BroadcastChannel(
        history,
        bootstrap_size=settings.bootstrap_history_size,
        fallback_current=lambda: generator.current_temperature,
    )
    return TemperatureService(
        generator=generator,
        history=history,
        channel=channel,
        tick_interval=settings.tick_interval_seconds,
        environment=settings.environment,
    )
