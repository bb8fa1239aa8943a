"""Pydantic schemas for the HTTP and WebSocket layers."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

from models.records import Reading


class ReadingSchema(BaseModel):
    """Wire representation of a single reading."""

    temperature: float = Field(..., description="Degrees Celsius, one decimal place.")
    timestamp: datetime
    id: int = Field(..., description="Strictly increasing ordering key.")

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingSchema":
        return cls(
            temperature=reading.temperature,
            timestamp=reading.timestamp,
            id=reading.id,
        )


class InitialData(BaseModel):
    current: float
    history: List[ReadingSchema] = Field(default_factory=list)


class InitialMessage(BaseModel):
    """Bootstrap snapshot sent once when a viewer attaches."""

    type: Literal["initial"] = "initial"
    data: InitialData


class TemperatureMessage(BaseModel):
    """Live push sent to every attached viewer on each tick."""

    type: Literal["temperature"] = "temperature"
    data: ReadingSchema


class CurrentTemperature(BaseModel):
    current: float
    timestamp: datetime


class ServiceHealth(BaseModel):
    """Operational counters for the running service."""

    status: str = "ok"
    uptime: float = Field(..., ge=0, description="Seconds since the service started.")
    readings: int = Field(..., ge=0)
    websocket_clients: int = Field(..., ge=0)
    environment: str
