from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_RECONNECT_DELAY = 3.0
DEFAULT_ALERT_THRESHOLD = 35.0
DEFAULT_WINDOW_SIZE = 50

_BASE_URL_ENV = "API_BASE_URL"
_RECONNECT_DELAY_ENV = "CLI_RECONNECT_DELAY"
_ALERT_THRESHOLD_ENV = "CLI_ALERT_THRESHOLD"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str = DEFAULT_BASE_URL
    reconnect_delay: float = DEFAULT_RECONNECT_DELAY
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
    window_size: int = DEFAULT_WINDOW_SIZE

    @property
    def websocket_url(self) -> str:
        if self.base_url.startswith("https://"):
            return "wss://" + self.base_url[len("https://"):] + "/ws"
        if self.base_url.startswith("http://"):
            return "ws://" + self.base_url[len("http://"):] + "/ws"
        return self.base_url + "/ws"


def _read_float(value: Optional[str], default: float, allow_zero: bool = False) -> float:
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if parsed > 0 or (allow_zero and parsed == 0):
        return parsed
    return default


def load_config(
    base_url: Optional[str] = None,
    reconnect_delay: Optional[float] = None,
    alert_threshold: Optional[float] = None,
) -> CLIConfig:
    url = base_url or os.getenv(_BASE_URL_ENV) or DEFAULT_BASE_URL
    if reconnect_delay is None:
        reconnect_delay = _read_float(
            os.getenv(_RECONNECT_DELAY_ENV), DEFAULT_RECONNECT_DELAY, allow_zero=True
        )
    if alert_threshold is None:
        alert_threshold = _read_float(os.getenv(_ALERT_THRESHOLD_ENV), DEFAULT_ALERT_THRESHOLD)
    return CLIConfig(
        base_url=url.rstrip("/"),
        reconnect_delay=reconnect_delay,
        alert_threshold=alert_threshold,
    )
