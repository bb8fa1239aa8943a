from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_TICK_INTERVAL_ENV = "TICK_INTERVAL_SECONDS"
_HISTORY_CAPACITY_ENV = "HISTORY_CAPACITY"
_BOOTSTRAP_SIZE_ENV = "BOOTSTRAP_HISTORY_SIZE"
_HISTORY_LIMIT_ENV = "HISTORY_DEFAULT_LIMIT"
_INITIAL_TEMPERATURE_ENV = "INITIAL_TEMPERATURE"
_ENVIRONMENT_ENV = "APP_ENV"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    tick_interval_seconds: float
    history_capacity: int
    bootstrap_history_size: int
    history_default_limit: int
    initial_temperature: float
    environment: str
    cors_allow_origins: Tuple[str, ...]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float, positive: bool = False) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        tick_interval_seconds=_read_float(_TICK_INTERVAL_ENV, 5.0, positive=True),
        history_capacity=_read_positive_int(_HISTORY_CAPACITY_ENV, 100),
        bootstrap_history_size=_read_positive_int(_BOOTSTRAP_SIZE_ENV, 20),
        history_default_limit=_read_positive_int(_HISTORY_LIMIT_ENV, 50),
        initial_temperature=_read_float(_INITIAL_TEMPERATURE_ENV, 28.5),
        environment=_read_str_env(_ENVIRONMENT_ENV, "development"),
        cors_allow_origins=_read_origins(("*",)),
        log_level=_read_log_level("INFO"),
    )
