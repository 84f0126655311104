from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_API_BASE_URL_ENV = "SENSOR_API_BASE_URL"
_API_TIMEOUT_ENV = "SENSOR_API_TIMEOUT"
_LABEL_TIMEZONE_ENV = "CHART_LABEL_TIMEZONE"
_AGGREGATE_WINDOW_ENV = "DEFAULT_AGGREGATE_WINDOW"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    api_timeout: float
    label_timezone: str
    aggregate_window: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_float(name: str, default: float) -> float:
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
    return parsed if parsed > 0 else default


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
        api_base_url=_read_str_env(_API_BASE_URL_ENV, "http://localhost:38333").rstrip("/"),
        api_timeout=_read_positive_float(_API_TIMEOUT_ENV, 10.0),
        label_timezone=_read_str_env(_LABEL_TIMEZONE_ENV, "UTC"),
        aggregate_window=_read_positive_int(_AGGREGATE_WINDOW_ENV, 100),
        log_level=_read_log_level("INFO"),
    )
