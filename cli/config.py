from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import get_settings

DEFAULT_TIMEOUT = 10.0

_BASE_URL_ENV = "SENSOR_API_BASE_URL"
_TIMEOUT_ENV = "SENSOR_API_TIMEOUT"
_TIMEZONE_ENV = "CHART_LABEL_TIMEZONE"


@dataclass(frozen=True)
class CLIConfig:
    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    label_timezone: str = "UTC"


def _read_float(value: Optional[str], default: float) -> float:
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


def load_config(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    label_timezone: Optional[str] = None,
) -> CLIConfig:
    """Resolve CLI options, falling back to the environment and then settings."""
    settings = get_settings()
    url = base_url or os.getenv(_BASE_URL_ENV) or settings.api_base_url
    if timeout is None or timeout <= 0:
        timeout = _read_float(os.getenv(_TIMEOUT_ENV), settings.api_timeout)
    zone = label_timezone or os.getenv(_TIMEZONE_ENV) or settings.label_timezone
    return CLIConfig(base_url=url.rstrip("/"), timeout=timeout, label_timezone=zone)
