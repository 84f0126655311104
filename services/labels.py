"""X-axis label formatting and decimation."""

from __future__ import annotations

import math
from datetime import datetime, timezone, tzinfo
from typing import Dict, Optional

from models.records import TimePeriod

SHOW_ALL_THRESHOLD = 10
GENERIC_TICK_TARGET = 8
GENERIC_LABEL_FORMAT = "%m/%d %H:%M"

_LABEL_FORMATS: Dict[TimePeriod, str] = {
    TimePeriod.day: "%H:%M",
    TimePeriod.week: "%m/%d %H:%M",
    TimePeriod.month: "%m/%d",
    TimePeriod.year: "%Y/%m",
}

_TICK_TARGETS: Dict[TimePeriod, int] = {
    TimePeriod.day: 6,
    TimePeriod.week: 7,
    TimePeriod.month: 8,
    TimePeriod.year: 12,
}


def label_format(period: Optional[TimePeriod]) -> str:
    if period is None:
        return GENERIC_LABEL_FORMAT
    return _LABEL_FORMATS[period]


def format_label(
    instant: datetime,
    period: Optional[TimePeriod] = None,
    tz: tzinfo = timezone.utc,
) -> str:
    return instant.astimezone(tz).strftime(label_format(period))


def tick_interval(point_count: int, period: Optional[TimePeriod] = None) -> int:
    """Number of labels to skip between rendered ticks (0 shows every label)."""
    if point_count <= SHOW_ALL_THRESHOLD:
        return 0
    target = GENERIC_TICK_TARGET if period is None else _TICK_TARGETS[period]
    return math.ceil(point_count / target)
