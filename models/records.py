"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class TimePeriod(str, Enum):
    """Time windows the upstream API slices into fixed slots."""

    day = "1d"
    week = "1w"
    month = "1m"
    year = "1y"


@dataclass(slots=True)
class AggregateStats:
    """Window statistics for one quantity, computed upstream."""

    average: float
    maximum: float
    minimum: float
    count: int


@dataclass(slots=True)
class AggregateBundle:
    temperature: Optional[AggregateStats] = None
    humidity: Optional[AggregateStats] = None


@dataclass(slots=True)
class RawPoint:
    """A single reading as returned by the sensor API.

    ``id == 0`` marks an empty slot; its numeric fields carry no meaning.
    ``timestamp`` is either an aware ``datetime`` or an ISO-8601 string.
    """

    id: int
    temperature: float
    humidity: float
    timestamp: Union[datetime, str]
    aggregated: Optional[AggregateBundle] = None

    @property
    def is_sentinel(self) -> bool:
        return self.id == 0


@dataclass(frozen=True, slots=True)
class PaginatedMode:
    """Latest ``limit`` readings, skipping ``offset``."""

    limit: int = 50
    offset: int = 0


@dataclass(frozen=True, slots=True)
class SampledMode:
    """``limit`` readings taken every ``term`` ids back from the latest."""

    limit: int = 50
    term: int = 5


@dataclass(frozen=True, slots=True)
class TimePeriodMode:
    """One slot per expected timestamp across ``period``, sentinel-filled."""

    period: TimePeriod = TimePeriod.day
    include_aggregates: bool = False
    window_size: int = 100


DisplayMode = Union[PaginatedMode, SampledMode, TimePeriodMode]


def select_display_mode(
    period: Optional[TimePeriod] = None,
    limit: int = 50,
    offset: int = 0,
    term: int = 0,
    include_aggregates: bool = False,
    window_size: int = 100,
) -> DisplayMode:
    """Pick the display mode for a history query.

    A time period wins over everything else; otherwise a positive ``term``
    selects sampling and the remaining case is plain pagination.
    """
    if period is not None:
        return TimePeriodMode(
            period=period,
            include_aggregates=include_aggregates,
            window_size=window_size,
        )
    if term > 0:
        return SampledMode(limit=limit, term=term)
    return PaginatedMode(limit=limit, offset=offset)


@dataclass(slots=True)
class ChartPoint:
    """A display-ready slot. ``None`` values render as "no data"."""

    timestamp: datetime
    formatted_label: str
    temperature: Optional[float]
    humidity: Optional[float]
    temp_avg: Optional[float] = None
    temp_max: Optional[float] = None
    temp_min: Optional[float] = None
    humidity_avg: Optional[float] = None
    humidity_max: Optional[float] = None
    humidity_min: Optional[float] = None
    aggregate_count: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.temperature is None and self.humidity is None


@dataclass(frozen=True, slots=True)
class AxisDomain:
    min: int
    max: int


@dataclass(slots=True)
class ChartResult:
    """Everything a charting surface needs to draw one history chart."""

    series: List[ChartPoint] = field(default_factory=list)
    temperature_domain: AxisDomain = AxisDomain(10, 40)
    humidity_domain: AxisDomain = AxisDomain(20, 80)
    tick_interval: int = 0
