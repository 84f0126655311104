"""Chart assembly: reconstruction, axis domains and label decimation."""

from __future__ import annotations

import logging
from datetime import timezone, tzinfo
from functools import lru_cache
from typing import TYPE_CHECKING, Iterable, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from models.records import (
    ChartResult,
    DisplayMode,
    PaginatedMode,
    RawPoint,
    SampledMode,
    TimePeriodMode,
)
from services.axis import AxisRangeCalculator
from services.labels import tick_interval
from services.reconstruction import RegularReconstructor, SentinelPassThrough
from settings import get_settings

if TYPE_CHECKING:
    from app.schemas import HistoryBatch

logger = logging.getLogger(__name__)


class ChartAssembler:
    """Pure chart-shaping component that can be unit tested in isolation."""

    def __init__(
        self,
        tz: tzinfo = timezone.utc,
        axis: Optional[AxisRangeCalculator] = None,
    ) -> None:
        self.tz = tz
        self.axis = axis or AxisRangeCalculator()

    def assemble(self, points: Iterable[RawPoint], mode: DisplayMode) -> ChartResult:
        if isinstance(mode, TimePeriodMode):
            period = mode.period
            strategy: Union[RegularReconstructor, SentinelPassThrough] = (
                SentinelPassThrough(period, self.tz)
            )
        elif isinstance(mode, (PaginatedMode, SampledMode)):
            period = None
            strategy = RegularReconstructor(self.tz)
        else:
            raise TypeError(f"Unsupported display mode {mode!r}.")

        series = strategy.reconstruct(points)
        result = ChartResult(
            series=series,
            temperature_domain=self.axis.temperature_domain(series),
            humidity_domain=self.axis.humidity_domain(series),
            tick_interval=tick_interval(len(series), period),
        )
        logger.debug(
            "Assembled chart",
            extra={
                "mode": type(mode).__name__,
                "period": period.value if period else None,
                "point_count": len(series),
                "tick_interval": result.tick_interval,
            },
        )
        return result

    def assemble_batch(
        self, batch: "HistoryBatch", mode: Optional[DisplayMode] = None
    ) -> ChartResult:
        """Assemble an upstream batch, deriving the mode from its query echo."""
        return self.assemble(batch.raw_points(), mode or batch.display_mode())


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown label timezone, falling back to UTC",
            extra={"invalid_value": name},
        )
        return timezone.utc


@lru_cache
def build_default_assembler() -> ChartAssembler:
    """Factory that wires the assembler with the configured label timezone."""
    settings = get_settings()
    return ChartAssembler(tz=resolve_timezone(settings.label_timezone))
