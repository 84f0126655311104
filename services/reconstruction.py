"""Strategies that turn raw readings into a gap-aware chart series."""

from __future__ import annotations

import logging
from bisect import bisect_left
from datetime import datetime, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from models.records import AggregateStats, ChartPoint, RawPoint, TimePeriod
from services.interval import estimate_interval
from services.labels import format_label
from services.timestamps import from_millis, parse_instant, to_millis

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def round_reading(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _sorted_by_time(points: Iterable[RawPoint]) -> List[Tuple[int, RawPoint]]:
    keyed = [(to_millis(parse_instant(point.timestamp)), point) for point in points]
    keyed.sort(key=lambda item: item[0])
    return keyed


def _empty_point(instant: datetime, label: str) -> ChartPoint:
    return ChartPoint(
        timestamp=instant,
        formatted_label=label,
        temperature=None,
        humidity=None,
    )


def _reading_point(point: RawPoint, instant: datetime, label: str) -> ChartPoint:
    return ChartPoint(
        timestamp=instant,
        formatted_label=label,
        temperature=round_reading(point.temperature),
        humidity=round_reading(point.humidity),
    )


class RegularReconstructor:
    """Rebuild an evenly spaced timeline from loosely sampled readings.

    Used for offset and term queries, where the API makes no promise about
    slot spacing. The cadence is inferred from the data, then every tick
    between the first and last reading is filled with the reading at that
    exact instant, or else the earliest reading within half an interval, or
    else an empty slot.
    """

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self.tz = tz

    def reconstruct(self, points: Iterable[RawPoint]) -> List[ChartPoint]:
        """Matched readings are emitted at the tick timestamp and label, not their own."""
        ordered = _sorted_by_time(points)
        if not ordered:
            return []

        # Later duplicates overwrite earlier ones but keep the key's position.
        lookup: Dict[int, RawPoint] = {}
        for millis, point in ordered:
            lookup[millis] = point
        keys = list(lookup)

        interval = estimate_interval([millis for millis, _ in ordered])
        first, last = keys[0], keys[-1]

        series: List[ChartPoint] = []
        filled = 0
        for tick in range(first, last + 1, interval):
            instant = from_millis(tick)
            label = format_label(instant, None, self.tz)
            match = lookup.get(tick)
            if match is None:
                match = self._nearest_within_tolerance(keys, lookup, tick, interval)
            if match is None:
                series.append(_empty_point(instant, label))
                filled += 1
            else:
                series.append(_reading_point(match, instant, label))

        logger.debug(
            "Reconstructed regular series",
            extra={
                "point_count": len(series),
                "null_count": filled,
                "interval_ms": interval,
            },
        )
        return series

    @staticmethod
    def _nearest_within_tolerance(
        keys: List[int],
        lookup: Dict[int, RawPoint],
        tick: int,
        interval: int,
    ) -> Optional[RawPoint]:
        # Earliest key with |key - tick| <= interval / 2, same pick as an
        # ascending linear scan.
        index = bisect_left(keys, tick - interval // 2)
        if index == len(keys):
            return None
        candidate = keys[index]
        if 2 * abs(candidate - tick) <= interval:
            return lookup[candidate]
        return None


class SentinelPassThrough:
    """Decode server-slotted readings without re-gridding them.

    Time-period queries return exactly one reading per expected slot, with
    ``id == 0`` standing in for slots that had no data. Sentinels become
    empty points; real readings carry their aggregate bundle through.
    """

    def __init__(self, period: Optional[TimePeriod], tz: tzinfo = timezone.utc) -> None:
        self.period = period
        self.tz = tz

    def reconstruct(self, points: Iterable[RawPoint]) -> List[ChartPoint]:
        series: List[ChartPoint] = []
        sentinels = 0
        for millis, point in _sorted_by_time(points):
            instant = from_millis(millis)
            label = format_label(instant, self.period, self.tz)
            if point.is_sentinel:
                series.append(_empty_point(instant, label))
                sentinels += 1
                continue

            chart_point = _reading_point(point, instant, label)
            bundle = point.aggregated
            if bundle is not None:
                self._attach_temperature(chart_point, bundle.temperature)
                self._attach_humidity(chart_point, bundle.humidity)
            series.append(chart_point)

        logger.debug(
            "Decoded slotted series",
            extra={"point_count": len(series), "null_count": sentinels},
        )
        return series

    @staticmethod
    def _attach_temperature(point: ChartPoint, stats: Optional[AggregateStats]) -> None:
        if stats is None:
            return
        point.temp_avg = round_reading(stats.average)
        point.temp_max = round_reading(stats.maximum)
        point.temp_min = round_reading(stats.minimum)

    @staticmethod
    def _attach_humidity(point: ChartPoint, stats: Optional[AggregateStats]) -> None:
        if stats is None:
            return
        point.humidity_avg = round_reading(stats.average)
        point.humidity_max = round_reading(stats.maximum)
        point.humidity_min = round_reading(stats.minimum)
        # Both quantities share one window, so either count will do.
        point.aggregate_count = stats.count
