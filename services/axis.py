"""Y-axis domain computation for temperature and humidity."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Optional, Sequence

from models.records import AxisDomain, ChartPoint

DEFAULT_TEMPERATURE_DOMAIN = AxisDomain(10, 40)
DEFAULT_HUMIDITY_DOMAIN = AxisDomain(20, 80)

EXPANSION_RATIO = 0.1


@dataclass(frozen=True)
class _Quantity:
    primary: Callable[[ChartPoint], Optional[float]]
    maximum: Callable[[ChartPoint], Optional[float]]
    minimum: Callable[[ChartPoint], Optional[float]]
    floor: Optional[float] = None
    ceiling: Optional[float] = None


_TEMPERATURE = _Quantity(
    primary=lambda point: point.temperature,
    maximum=lambda point: point.temp_max,
    minimum=lambda point: point.temp_min,
)

_HUMIDITY = _Quantity(
    primary=lambda point: point.humidity,
    maximum=lambda point: point.humidity_max,
    minimum=lambda point: point.humidity_min,
    floor=0.0,
    ceiling=100.0,
)


def _round_half_away(value: float) -> int:
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class AxisRangeCalculator:
    """Compute chart domains that keep the default band unless data leaves it.

    A bound only moves when a reading (or an aggregate max/min attached to a
    reading) falls outside the default. It then moves past the breaching value
    by 10% of that value's magnitude. Humidity is kept within ``[0, 100]``.
    """

    def __init__(
        self,
        temperature_default: AxisDomain = DEFAULT_TEMPERATURE_DOMAIN,
        humidity_default: AxisDomain = DEFAULT_HUMIDITY_DOMAIN,
    ) -> None:
        self.temperature_default = temperature_default
        self.humidity_default = humidity_default

    def temperature_domain(self, series: Sequence[ChartPoint]) -> AxisDomain:
        return self._domain(series, _TEMPERATURE, self.temperature_default)

    def humidity_domain(self, series: Sequence[ChartPoint]) -> AxisDomain:
        return self._domain(series, _HUMIDITY, self.humidity_default)

    @staticmethod
    def _domain(
        series: Sequence[ChartPoint], quantity: _Quantity, default: AxisDomain
    ) -> AxisDomain:
        candidates: List[float] = []
        for point in series:
            value = quantity.primary(point)
            if value is None:
                continue
            candidates.append(value)
            for extra in (quantity.maximum(point), quantity.minimum(point)):
                if extra is not None:
                    candidates.append(extra)

        if not candidates:
            return default

        actual_min = min(candidates)
        actual_max = max(candidates)

        new_min: float = default.min
        if actual_min < default.min:
            new_min = actual_min - abs(actual_min) * EXPANSION_RATIO
        new_max: float = default.max
        if actual_max > default.max:
            new_max = actual_max + abs(actual_max) * EXPANSION_RATIO

        if quantity.floor is not None:
            new_min = max(quantity.floor, new_min)
        if quantity.ceiling is not None:
            new_max = min(quantity.ceiling, new_max)

        return AxisDomain(_round_half_away(new_min), _round_half_away(new_max))
