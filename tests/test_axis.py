"""Unit tests for y-axis domain computation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from models.records import AxisDomain, ChartPoint
from services.axis import AxisRangeCalculator


def _point(
    temperature: Optional[float],
    humidity: Optional[float],
    **aggregates: float,
) -> ChartPoint:
    return ChartPoint(
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        formatted_label="00:00",
        temperature=temperature,
        humidity=humidity,
        **aggregates,
    )


def test_empty_series_uses_defaults() -> None:
    calculator = AxisRangeCalculator()

    assert calculator.temperature_domain([]) == AxisDomain(10, 40)
    assert calculator.humidity_domain([]) == AxisDomain(20, 80)


def test_all_empty_slots_use_defaults() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(None, None), _point(None, None)]

    assert calculator.temperature_domain(series) == AxisDomain(10, 40)
    assert calculator.humidity_domain(series) == AxisDomain(20, 80)


def test_values_inside_defaults_keep_defaults() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(15.0, 30.0), _point(35.0, 70.0), _point(25.0, 50.0)]

    assert calculator.temperature_domain(series) == AxisDomain(10, 40)
    assert calculator.humidity_domain(series) == AxisDomain(20, 80)


def test_low_temperature_expands_lower_bound_only() -> None:
    calculator = AxisRangeCalculator()

    # -5 - |-5| * 0.1 = -5.5, rounded away from zero
    assert calculator.temperature_domain([_point(-5.0, 50.0)]) == AxisDomain(-6, 40)


def test_high_temperature_expands_upper_bound_only() -> None:
    calculator = AxisRangeCalculator()

    assert calculator.temperature_domain([_point(45.0, 50.0)]) == AxisDomain(10, 50)


def test_temperature_has_no_clamp() -> None:
    calculator = AxisRangeCalculator()

    assert calculator.temperature_domain([_point(150.0, 50.0)]) == AxisDomain(10, 165)


def test_aggregate_band_widens_domain() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(20.0, 50.0, temp_max=30.0, temp_min=2.0)]

    # 2 - 0.2 = 1.8
    assert calculator.temperature_domain(series) == AxisDomain(2, 40)


def test_humidity_aggregate_above_hundred_is_clamped() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(22.0, 70.0, humidity_max=105.0, humidity_min=60.0)]

    assert calculator.humidity_domain(series) == AxisDomain(20, 100)


def test_humidity_lower_bound_never_below_zero() -> None:
    calculator = AxisRangeCalculator()

    assert calculator.humidity_domain([_point(22.0, 0.0)]) == AxisDomain(0, 80)
    assert calculator.humidity_domain([_point(22.0, 5.0)]) == AxisDomain(5, 80)


def test_quantities_are_evaluated_independently() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(None, 90.0), _point(None, 40.0)]

    assert calculator.temperature_domain(series) == AxisDomain(10, 40)
    assert calculator.humidity_domain(series) == AxisDomain(20, 99)


def test_aggregates_on_empty_slots_are_ignored() -> None:
    calculator = AxisRangeCalculator()
    series = [_point(None, None, temp_max=90.0), _point(20.0, 50.0)]

    assert calculator.temperature_domain(series) == AxisDomain(10, 40)


def test_custom_defaults_are_respected() -> None:
    calculator = AxisRangeCalculator(temperature_default=AxisDomain(0, 30))

    assert calculator.temperature_domain([_point(5.0, 50.0)]) == AxisDomain(0, 30)
