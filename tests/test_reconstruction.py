"""Unit tests for the two series reconstruction strategies."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.records import AggregateBundle, AggregateStats, RawPoint, TimePeriod
from services.errors import InvalidInputError
from services.interval import estimate_interval
from services.reconstruction import (
    RegularReconstructor,
    SentinelPassThrough,
    round_reading,
)

_BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _at(seconds: int) -> str:
    return (_BASE + timedelta(seconds=seconds)).isoformat().replace("+00:00", "Z")


def _reading(
    seconds: int,
    temperature: float = 22.0,
    humidity: float = 45.0,
    point_id: int = 1,
    aggregated: AggregateBundle | None = None,
) -> RawPoint:
    return RawPoint(
        id=point_id,
        temperature=temperature,
        humidity=humidity,
        timestamp=_at(seconds),
        aggregated=aggregated,
    )


def test_regular_empty_input_returns_empty_series() -> None:
    assert RegularReconstructor().reconstruct([]) == []


def test_regular_single_point_yields_single_slot() -> None:
    series = RegularReconstructor().reconstruct([_reading(0, temperature=19.04)])

    assert len(series) == 1
    assert series[0].temperature == 19.0
    assert series[0].timestamp == _BASE


def test_regular_two_points_do_not_gain_interior_gaps() -> None:
    series = RegularReconstructor().reconstruct([_reading(0), _reading(300)])

    assert len(series) == 2
    assert all(point.temperature is not None for point in series)
    assert series[1].timestamp == _BASE + timedelta(seconds=300)


def test_regular_fills_missing_ticks_with_empty_slots() -> None:
    points = [_reading(0), _reading(60), _reading(120), _reading(300)]

    series = RegularReconstructor().reconstruct(points)

    assert [point.timestamp for point in series] == [
        _BASE + timedelta(seconds=s) for s in (0, 60, 120, 180, 240, 300)
    ]
    assert [point.is_empty for point in series] == [False, False, False, True, True, False]
    empty = series[3]
    assert empty.temperature is None and empty.humidity is None
    assert empty.formatted_label == "01/01 00:03"


def test_regular_matches_readings_within_half_interval() -> None:
    points = [
        _reading(0, temperature=20.0),
        _reading(65, temperature=21.0),
        _reading(120, temperature=22.0),
        _reading(180, temperature=23.0),
    ]

    series = RegularReconstructor().reconstruct(points)

    assert len(series) == 4
    assert series[1].temperature == 21.0
    assert series[1].timestamp == _BASE + timedelta(seconds=60)
    assert series[1].formatted_label == "01/01 00:01"


def test_regular_prefers_earliest_reading_in_tolerance() -> None:
    points = [
        _reading(0, temperature=20.0),
        _reading(40, temperature=11.0),
        _reading(80, temperature=33.0),
        _reading(120, temperature=22.0),
        _reading(180, temperature=23.0),
        _reading(240, temperature=24.0),
        _reading(300, temperature=25.0),
    ]

    series = RegularReconstructor().reconstruct(points)

    assert len(series) == 6
    assert series[1].temperature == 11.0
    assert [point.temperature for point in series] == [20.0, 11.0, 22.0, 23.0, 24.0, 25.0]


def test_regular_sorts_unordered_input() -> None:
    points = [_reading(120, temperature=3.0), _reading(0, temperature=1.0), _reading(60, temperature=2.0)]

    series = RegularReconstructor().reconstruct(points)

    assert [point.temperature for point in series] == [1.0, 2.0, 3.0]


def test_regular_duplicate_timestamp_keeps_later_reading() -> None:
    points = [_reading(0, temperature=20.0), _reading(0, temperature=25.0), _reading(60)]

    series = RegularReconstructor().reconstruct(points)

    assert len(series) == 2
    assert series[0].temperature == 25.0


def test_regular_never_carries_aggregates() -> None:
    bundle = AggregateBundle(temperature=AggregateStats(21.0, 25.0, 18.0, 10))

    series = RegularReconstructor().reconstruct([_reading(0, aggregated=bundle)])

    assert series[0].temp_avg is None
    assert series[0].aggregate_count is None


@pytest.mark.parametrize(
    "offsets",
    [
        [0, 60, 130, 190],
        [0, 5, 10, 15, 20, 400],
        [0, 30, 95, 150, 151, 900, 1000],
        [0, 7200, 14400],
        [0, 59, 121, 180, 241, 299, 600, 601],
    ],
)
def test_regular_length_follows_interval(offsets: list[int]) -> None:
    millis = [s * 1000 for s in offsets]
    interval = estimate_interval(millis)

    series = RegularReconstructor().reconstruct([_reading(s) for s in offsets])

    assert len(series) == (millis[-1] - millis[0]) // interval + 1
    stamps = [point.timestamp for point in series]
    assert stamps == sorted(set(stamps))


def test_regular_rejects_malformed_timestamp() -> None:
    bad = RawPoint(id=1, temperature=20.0, humidity=40.0, timestamp="yesterday-ish")

    with pytest.raises(InvalidInputError) as excinfo:
        RegularReconstructor().reconstruct([_reading(0), bad])

    assert excinfo.value.value == "yesterday-ish"


def test_sentinel_slot_decodes_to_empty_point() -> None:
    bundle = AggregateBundle(humidity=AggregateStats(50.0, 60.0, 40.0, 12))
    sentinel = _reading(0, temperature=999.0, humidity=999.0, point_id=0, aggregated=bundle)

    (point,) = SentinelPassThrough(TimePeriod.day).reconstruct([sentinel])

    assert point.temperature is None
    assert point.humidity is None
    assert point.humidity_avg is None
    assert point.aggregate_count is None
    assert point.formatted_label == "00:00"


def test_sentinel_pass_through_keeps_aggregates() -> None:
    bundle = AggregateBundle(
        temperature=AggregateStats(average=21.26, maximum=25.0, minimum=18.0, count=40),
        humidity=AggregateStats(average=55.04, maximum=61.96, minimum=48.0, count=38),
    )

    (point,) = SentinelPassThrough(TimePeriod.week).reconstruct(
        [_reading(0, temperature=21.26, humidity=55.04, aggregated=bundle)]
    )

    assert point.temperature == 21.3
    assert point.humidity == 55.0
    assert (point.temp_avg, point.temp_max, point.temp_min) == (21.3, 25.0, 18.0)
    assert (point.humidity_avg, point.humidity_max, point.humidity_min) == (55.0, 62.0, 48.0)
    assert point.aggregate_count == 38


def test_sentinel_pass_through_count_comes_from_humidity_bundle() -> None:
    bundle = AggregateBundle(temperature=AggregateStats(21.0, 25.0, 18.0, 40))

    (point,) = SentinelPassThrough(TimePeriod.day).reconstruct([_reading(0, aggregated=bundle)])

    assert point.temp_avg == 21.0
    assert point.humidity_avg is None
    assert point.aggregate_count is None


def test_sentinel_pass_through_trusts_server_slots() -> None:
    points = [_reading(600), _reading(0), _reading(60, point_id=0)]

    series = SentinelPassThrough(TimePeriod.month).reconstruct(points)

    assert [point.timestamp for point in series] == [
        _BASE,
        _BASE + timedelta(seconds=60),
        _BASE + timedelta(seconds=600),
    ]
    assert [point.is_empty for point in series] == [False, True, False]
    assert [point.formatted_label for point in series] == ["01/01"] * 3


def test_sentinel_pass_through_rejects_malformed_timestamp() -> None:
    bad = RawPoint(id=0, temperature=0.0, humidity=0.0, timestamp="2024-13-45T00:00:00Z")

    with pytest.raises(InvalidInputError):
        SentinelPassThrough(TimePeriod.day).reconstruct([bad])


@pytest.mark.parametrize(
    ("value", "expected"),
    [(21.26, 21.3), (21.25, 21.3), (21.24, 21.2), (-3.25, -3.3), (0.0, 0.0)],
)
def test_round_reading_rounds_half_away_from_zero(value: float, expected: float) -> None:
    assert round_reading(value) == expected
