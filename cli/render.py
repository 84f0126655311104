from __future__ import annotations

from typing import Any, Iterable, Optional

import typer

from app.schemas import LatestReading
from models.records import ChartPoint, ChartResult

NO_DATA = "no data"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _fmt(value: Optional[float], unit: str) -> str:
    return NO_DATA if value is None else f"{value}{unit}"


def _point_line(point: ChartPoint, show_label: bool) -> str:
    label = point.formatted_label if show_label else ""
    line = (
        f"  {label:<12} {point.timestamp.isoformat():<26} "
        f"{_fmt(point.temperature, '°C'):>9} {_fmt(point.humidity, '%'):>9}"
    )
    if point.temp_avg is not None:
        line += f"  T avg/max/min {point.temp_avg}/{point.temp_max}/{point.temp_min}"
    if point.humidity_avg is not None:
        line += f"  H avg/max/min {point.humidity_avg}/{point.humidity_max}/{point.humidity_min}"
    if point.aggregate_count is not None:
        line += f"  (n={point.aggregate_count})"
    return line


def render_chart(result: ChartResult) -> None:
    echo_heading("Chart")
    empty = sum(1 for point in result.series if point.is_empty)
    echo_key_values(
        [
            ("points", len(result.series)),
            ("empty_slots", empty),
            ("temperature_domain", f"[{result.temperature_domain.min}, {result.temperature_domain.max}]"),
            ("humidity_domain", f"[{result.humidity_domain.min}, {result.humidity_domain.max}]"),
            ("tick_interval", result.tick_interval),
        ]
    )

    typer.echo()
    echo_heading("Series")
    if not result.series:
        typer.echo("No historical data available.")
        return
    # Mirror the axis: only every (tick_interval + 1)-th label is shown.
    step = result.tick_interval + 1
    for index, point in enumerate(result.series):
        typer.echo(_point_line(point, show_label=index % step == 0))


def render_latest(reading: LatestReading) -> None:
    echo_heading("Latest Reading")
    echo_key_values(
        [
            ("id", reading.id),
            ("timestamp", reading.timestamp),
            ("temperature", f"{reading.temperature:.1f}°C"),
            ("humidity", f"{reading.humidity:.1f}%"),
        ]
    )
