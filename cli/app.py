from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError

from app.schemas import MAX_LIMIT, ChartResponse, HistoryBatch
from cli.config import CLIConfig, load_config
from cli.render import render_chart, render_latest
from models.records import DisplayMode, TimePeriod, select_display_mode
from services.assembler import ChartAssembler, resolve_timezone
from services.errors import InvalidInputError, UpstreamError
from services.upstream import SensorApiClient
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: SensorApiClient
    assembler: ChartAssembler


app = typer.Typer(
    help="Fetch sensor history and shape it into chart-ready series.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load_batch(path: Path) -> HistoryBatch:
    try:
        return HistoryBatch.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise typer.BadParameter(f"{path} is not a valid history batch: {exc}") from exc


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Sensor API base URL (defaults to SENSOR_API_BASE_URL env or http://localhost:38333).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds before a sensor API request is abandoned.",
    ),
    tz: Optional[str] = typer.Option(
        None,
        "--tz",
        help="IANA timezone for axis labels (defaults to CHART_LABEL_TIMEZONE env or UTC).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout, label_timezone=tz)
    client = SensorApiClient(base_url=config.base_url, timeout=config.timeout)
    assembler = ChartAssembler(tz=resolve_timezone(config.label_timezone))
    ctx.obj = CLIState(config=config, client=client, assembler=assembler)
    ctx.call_on_close(client.close)


@app.command("chart")
def chart_command(
    ctx: typer.Context,
    period: Optional[TimePeriod] = typer.Option(
        None,
        "--period",
        "-p",
        help="Time period to chart; omit for offset/term queries.",
    ),
    limit: int = typer.Option(50, "--limit", min=1, max=MAX_LIMIT, help="Readings to fetch."),
    offset: int = typer.Option(0, "--offset", min=0, help="Readings to skip from the latest."),
    term: int = typer.Option(0, "--term", min=0, help="Take every N-th reading (0 disables)."),
    aggregates: bool = typer.Option(
        False,
        "--aggregates/--no-aggregates",
        help="Request windowed average/max/min with each slot.",
    ),
    window: Optional[int] = typer.Option(
        None,
        "--window",
        min=1,
        help="Aggregate window size (±N points; defaults to DEFAULT_AGGREGATE_WINDOW env or 100).",
    ),
    input_path: Optional[Path] = typer.Option(
        None,
        "--input",
        "-i",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Read a saved history batch (JSON) instead of calling the API.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the chart as JSON."),
) -> None:
    """Assemble a history chart and print its series and axes."""
    state = _get_state(ctx)

    if input_path is not None:
        batch = _load_batch(input_path)
        mode: Optional[DisplayMode] = None
    else:
        mode = select_display_mode(
            period=period,
            limit=limit,
            offset=offset,
            term=term,
            include_aggregates=aggregates,
            window_size=window or get_settings().aggregate_window,
        )
        try:
            batch = state.client.fetch_series(mode)
        except UpstreamError as exc:
            _fail(f"Failed to fetch historical data: {exc}")

    try:
        result = state.assembler.assemble_batch(batch, mode)
    except InvalidInputError as exc:
        _fail(f"History batch contains invalid data: {exc}")

    if as_json:
        typer.echo(json.dumps(ChartResponse.from_result(result).to_json(), indent=2))
        return
    render_chart(result)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recent reading."""
    state = _get_state(ctx)
    try:
        reading = state.client.get_latest()
    except UpstreamError as exc:
        _fail(f"Failed to fetch latest reading: {exc}")
    render_latest(reading)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the sensor API is reachable."""
    state = _get_state(ctx)
    try:
        payload = state.client.check_health()
    except UpstreamError as exc:
        _fail(f"Sensor API is unavailable: {exc}")
    typer.secho(f"Sensor API at {state.config.base_url}: {payload.get('status', 'unknown')}", fg=typer.colors.GREEN)
