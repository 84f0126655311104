"""Pydantic schemas for the sensor API payloads and the HTTP API layer."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import (
    AggregateBundle,
    AggregateStats,
    ChartPoint,
    ChartResult,
    DisplayMode,
    PaginatedMode,
    RawPoint,
    SampledMode,
    TimePeriod,
    TimePeriodMode,
    select_display_mode,
)

MAX_LIMIT = 1000


class AggregateStatsPayload(BaseModel):
    """Window statistics for one quantity as sent by the sensor API."""

    average: float
    maximum: float
    minimum: float
    count: int = Field(..., ge=0)

    def to_stats(self) -> AggregateStats:
        return AggregateStats(
            average=self.average,
            maximum=self.maximum,
            minimum=self.minimum,
            count=self.count,
        )


class AggregatedPayload(BaseModel):
    temperature: Optional[AggregateStatsPayload] = None
    humidity: Optional[AggregateStatsPayload] = None

    def to_bundle(self) -> AggregateBundle:
        return AggregateBundle(
            temperature=self.temperature.to_stats() if self.temperature else None,
            humidity=self.humidity.to_stats() if self.humidity else None,
        )


class SensorReadingPayload(BaseModel):
    """One reading. ``id == 0`` marks an empty slot."""

    id: int
    temperature: float
    humidity: float
    timestamp: str = Field(..., description="ISO-8601 instant; validated during assembly.")
    aggregated: Optional[AggregatedPayload] = None

    def to_raw_point(self) -> RawPoint:
        return RawPoint(
            id=self.id,
            temperature=self.temperature,
            humidity=self.humidity,
            timestamp=self.timestamp,
            aggregated=self.aggregated.to_bundle() if self.aggregated else None,
        )


class LatestReading(SensorReadingPayload):
    """Most recent reading returned by ``/api/temp/latest``."""


class AggregationMetadata(BaseModel):
    enabled: bool
    window_size: int = Field(..., ge=0)


class HistoryBatch(BaseModel):
    """A history response from the sensor API, echoing the query that made it."""

    data: List[SensorReadingPayload] = Field(default_factory=list)
    limit: int = 50
    offset: int = 0
    term: int = 0
    time_period: Optional[TimePeriod] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    total_count: Optional[int] = None
    returned_count: Optional[int] = None
    aggregation: Optional[AggregationMetadata] = None

    @field_validator("data", mode="before")
    @classmethod
    def _null_page_is_empty(cls, value: object) -> object:
        # The sensor API serializes a page without rows as `"data": null`.
        return [] if value is None else value

    def raw_points(self) -> List[RawPoint]:
        return [item.to_raw_point() for item in self.data]

    def display_mode(self) -> DisplayMode:
        aggregation = self.aggregation
        return select_display_mode(
            period=self.time_period,
            limit=self.limit,
            offset=self.offset,
            term=self.term,
            include_aggregates=bool(aggregation and aggregation.enabled),
            window_size=aggregation.window_size if aggregation else 0,
        )


class PaginatedModePayload(BaseModel):
    kind: Literal["paginated"] = "paginated"
    limit: int = Field(50, ge=1, le=MAX_LIMIT)
    offset: int = Field(0, ge=0)

    def to_mode(self) -> DisplayMode:
        return PaginatedMode(limit=self.limit, offset=self.offset)


class SampledModePayload(BaseModel):
    kind: Literal["sampled"] = "sampled"
    limit: int = Field(50, ge=1, le=MAX_LIMIT)
    term: int = Field(5, ge=1)

    def to_mode(self) -> DisplayMode:
        return SampledMode(limit=self.limit, term=self.term)


class TimePeriodModePayload(BaseModel):
    kind: Literal["time_period"] = "time_period"
    period: TimePeriod = TimePeriod.day
    include_aggregates: bool = False
    window_size: int = Field(100, ge=1)

    def to_mode(self) -> DisplayMode:
        return TimePeriodMode(
            period=self.period,
            include_aggregates=self.include_aggregates,
            window_size=self.window_size,
        )


ModePayload = Annotated[
    Union[PaginatedModePayload, SampledModePayload, TimePeriodModePayload],
    Field(discriminator="kind"),
]


class AssembleRequest(BaseModel):
    """Body for ``POST /charts``. Without ``mode`` the batch's echo decides."""

    batch: HistoryBatch
    mode: Optional[ModePayload] = None


class AxisDomainPayload(BaseModel):
    min: int
    max: int


class ChartPointPayload(BaseModel):
    """A chart point; aggregate keys are omitted when not set."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    formatted_label: str = Field(..., alias="formattedLabel")
    temperature: Optional[float]
    humidity: Optional[float]
    temp_avg: Optional[float] = Field(default=None, alias="tempAvg")
    temp_max: Optional[float] = Field(default=None, alias="tempMax")
    temp_min: Optional[float] = Field(default=None, alias="tempMin")
    humidity_avg: Optional[float] = Field(default=None, alias="humidityAvg")
    humidity_max: Optional[float] = Field(default=None, alias="humidityMax")
    humidity_min: Optional[float] = Field(default=None, alias="humidityMin")
    aggregate_count: Optional[int] = Field(default=None, alias="aggregateCount")

    @classmethod
    def from_point(cls, point: ChartPoint) -> "ChartPointPayload":
        aggregates = {
            name: getattr(point, name)
            for name in (
                "temp_avg",
                "temp_max",
                "temp_min",
                "humidity_avg",
                "humidity_max",
                "humidity_min",
                "aggregate_count",
            )
            if getattr(point, name) is not None
        }
        return cls(
            timestamp=point.timestamp.isoformat().replace("+00:00", "Z"),
            formatted_label=point.formatted_label,
            temperature=point.temperature,
            humidity=point.humidity,
            **aggregates,
        )


class ChartResponse(BaseModel):
    """Assembled chart, optionally flagged as a retained copy after an error."""

    model_config = ConfigDict(populate_by_name=True)

    series: List[ChartPointPayload]
    temperature_domain: AxisDomainPayload = Field(..., alias="temperatureDomain")
    humidity_domain: AxisDomainPayload = Field(..., alias="humidityDomain")
    tick_interval: int = Field(..., ge=0, alias="tickInterval")
    stale: bool = False
    error: Optional[str] = None

    @classmethod
    def from_result(
        cls, result: ChartResult, stale: bool = False, error: Optional[str] = None
    ) -> "ChartResponse":
        return cls(
            series=[ChartPointPayload.from_point(point) for point in result.series],
            temperature_domain=AxisDomainPayload(
                min=result.temperature_domain.min, max=result.temperature_domain.max
            ),
            humidity_domain=AxisDomainPayload(
                min=result.humidity_domain.min, max=result.humidity_domain.max
            ),
            tick_interval=result.tick_interval,
            stale=stale,
            error=error,
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
