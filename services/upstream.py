"""HTTP client for the sensor API that produces raw history batches."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from app.schemas import MAX_LIMIT, HistoryBatch, LatestReading
from models.records import DisplayMode, PaginatedMode, SampledMode, TimePeriodMode
from services.errors import UpstreamError
from settings import get_settings

logger = logging.getLogger(__name__)


def history_params(mode: DisplayMode) -> Dict[str, Any]:
    """Translate a display mode into ``/api/temp/history`` query parameters."""
    if isinstance(mode, TimePeriodMode):
        params: Dict[str, Any] = {"time_period": mode.period.value}
        if mode.include_aggregates:
            params["include_aggregates"] = "true"
            params["aggregate_window"] = mode.window_size
        return params
    if isinstance(mode, SampledMode):
        return {"limit": min(mode.limit, MAX_LIMIT), "term": mode.term}
    if isinstance(mode, PaginatedMode):
        return {"limit": min(mode.limit, MAX_LIMIT), "offset": mode.offset, "term": 0}
    raise TypeError(f"Unsupported display mode {mode!r}.")


class SensorApiClient:
    """Minimal client for the sensor API. Retries are left to the caller."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def fetch_series(self, mode: DisplayMode) -> HistoryBatch:
        payload = self._get_json("/api/temp/history", params=history_params(mode))
        try:
            return HistoryBatch.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError(f"Unexpected history payload: {exc}") from exc

    def get_latest(self) -> LatestReading:
        payload = self._get_json("/api/temp/latest")
        try:
            return LatestReading.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamError(f"Unexpected latest payload: {exc}") from exc

    def check_health(self) -> Dict[str, Any]:
        return self._get_json("/health")

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                self._describe_status_error(exc), status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Sensor API request to {path} failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"Sensor API returned invalid JSON for {path}.") from exc

    @staticmethod
    def _describe_status_error(exc: httpx.HTTPStatusError) -> str:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error") if isinstance(data, dict) else None
        except ValueError:
            detail = exc.response.text.strip()
        return (
            f"Sensor API responded with status {exc.response.status_code}: "
            f"{detail or 'no detail provided.'}"
        )


@lru_cache
def build_default_client() -> SensorApiClient:
    """Factory that wires the client from environment settings."""
    settings = get_settings()
    return SensorApiClient(base_url=settings.api_base_url, timeout=settings.api_timeout)
