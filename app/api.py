"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import MAX_LIMIT, AssembleRequest, ChartResponse
from models.records import TimePeriod, select_display_mode
from services.assembler import ChartAssembler, build_default_assembler
from services.errors import InvalidInputError, UpstreamError
from services.refresh import RefreshCoordinator, build_default_coordinator
from settings import get_settings

router = APIRouter()


def get_assembler() -> ChartAssembler:
    return build_default_assembler()


def get_coordinator() -> RefreshCoordinator:
    return build_default_coordinator()


@router.post(
    "/charts",
    summary="Assemble a chart from a history batch supplied by the caller.",
    status_code=status.HTTP_200_OK,
)
async def assemble_chart(
    request: AssembleRequest,
    assembler: ChartAssembler = Depends(get_assembler),
) -> Dict[str, Any]:
    mode = request.mode.to_mode() if request.mode is not None else None
    try:
        result = assembler.assemble_batch(request.batch, mode)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return ChartResponse.from_result(result).to_json()


@router.get(
    "/charts/history",
    summary="Fetch history from the sensor API and assemble it into a chart.",
    status_code=status.HTTP_200_OK,
)
def history_chart(
    limit: int = Query(50, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
    term: int = Query(0, ge=0),
    time_period: Optional[TimePeriod] = Query(None),
    include_aggregates: bool = Query(False),
    aggregate_window: Optional[int] = Query(None, ge=1),
    coordinator: RefreshCoordinator = Depends(get_coordinator),
) -> Dict[str, Any]:
    mode = select_display_mode(
        period=time_period,
        limit=limit,
        offset=offset,
        term=term,
        include_aggregates=include_aggregates,
        window_size=aggregate_window or get_settings().aggregate_window,
    )
    try:
        outcome = coordinator.refresh(mode)
    except UpstreamError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Sensor API returned malformed data: {exc}",
        ) from exc
    return ChartResponse.from_result(
        outcome.result, stale=outcome.stale, error=outcome.error
    ).to_json()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
