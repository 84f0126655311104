"""Refresh sequencing and stale-while-error retention around the assembler.

Refreshes can be triggered by a timer and by users at the same time, and the
fetches may finish out of order. Every fetch is tagged with an increasing
request id; a response is only applied when it is newer than the last one
applied for the same display mode. When a fetch fails, the last good chart
for that mode is kept and returned flagged as stale. Only the most recently
used modes are remembered; older ones are evicted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from collections import OrderedDict
from typing import Callable, Optional

from app.schemas import HistoryBatch
from models.records import ChartResult, DisplayMode
from services.assembler import ChartAssembler, build_default_assembler
from services.errors import UpstreamError
from services.upstream import build_default_client

logger = logging.getLogger(__name__)

Fetcher = Callable[[DisplayMode], HistoryBatch]

DEFAULT_MAX_MODES = 16


@dataclass
class _ModeState:
    last_applied_id: int = 0
    result: Optional[ChartResult] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RefreshOutcome:
    request_id: int
    result: ChartResult
    applied: bool
    stale: bool = False
    error: Optional[str] = None


class RefreshCoordinator:
    """Serializes the effects of concurrent refreshes per display mode."""

    def __init__(
        self,
        fetch: Fetcher,
        assembler: ChartAssembler,
        max_modes: int = DEFAULT_MAX_MODES,
    ) -> None:
        if max_modes < 1:
            raise ValueError("max_modes must be at least 1")
        self.fetch = fetch
        self.assembler = assembler
        self.max_modes = max_modes
        self._states: OrderedDict[DisplayMode, _ModeState] = OrderedDict()
        self._next_id = 0
        self._lock = Lock()

    def begin(self) -> int:
        """Reserve the id for a new fetch."""
        with self._lock:
            self._next_id += 1
            return self._next_id

    def apply(self, request_id: int, mode: DisplayMode, batch: HistoryBatch) -> RefreshOutcome:
        """Assemble ``batch`` and keep it unless a newer response already landed."""
        result = self.assembler.assemble_batch(batch, mode)
        with self._lock:
            state = self._state_for(mode)
            if request_id <= state.last_applied_id:
                logger.info(
                    "Discarding out-of-order refresh",
                    extra={"request_id": request_id, "status": "stale"},
                )
                current = state.result if state.result is not None else result
                return RefreshOutcome(request_id=request_id, result=current, applied=False)
            state.last_applied_id = request_id
            state.result = result
            state.error = None
        return RefreshOutcome(request_id=request_id, result=result, applied=True)

    def fail(self, request_id: int, mode: DisplayMode, exc: Exception) -> RefreshOutcome:
        """Record a failed fetch, falling back to the last good chart.

        Raises ``exc`` again when there is nothing to fall back to.
        """
        message = str(exc)
        with self._lock:
            state = self._state_for(mode)
            if request_id > state.last_applied_id:
                state.error = message
            retained = state.result
        logger.warning(
            "Refresh failed",
            extra={"request_id": request_id, "status": "failed", "reason": message},
        )
        if retained is None:
            raise exc
        return RefreshOutcome(
            request_id=request_id,
            result=retained,
            applied=False,
            stale=True,
            error=message,
        )

    def tracked_modes(self) -> int:
        with self._lock:
            return len(self._states)

    def _state_for(self, mode: DisplayMode) -> _ModeState:
        # Caller holds the lock.
        state = self._states.get(mode)
        if state is None:
            state = _ModeState()
            self._states[mode] = state
            while len(self._states) > self.max_modes:
                self._states.popitem(last=False)
        else:
            self._states.move_to_end(mode)
        return state

    def refresh(self, mode: DisplayMode) -> RefreshOutcome:
        request_id = self.begin()
        try:
            batch = self.fetch(mode)
        except UpstreamError as exc:
            return self.fail(request_id, mode, exc)
        return self.apply(request_id, mode, batch)

    def current(self, mode: DisplayMode) -> Optional[ChartResult]:
        with self._lock:
            state = self._states.get(mode)
            return state.result if state else None

    def last_error(self, mode: DisplayMode) -> Optional[str]:
        with self._lock:
            state = self._states.get(mode)
            return state.error if state else None


@lru_cache
def build_default_coordinator() -> RefreshCoordinator:
    """Factory that wires the coordinator with the default client and assembler."""
    client = build_default_client()
    return RefreshCoordinator(fetch=client.fetch_series, assembler=build_default_assembler())
