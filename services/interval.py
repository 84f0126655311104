"""Sampling-interval inference for irregular timestamp sequences."""

from __future__ import annotations

from typing import Sequence

DEFAULT_INTERVAL_MS = 60_000
MIN_INTERVAL_MS = 10_000
MAX_INTERVAL_MS = 3_600_000


def estimate_interval(timestamps_ms: Sequence[int]) -> int:
    """Return a representative spacing, in milliseconds, for sorted timestamps.

    The consecutive deltas are sorted and the one at index ``len // 2`` is
    taken. For an even number of deltas this is the upper of the two middle
    values rather than their mean; the gap-fill tolerance is derived from this
    value, so it is kept as is. The result is clamped to ``[10s, 1h]`` so that
    bursts and multi-day outages do not set the cadence.
    """
    deltas = sorted(
        later - earlier for earlier, later in zip(timestamps_ms, timestamps_ms[1:])
    )
    if not deltas:
        return DEFAULT_INTERVAL_MS

    chosen = deltas[len(deltas) // 2]
    return max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, chosen))
