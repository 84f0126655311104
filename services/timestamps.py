"""Strict instant parsing shared by the reconstruction strategies."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Union

from services.errors import InvalidInputError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def parse_instant(value: Union[datetime, str]) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are taken to be UTC. Anything that is not a datetime or an
    ISO-8601 string raises :class:`InvalidInputError`.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            raise InvalidInputError("Timestamp is empty.", value)
        if candidate.endswith(("Z", "z")):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError as exc:
            raise InvalidInputError(f"Invalid timestamp {value!r}.", value) from exc
    else:
        raise InvalidInputError(f"Invalid timestamp {value!r}.", value)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_millis(instant: datetime) -> int:
    return (instant - _EPOCH) // _ONE_MS


def from_millis(millis: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)
