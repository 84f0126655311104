"""Exceptions raised by the chart services."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a raw reading cannot be interpreted, e.g. a bad timestamp."""

    def __init__(self, message: str, value: object = None) -> None:
        super().__init__(message)
        self.value = value


class UpstreamError(RuntimeError):
    """Raised when the sensor API cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
