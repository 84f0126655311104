from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.refresh",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Refresh failed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    line = formatter.format(_record(request_id=7, status="failed", reason=None, unrelated="x"))

    assert line == "WARNING Refresh failed | request_id=7 status=failed"


def test_formatter_without_context_is_unchanged() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["point_count"])

    assert formatter.format(_record(request_id=7)) == "Refresh failed"
