"""Datetime helpers."""

from __future__ import annotations

import os
import time

import pendulum

DEFAULT_TZ = "UTC"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_in_tz() -> pendulum.DateTime:
    tz = pendulum.timezone(timezone_name())
    return pendulum.now(tz)


def iso_timestamp() -> str:
    """Build timestamp in ISO-8601, stamped into artifacts and reports."""
    return now_in_tz().to_iso8601_string()


def elapsed_label(started: float) -> str:
    return f"{time.monotonic() - started:.1f}s"
