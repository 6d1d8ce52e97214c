"""UTC timestamp helpers shared by run records and storage keys."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_timestamp(moment: datetime | None = None) -> str:
    """Render a UTC ISO-8601 timestamp with millisecond precision and a `Z` suffix."""
    current = (moment or datetime.now(UTC)).astimezone(UTC)
    return current.strftime("%Y-%m-%dT%H:%M:%S.") + f"{current.microsecond // 1000:03d}Z"
