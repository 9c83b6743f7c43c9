"""Timestamp helpers for provider query parameters."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_timestamp(dt: datetime) -> str:
    """Format *dt* as ``YYYY-MM-DDTHH:MM:SSZ`` in UTC.

    Fractional seconds are dropped (truncated, never rounded up).  Naive
    datetimes are taken to be UTC already.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def date_window(now: datetime, days: int) -> tuple[str, str]:
    """Return ``(start, end)`` timestamps spanning exactly *days* whole days from *now*."""
    start = now.replace(microsecond=0)
    end = start + timedelta(days=days)
    return utc_timestamp(start), utc_timestamp(end)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)
