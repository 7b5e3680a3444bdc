"""Logical trial-day arithmetic.

A trial day starts at a fixed early-morning local hour instead of midnight,
so a late-night session is booked against the day it started on.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

DEFAULT_CUTOFF_HOUR = 4


def _local(now: datetime) -> datetime:
    if now.tzinfo is None or now.tzinfo.utcoffset(now) is None:
        return now
    return now.astimezone()


def logical_day(now: datetime, cutoff_hour: int = DEFAULT_CUTOFF_HOUR) -> date:
    """Return the trial day ``now`` belongs to."""
    local = _local(now)
    if local.hour < cutoff_hour:
        return local.date() - timedelta(days=1)
    return local.date()


def logical_day_key(now: datetime, cutoff_hour: int = DEFAULT_CUTOFF_HOUR) -> str:
    return logical_day(now, cutoff_hour).isoformat()


def logical_day_start(now: datetime, cutoff_hour: int = DEFAULT_CUTOFF_HOUR) -> datetime:
    """Return the instant at which the trial day containing ``now`` began."""
    local = _local(now)
    day = logical_day(local, cutoff_hour)
    return local.replace(
        year=day.year,
        month=day.month,
        day=day.day,
        hour=cutoff_hour,
        minute=0,
        second=0,
        microsecond=0,
    )


__all__ = ["DEFAULT_CUTOFF_HOUR", "logical_day", "logical_day_key", "logical_day_start"]
