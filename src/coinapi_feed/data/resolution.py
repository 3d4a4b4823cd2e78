"""Resolution to vendor period mapping and grid rounding."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from coinapi_feed.domain.models import Resolution

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_VENDOR_PERIODS = {
    Resolution.SECOND: "1SEC",
    Resolution.MINUTE: "1MIN",
    Resolution.HOUR: "1HRS",
    Resolution.DAILY: "1DAY",
}

_DURATIONS = {
    Resolution.SECOND: timedelta(seconds=1),
    Resolution.MINUTE: timedelta(minutes=1),
    Resolution.HOUR: timedelta(hours=1),
    Resolution.DAILY: timedelta(days=1),
}

SUPPORTED_RESOLUTIONS = frozenset(_VENDOR_PERIODS)


def to_vendor_period(resolution: Resolution) -> str:
    """Return the vendor period id, e.g. ``1MIN``."""
    return _VENDOR_PERIODS[resolution]


def to_duration(resolution: Resolution) -> timedelta:
    """Return the length of one bar at ``resolution``."""
    return _DURATIONS[resolution]


def round_down(value: datetime, step: timedelta) -> datetime:
    """Floor ``value`` onto the epoch-aligned grid of ``step``."""
    return value - (value - EPOCH) % step


def round_up(value: datetime, step: timedelta) -> datetime:
    """Ceil ``value`` onto the epoch-aligned grid of ``step``."""
    floored = round_down(value, step)
    if floored == value:
        return value
    return floored + step
