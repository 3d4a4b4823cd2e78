"""Assemble per-request bar streams into time-aligned slices."""

from __future__ import annotations

import heapq
from collections.abc import Iterable, Iterator
from datetime import tzinfo
from itertools import groupby
from operator import attrgetter
from zoneinfo import ZoneInfo

from coinapi_feed.domain.models import Slice, TradeBar

_end_time = attrgetter("end_time")


def resolve_time_zone(value: tzinfo | str) -> tzinfo:
    if isinstance(value, str):
        return ZoneInfo(value)
    return value


def create_slices(
    streams: Iterable[Iterable[TradeBar]],
    time_zone: tzinfo | str = "UTC",
) -> Iterator[Slice]:
    """Merge time-ordered bar streams and group bars closing at the same instant.

    Streams are pulled lazily; each must already be ordered by bar time.
    A slice holds at most one bar per symbol, the last one seen wins.
    """
    zone = resolve_time_zone(time_zone)
    merged = heapq.merge(*streams, key=_end_time)
    for end_time, bars in groupby(merged, key=_end_time):
        yield Slice(
            time=end_time.astimezone(zone),
            utc_time=end_time,
            bars={bar.symbol: bar for bar in bars},
        )
