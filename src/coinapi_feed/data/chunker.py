"""Split a history range into vendor-sized request chunks."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime

from coinapi_feed.data.resolution import round_down, round_up, to_duration
from coinapi_feed.domain.models import Chunk, Resolution, ensure_utc


def plan(
    start_time_utc: datetime,
    end_time_utc: datetime,
    resolution: Resolution,
    per_request_limit: int,
) -> Iterator[Chunk]:
    """Yield contiguous chunks covering the rounded range.

    The start is rounded up and the end rounded down to the resolution grid.
    Each chunk spans at most ``per_request_limit`` bars and the last chunk
    ends exactly on the rounded end. A range that rounds to zero width
    yields nothing. Naive bounds are read as UTC.
    """
    if per_request_limit <= 0:
        raise ValueError("per_request_limit must be positive")

    step = to_duration(resolution)
    span = step * per_request_limit
    last_bar_start = round_down(ensure_utc(end_time_utc), step)
    cursor = round_up(ensure_utc(start_time_utc), step)

    while cursor < last_bar_start:
        chunk_end = min(cursor + span, last_bar_start)
        yield Chunk(start=cursor, end=chunk_end, is_last=chunk_end == last_bar_start)
        cursor = chunk_end
