from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from coinapi_feed.data.fetcher import CoinApiHistoryFetcher
from coinapi_feed.data.history import CoinApiHistoryProvider
from coinapi_feed.data.resolution import round_down

PERIODS = {
    "1SEC": timedelta(seconds=1),
    "1MIN": timedelta(minutes=1),
    "1HRS": timedelta(hours=1),
    "1DAY": timedelta(days=1),
}


class FakeResponse:
    def __init__(self, body: Any, status_code: int = 200, headers: dict[str, str] | None = None):
        self.text = body if isinstance(body, str) else json.dumps(body)
        self.status_code = status_code
        self.headers = headers or {}
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeCoinApiSession:
    """In-memory CoinAPI OHLCV endpoint.

    Returns every bar whose start lies in [time_start, time_end], truncated
    to ``limit`` rows. ``overrides`` maps a chunk start to a canned response.
    """

    def __init__(self, headers: dict[str, str] | None = None) -> None:
        self.headers = headers or {
            "x-ratelimit-limit": "1000",
            "x-ratelimit-used": "10",
            "x-ratelimit-remaining": "990",
        }
        self.calls: list[dict[str, Any]] = []
        self.responses: list[FakeResponse] = []
        self.overrides: dict[datetime, FakeResponse] = {}
        self.closed = False

    def get(self, url: str, params: dict[str, str], headers: dict[str, str], timeout: float):
        self.calls.append(
            {"url": url, "params": dict(params), "headers": dict(headers), "timeout": timeout}
        )
        start = self.parse_time(params["time_start"])
        end = self.parse_time(params["time_end"])
        if start in self.overrides:
            response = self.overrides[start]
        else:
            step = PERIODS[params["period_id"]]
            records = list(self.records(start, end, step, int(params["limit"])))
            response = FakeResponse(records, headers=self.headers)
        self.responses.append(response)
        return response

    def close(self) -> None:
        self.closed = True

    @staticmethod
    def parse_time(value: str) -> datetime:
        return datetime.fromisoformat(value).replace(tzinfo=UTC)

    @staticmethod
    def records(start: datetime, end: datetime, step: timedelta, limit: int) -> Iterator[dict]:
        cursor = start
        count = 0
        while cursor <= end and count < limit:
            base = 100.0 + (cursor - round_down(cursor, timedelta(days=1))) / step % 50
            yield {
                "time_period_start": cursor.strftime("%Y-%m-%dT%H:%M:%S.0000000Z"),
                "time_period_end": (cursor + step).strftime("%Y-%m-%dT%H:%M:%S.0000000Z"),
                "price_open": base,
                "price_high": base + 2.0,
                "price_low": base - 1.0,
                "price_close": base + 1.0,
                "volume_traded": 3.5,
                "trades_count": 7,
            }
            cursor += step
            count += 1


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    logger = logging.getLogger("coinapi_feed")
    handlers = list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def session() -> FakeCoinApiSession:
    return FakeCoinApiSession()


@pytest.fixture
def provider(session: FakeCoinApiSession) -> CoinApiHistoryProvider:
    fetcher = CoinApiHistoryFetcher(api_key="test-key", session=session, timeout=5.0)
    history = CoinApiHistoryProvider(fetcher)
    history.set_history_request_limit(100)
    return history
