"""CoinAPI OHLCV history fetcher."""

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any

import pandas as pd
import requests

from coinapi_feed.data.rate_limit import RateLimitTracer
from coinapi_feed.data.resolution import to_duration, to_vendor_period
from coinapi_feed.domain.models import (
    Chunk,
    Resolution,
    Symbol,
    TradeBar,
    VendorErrorPayload,
)
from coinapi_feed.errors import MalformedResponseError, VendorRequestError
from coinapi_feed.logging import get_logger

API_KEY_HEADER = "X-CoinAPI-Key"
REQUIRED_FIELDS = (
    "time_period_start",
    "price_open",
    "price_high",
    "price_low",
    "price_close",
    "volume_traded",
)


class CoinApiHistoryFetcher:
    """Fetch one chunk of OHLCV bars per REST call.

    Uses endpoint:
    GET /v1/ohlcv/{symbol_id}/history

    Each call builds its own headers and params, so one fetcher can serve
    several symbols concurrently. Failures are not retried.
    """

    def __init__(
        self,
        api_key: str,
        rest_url: str = "https://rest.coinapi.io",
        per_request_limit: int = 10000,
        timeout: float = 30.0,
        session: requests.Session | None = None,
        tracer: RateLimitTracer | None = None,
    ) -> None:
        self.api_key = api_key
        self.rest_url = rest_url.rstrip("/")
        self.per_request_limit = per_request_limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self.tracer = tracer or RateLimitTracer()
        self.logger = get_logger("data.fetcher")

    def fetch(
        self,
        symbol: Symbol,
        vendor_symbol: str,
        chunk: Chunk,
        resolution: Resolution,
    ) -> list[TradeBar]:
        """Return the bars of one chunk in vendor order; empty when the vendor has none."""
        time_start = self._format_time(chunk.start)
        time_end = self._format_time(chunk.end)
        url = f"{self.rest_url}/v1/ohlcv/{vendor_symbol}/history"
        params = {
            "period_id": to_vendor_period(resolution),
            "limit": str(self.per_request_limit),
            "time_start": time_start,
            "time_end": time_end,
        }
        self.logger.debug(
            "request | %s | %s | %s - %s",
            vendor_symbol,
            params["period_id"],
            time_start,
            time_end,
        )
        try:
            response = self.session.get(
                url,
                params=params,
                headers={API_KEY_HEADER: self.api_key},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise VendorRequestError(
                f"CoinAPI request timed out after {self.timeout}s for {vendor_symbol}"
            ) from exc
        except requests.RequestException as exc:
            raise VendorRequestError(f"CoinAPI request failed for {vendor_symbol}: {exc}") from exc

        try:
            self.tracer.observe(response.headers)
            records = self._parse_records(response.text, response.status_code)
        finally:
            response.close()

        period = to_duration(resolution)
        bars = [
            bar
            for bar in (self._to_bar(record, symbol, period) for record in records)
            if self._in_chunk(bar, chunk)
        ]
        if not bars:
            self.logger.error(
                "API returned no data for the requested period [%s - %s] for symbol [%s]",
                time_start,
                time_end,
                symbol,
            )
        return bars

    @staticmethod
    def _in_chunk(bar: TradeBar, chunk: Chunk) -> bool:
        # time_end is inclusive on the vendor side; the next chunk starts there.
        if chunk.is_last:
            return chunk.start <= bar.time <= chunk.end
        return chunk.start <= bar.time < chunk.end

    def _parse_records(self, body: str, status_code: int) -> list[dict[str, Any]]:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(
                f"CoinAPI response is not JSON (status {status_code})"
            ) from exc

        if isinstance(payload, list) and all(self._is_bar_record(item) for item in payload):
            return payload

        error = self._parse_error(payload)
        if error is not None:
            raise VendorRequestError(error.message, status_code=status_code)
        raise MalformedResponseError(
            f"CoinAPI response is neither bar data nor an error payload (status {status_code})"
        )

    @staticmethod
    def _is_bar_record(item: Any) -> bool:
        return isinstance(item, dict) and all(name in item for name in REQUIRED_FIELDS)

    @staticmethod
    def _parse_error(payload: Any) -> VendorErrorPayload | None:
        if not isinstance(payload, dict):
            return None
        message = payload.get("error")
        if not isinstance(message, str):
            return None
        return VendorErrorPayload(message=message)

    @staticmethod
    def _to_bar(record: dict[str, Any], symbol: Symbol, period: timedelta) -> TradeBar:
        try:
            return TradeBar(
                time=CoinApiHistoryFetcher._parse_time(record["time_period_start"]),
                symbol=symbol,
                open=float(record["price_open"]),
                high=float(record["price_high"]),
                low=float(record["price_low"]),
                close=float(record["price_close"]),
                volume=float(record["volume_traded"]),
                period=period,
            )
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(f"Invalid OHLCV record for {symbol}: {record}") from exc

    @staticmethod
    def _parse_time(value: str) -> datetime:
        stamp = pd.Timestamp(value)
        if pd.isna(stamp):
            raise ValueError(f"missing period start: {value!r}")
        if stamp.tzinfo is None:
            stamp = stamp.tz_localize("UTC")
        else:
            stamp = stamp.tz_convert("UTC")
        return stamp.floor("us").to_pydatetime()

    @staticmethod
    def _format_time(value: datetime) -> str:
        return value.strftime("%Y-%m-%dT%H:%M:%S")

    def close(self) -> None:
        self.session.close()
