"""CoinAPI history provider: validation, chunked retrieval and slices."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import tzinfo

from coinapi_feed.data.chunker import plan
from coinapi_feed.data.fetcher import CoinApiHistoryFetcher
from coinapi_feed.data.slices import create_slices
from coinapi_feed.data.symbol_mapper import CoinApiSymbolMapper
from coinapi_feed.domain.models import (
    DataKind,
    HistoryRequest,
    RejectionReason,
    Resolution,
    Slice,
    Symbol,
    TradeBar,
)
from coinapi_feed.logging import get_logger

_REJECTION_MESSAGES = {
    RejectionReason.UNSUPPORTED_SECURITY_TYPE: (
        "Invalid security type {security_type} or unmapped symbol"
    ),
    RejectionReason.TICK_RESOLUTION: "No historical ticks, only OHLCV timeseries",
    RejectionReason.QUOTE_DATA_KIND: "No historical QuoteBars, only TradeBars",
    RejectionReason.INVALID_TIME_RANGE: (
        "InvalidDateRange. The history request start date must precede "
        "the end date, no history returned"
    ),
}


class CoinApiHistoryProvider:
    """Serve trade-bar history for crypto symbols from CoinAPI.

    Single requests return a lazy bar iterator, or None when the request
    cannot be serviced. Each rejection reason is logged once per instance.
    """

    def __init__(
        self,
        fetcher: CoinApiHistoryFetcher,
        symbol_mapper: CoinApiSymbolMapper | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.symbol_mapper = symbol_mapper or CoinApiSymbolMapper()
        self.logger = get_logger("data.history")
        self._warned: set[RejectionReason] = set()

    @property
    def per_request_limit(self) -> int:
        return self.fetcher.per_request_limit

    def set_history_request_limit(self, limit: int) -> None:
        """Override the bars-per-request limit; meant for tests."""
        if limit <= 0:
            raise ValueError("history request limit must be positive")
        self.fetcher.per_request_limit = limit

    def validate(self, request: HistoryRequest) -> RejectionReason | None:
        """Return why ``request`` cannot be serviced, or None when it can."""
        if not self.symbol_mapper.can_subscribe(request.symbol):
            return RejectionReason.UNSUPPORTED_SECURITY_TYPE
        if request.resolution == Resolution.TICK:
            return RejectionReason.TICK_RESOLUTION
        if request.data_kind == DataKind.QUOTE:
            return RejectionReason.QUOTE_DATA_KIND
        if request.end_time_utc < request.start_time_utc:
            return RejectionReason.INVALID_TIME_RANGE
        return None

    def get_history(self, request: HistoryRequest) -> Iterator[TradeBar] | None:
        reason = self.validate(request)
        if reason is not None:
            self._warn_once(reason, request)
            return None
        vendor_symbol = self.symbol_mapper.get_vendor_symbol(request.symbol)
        return self._iter_bars(request, vendor_symbol)

    def get_slices(
        self,
        requests: Iterable[HistoryRequest],
        time_zone: tzinfo | str = "UTC",
    ) -> Iterator[Slice] | None:
        """Return slices over every serviceable request, or None when none is."""
        streams: list[Iterator[TradeBar]] = []
        for request in requests:
            history = self.get_history(request)
            if history is None:
                continue
            streams.append(history)
        if not streams:
            return None
        return create_slices(streams, time_zone)

    def close(self) -> None:
        self.fetcher.close()

    def _iter_bars(self, request: HistoryRequest, vendor_symbol: str) -> Iterator[TradeBar]:
        chunks = plan(
            request.start_time_utc,
            request.end_time_utc,
            request.resolution,
            self.per_request_limit,
        )
        for chunk in chunks:
            yield from self.fetcher.fetch(request.symbol, vendor_symbol, chunk, request.resolution)

    def _warn_once(self, reason: RejectionReason, request: HistoryRequest) -> None:
        if reason in self._warned:
            return
        self._warned.add(reason)
        message = _REJECTION_MESSAGES[reason].format(
            security_type=request.symbol.security_type,
        )
        self.logger.error("get_history | %s | %s", self._describe(request.symbol), message)

    @staticmethod
    def _describe(symbol: Symbol) -> str:
        return f"{symbol} ({symbol.security_type})"
