"""Core market data domain models."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum


class SecurityType(StrEnum):
    """Asset classes a symbol can belong to."""

    CRYPTO = "crypto"
    CRYPTO_FUTURE = "crypto_future"
    EQUITY = "equity"
    FOREX = "forex"


class Resolution(StrEnum):
    """Bar aggregation granularity."""

    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"


class DataKind(StrEnum):
    """Kind of market data a history request asks for."""

    TRADE = "trade"
    QUOTE = "quote"


class RejectionReason(StrEnum):
    """Why a history request cannot be serviced."""

    UNSUPPORTED_SECURITY_TYPE = "unsupported_security_type"
    TICK_RESOLUTION = "tick_resolution"
    QUOTE_DATA_KIND = "quote_data_kind"
    INVALID_TIME_RANGE = "invalid_time_range"


@dataclass(frozen=True)
class Symbol:
    """Canonical instrument identifier."""

    ticker: str
    market: str
    security_type: SecurityType = SecurityType.CRYPTO

    def __post_init__(self) -> None:
        object.__setattr__(self, "ticker", self.ticker.strip().upper())
        object.__setattr__(self, "market", self.market.strip().lower())

    def __str__(self) -> str:
        return f"{self.ticker}:{self.market}"


@dataclass(frozen=True)
class HistoryRequest:
    """Caller-supplied history request."""

    symbol: Symbol
    resolution: Resolution
    start_time_utc: datetime
    end_time_utc: datetime
    data_kind: DataKind = DataKind.TRADE

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_time_utc", ensure_utc(self.start_time_utc))
        object.__setattr__(self, "end_time_utc", ensure_utc(self.end_time_utc))


@dataclass(frozen=True)
class TradeBar:
    """OHLCV aggregate over one resolution-aligned period."""

    time: datetime
    symbol: Symbol
    open: float
    high: float
    low: float
    close: float
    volume: float
    period: timedelta

    @property
    def end_time(self) -> datetime:
        return self.time + self.period


@dataclass(frozen=True)
class Chunk:
    """Contiguous sub-range of a history request sized for one vendor call.

    Only the last chunk of a plan owns the bar starting at ``end``.
    """

    start: datetime
    end: datetime
    is_last: bool = False


@dataclass(frozen=True)
class VendorErrorPayload:
    """Structured error body returned by the vendor."""

    message: str


@dataclass(frozen=True)
class Slice:
    """Time-aligned bars across every requested symbol."""

    time: datetime
    utc_time: datetime
    bars: Mapping[Symbol, TradeBar] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.bars)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.bars)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.bars

    def __getitem__(self, symbol: Symbol) -> TradeBar:
        return self.bars[symbol]


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, reading naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
