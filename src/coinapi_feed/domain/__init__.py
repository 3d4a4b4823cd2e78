"""Domain models for market data history."""

from .models import (
    Chunk,
    DataKind,
    HistoryRequest,
    RejectionReason,
    Resolution,
    SecurityType,
    Slice,
    Symbol,
    TradeBar,
    VendorErrorPayload,
    ensure_utc,
)

__all__ = [
    "Chunk",
    "DataKind",
    "HistoryRequest",
    "RejectionReason",
    "Resolution",
    "SecurityType",
    "Slice",
    "Symbol",
    "TradeBar",
    "VendorErrorPayload",
    "ensure_utc",
]
