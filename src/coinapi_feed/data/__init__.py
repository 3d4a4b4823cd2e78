"""CoinAPI history retrieval components."""

from .chunker import plan
from .downloader import CoinApiDataDownloader, bars_to_frame, write_csv
from .fetcher import CoinApiHistoryFetcher
from .history import CoinApiHistoryProvider
from .rate_limit import RateLimitTracer, RateLimitUsage
from .resolution import round_down, round_up, to_duration, to_vendor_period
from .slices import create_slices
from .symbol_mapper import CoinApiSymbolMapper

__all__ = [
    "CoinApiDataDownloader",
    "CoinApiHistoryFetcher",
    "CoinApiHistoryProvider",
    "CoinApiSymbolMapper",
    "RateLimitTracer",
    "RateLimitUsage",
    "bars_to_frame",
    "create_slices",
    "plan",
    "round_down",
    "round_up",
    "to_duration",
    "to_vendor_period",
    "write_csv",
]
