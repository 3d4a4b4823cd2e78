"""Download helper on top of the history provider."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path

import pandas as pd

from coinapi_feed.data.history import CoinApiHistoryProvider
from coinapi_feed.domain.models import DataKind, HistoryRequest, Resolution, Symbol, TradeBar

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


class CoinApiDataDownloader:
    """Fetch trade bars for one symbol and date range."""

    def __init__(self, provider: CoinApiHistoryProvider) -> None:
        self.provider = provider

    def get(
        self,
        symbol: Symbol,
        resolution: Resolution,
        start_time_utc: datetime,
        end_time_utc: datetime,
    ) -> Iterator[TradeBar] | None:
        request = HistoryRequest(
            symbol=symbol,
            resolution=resolution,
            start_time_utc=start_time_utc,
            end_time_utc=end_time_utc,
            data_kind=DataKind.TRADE,
        )
        return self.provider.get_history(request)


def bars_to_frame(bars: Iterable[TradeBar]) -> pd.DataFrame:
    """Return OHLCV bars as a frame indexed by UTC bar start time."""
    rows = [
        {
            "time": bar.time,
            "open": bar.open,
            "high": bar.high,
            "low": bar.low,
            "close": bar.close,
            "volume": bar.volume,
        }
        for bar in bars
    ]
    if not rows:
        empty = pd.DataFrame(columns=OHLCV_COLUMNS, dtype=float)
        empty.index = pd.DatetimeIndex([], tz="UTC", name="time")
        return empty
    frame = pd.DataFrame(rows)
    frame.index = pd.to_datetime(frame.pop("time"), utc=True)
    frame.index.name = "time"
    return frame[OHLCV_COLUMNS].astype(float)


def write_csv(frame: pd.DataFrame, path: str | Path) -> Path:
    """Persist ``frame`` with a leading ``date`` column."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output = frame.reset_index()
    first_column = str(output.columns[0])
    if first_column != "date":
        output = output.rename(columns={first_column: "date"})
    output.to_csv(output_path, index=False)
    return output_path
