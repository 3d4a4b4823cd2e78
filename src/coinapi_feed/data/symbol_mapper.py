"""Map canonical symbols to CoinAPI symbol ids."""

from __future__ import annotations

from coinapi_feed.domain.models import SecurityType, Symbol
from coinapi_feed.errors import DataProviderError


class CoinApiSymbolMapper:
    """Build ``{EXCHANGE}_{SPOT|PERP}_{BASE}_{QUOTE}`` ids from canonical symbols."""

    exchange_ids = {
        "coinbase": "COINBASE",
        "bitfinex": "BITFINEX",
        "binance": "BINANCE",
        "kraken": "KRAKEN",
        "bybit": "BYBIT",
        "okx": "OKEX",
    }
    instrument_types = {
        SecurityType.CRYPTO: "SPOT",
        SecurityType.CRYPTO_FUTURE: "PERP",
    }
    quote_currencies = ("USDT", "USDC", "BUSD", "USD", "EUR", "GBP", "BTC", "ETH")

    def can_subscribe(self, symbol: Symbol) -> bool:
        return (
            symbol.security_type in self.instrument_types
            and symbol.market in self.exchange_ids
            and self._split_pair(symbol.ticker) is not None
        )

    def get_vendor_symbol(self, symbol: Symbol) -> str:
        pair = self._split_pair(symbol.ticker)
        if not self.can_subscribe(symbol) or pair is None:
            raise DataProviderError(
                f"No CoinAPI mapping for {symbol} ({symbol.security_type})"
            )
        base, quote = pair
        exchange = self.exchange_ids[symbol.market]
        instrument = self.instrument_types[symbol.security_type]
        return f"{exchange}_{instrument}_{base}_{quote}"

    @classmethod
    def _split_pair(cls, ticker: str) -> tuple[str, str] | None:
        compact = ticker.strip().upper().replace("/", "").replace("-", "")
        for quote in cls.quote_currencies:
            if compact.endswith(quote) and len(compact) > len(quote):
                return compact[: -len(quote)], quote
        return None
