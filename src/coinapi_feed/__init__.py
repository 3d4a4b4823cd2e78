"""CoinAPI historical market data for trading engines."""

__version__ = "0.1.0"
