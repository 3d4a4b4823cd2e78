"""Custom exceptions for clearer error handling across the package."""

from __future__ import annotations


class CoinFeedError(Exception):
    """Base exception for all package-specific errors."""


class ConfigError(CoinFeedError):
    """Raised when environment configuration is invalid or missing."""


class DataProviderError(CoinFeedError):
    """Raised when market data retrieval fails."""


class VendorRequestError(DataProviderError):
    """Raised when the vendor answers with an error instead of bar data."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MalformedResponseError(DataProviderError):
    """Raised when a response body is neither bar data nor a vendor error."""
