"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from coinapi_feed.errors import ConfigError

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    coinapi_api_key: str = ""
    coinapi_rest_url: str = "https://rest.coinapi.io"
    history_request_limit: int = 10000
    request_timeout_seconds: float = 30.0
    log_level: str = "INFO"
    log_file: str | None = None
    historical_data_dir: str = "historical_data"

    @classmethod
    def from_env(cls) -> Self:
        """Build settings from environment variables and an optional .env file."""
        load_dotenv()
        try:
            settings = cls(
                coinapi_api_key=os.getenv("COINAPI_API_KEY", "").strip(),
                coinapi_rest_url=os.getenv(
                    "COINAPI_REST_URL", "https://rest.coinapi.io"
                ).strip(),
                history_request_limit=int(os.getenv("COINAPI_HISTORY_LIMIT", "10000")),
                request_timeout_seconds=float(os.getenv("COINAPI_TIMEOUT_SECONDS", "30")),
                log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
                log_file=os.getenv("LOG_FILE", "").strip() or None,
                historical_data_dir=os.getenv("HISTORICAL_DATA_DIR", "historical_data").strip(),
            )
        except ValueError as exc:
            raise ConfigError(
                "One or more numeric environment variables are invalid. "
                "Check COINAPI_HISTORY_LIMIT and COINAPI_TIMEOUT_SECONDS."
            ) from exc
        return settings.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        return replace(self, **kwargs).validate()

    def require_api_key(self) -> str:
        if not self.coinapi_api_key:
            raise ConfigError("COINAPI_API_KEY is required to request CoinAPI history.")
        return self.coinapi_api_key

    def validate(self) -> Self:
        """Validate settings and raise clear config errors."""
        if self.history_request_limit <= 0:
            raise ConfigError("COINAPI_HISTORY_LIMIT must be a positive integer.")
        if self.request_timeout_seconds <= 0:
            raise ConfigError("COINAPI_TIMEOUT_SECONDS must be a positive number.")
        if self.log_level not in LOG_LEVELS:
            supported = ", ".join(sorted(LOG_LEVELS))
            raise ConfigError(f"LOG_LEVEL must be one of: {supported}.")
        if not self.coinapi_rest_url.startswith(("http://", "https://")):
            raise ConfigError("COINAPI_REST_URL must be an http(s) URL.")
        return self
