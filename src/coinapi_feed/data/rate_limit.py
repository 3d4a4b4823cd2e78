"""Vendor REST quota tracing."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from coinapi_feed.logging import get_logger

LIMIT_HEADER = "x-ratelimit-limit"
USED_HEADER = "x-ratelimit-used"
REMAINING_HEADER = "x-ratelimit-remaining"


@dataclass(frozen=True)
class RateLimitUsage:
    """Quota values read from one response; absent headers stay None."""

    total: str | None
    used: str | None
    remaining: str | None


class RateLimitTracer:
    """Log the API key's quota usage after each REST call."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("data.rate_limit")

    def observe(self, headers: Mapping[str, str]) -> RateLimitUsage:
        usage = RateLimitUsage(
            total=self._header(headers, LIMIT_HEADER),
            used=self._header(headers, USED_HEADER),
            remaining=self._header(headers, REMAINING_HEADER),
        )
        self.logger.debug(
            "rest usage | used %s | remaining %s | total %s",
            usage.used,
            usage.remaining,
            usage.total,
        )
        return usage

    @staticmethod
    def _header(headers: Mapping[str, str], name: str) -> str | None:
        value = headers.get(name)
        if value is not None:
            return str(value)
        # Plain dicts are case sensitive, requests' header mapping is not.
        for key, candidate in headers.items():
            if key.lower() == name:
                return str(candidate)
        return None
