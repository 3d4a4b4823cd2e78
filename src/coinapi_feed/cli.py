"""Command-line interface for downloading CoinAPI history."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from coinapi_feed.config import Settings
from coinapi_feed.data.downloader import CoinApiDataDownloader, bars_to_frame, write_csv
from coinapi_feed.data.fetcher import CoinApiHistoryFetcher
from coinapi_feed.data.history import CoinApiHistoryProvider
from coinapi_feed.domain.models import Resolution, SecurityType, Symbol, ensure_utc
from coinapi_feed.errors import ConfigError, DataProviderError
from coinapi_feed.logging import get_logger, setup_logger

EXIT_OK = 0
EXIT_NO_DATA = 1
EXIT_CONFIG_ERROR = 2
EXIT_VENDOR_ERROR = 3


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, reading naive values as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 timestamp: {value}") from exc
    return ensure_utc(parsed)


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description="Download OHLCV history from CoinAPI")
    parser.add_argument("--symbol", required=True, help="Canonical ticker, e.g. BTCUSD")
    parser.add_argument("--market", required=True, help="Exchange, e.g. coinbase")
    parser.add_argument(
        "--security-type",
        choices=[item.value for item in SecurityType],
        default=SecurityType.CRYPTO.value,
        help="Asset class of the symbol",
    )
    parser.add_argument(
        "--resolution",
        choices=[item.value for item in Resolution],
        default=Resolution.MINUTE.value,
        help="Bar resolution",
    )
    parser.add_argument("--start", type=parse_timestamp, required=True, help="Range start (UTC)")
    parser.add_argument("--end", type=parse_timestamp, required=True, help="Range end (UTC)")
    parser.add_argument("--output", type=str, help="CSV output path")
    parser.add_argument("--limit", type=int, help="Bars per vendor request")
    parser.add_argument("--timeout", type=float, help="Vendor request timeout in seconds")
    parser.add_argument("--log-level", type=str, help="Logging level")
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.limit is not None:
        overrides["history_request_limit"] = args.limit
    if args.timeout is not None:
        overrides["request_timeout_seconds"] = args.timeout
    if args.log_level:
        overrides["log_level"] = args.log_level.strip().upper()
    return settings.with_overrides(**overrides)


def default_output_path(settings: Settings, symbol: Symbol, resolution: Resolution) -> Path:
    return (
        Path(settings.historical_data_dir)
        / symbol.market.upper()
        / f"{symbol.ticker}_{resolution.value}.csv"
    )


def build_provider(settings: Settings) -> CoinApiHistoryProvider:
    fetcher = CoinApiHistoryFetcher(
        api_key=settings.require_api_key(),
        rest_url=settings.coinapi_rest_url,
        per_request_limit=settings.history_request_limit,
        timeout=settings.request_timeout_seconds,
    )
    return CoinApiHistoryProvider(fetcher)


def download(settings: Settings, args: argparse.Namespace) -> int:
    logger = get_logger("cli")
    symbol = Symbol(
        ticker=args.symbol,
        market=args.market,
        security_type=SecurityType(args.security_type),
    )
    resolution = Resolution(args.resolution)
    provider = build_provider(settings)
    try:
        bars = CoinApiDataDownloader(provider).get(symbol, resolution, args.start, args.end)
        if bars is None:
            logger.error("no history available for %s at %s resolution", symbol, resolution)
            return EXIT_NO_DATA
        frame = bars_to_frame(bars)
    except DataProviderError as exc:
        logger.error("history download failed for %s: %s", symbol, exc)
        return EXIT_VENDOR_ERROR
    finally:
        provider.close()

    if frame.empty:
        logger.error("CoinAPI returned no bars for %s", symbol)
        return EXIT_NO_DATA
    output = Path(args.output) if args.output else default_output_path(settings, symbol, resolution)
    write_csv(frame, output)
    logger.info("saved %s bars for %s to %s", len(frame), symbol, output)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
        setup_logger(settings.log_level, settings.log_file)
        return download(settings, args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
