"""Command-line interface for the asset price oracle."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import load_config
from .errors import OracleError
from .logging_setup import configure_logging
from .models import AssetClass, PriceRecord
from .services import Oracle, PriceRefresher, SharedOracle

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="asset-oracle",
        description="Real-time oracle for cryptocurrency and stock prices",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root; created if missing)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    start_parser = sub.add_parser("start", help="Refresh prices continuously")
    start_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Update interval in seconds (overrides config)",
    )

    price_parser = sub.add_parser("price", help="Get the current price for a symbol")
    price_parser.add_argument("symbol", help="Symbol, e.g. bitcoin or AAPL")
    price_parser.add_argument(
        "--asset-type",
        default="crypto",
        choices=["crypto", "stock"],
        help="Asset class of the symbol (default: crypto)",
    )

    list_parser = sub.add_parser("list", help="List configured symbols")
    list_parser.add_argument(
        "--asset-type",
        default="all",
        choices=["crypto", "stock", "all"],
        help="Asset class to list (default: all)",
    )

    sub.add_parser("stats", help="Fetch once and show price statistics")

    return parser


def _fmt_optional(value: float | None, suffix: str = "") -> str:
    return f"{value:.2f}{suffix}" if value is not None else "N/A"


def _format_rows(title: str, change_label: str, records: list[PriceRecord]) -> list[str]:
    lines = [
        f"--- {title} ---",
        f"{'Symbol':<10} {'Price ($)':<14} {change_label:<12} {'Change %':<10} {'Source':<14}",
        "-" * 70,
    ]
    for r in sorted(records, key=lambda rec: rec.key):
        lines.append(
            f"{r.symbol:<10} {r.price:<14.2f} {_fmt_optional(r.change_absolute):<12} "
            f"{_fmt_optional(r.change_percent, '%'):<10} {r.source:<14}"
        )
    return lines


def format_price_table(oracle: Oracle) -> str:
    """Render the cached prices of both asset classes."""
    crypto = oracle.get_all_prices(AssetClass.CRYPTO)
    stocks = oracle.get_all_prices(AssetClass.STOCK)

    lines = [
        f"=== Current Prices (Last updated: "
        f"{oracle.last_update.strftime('%Y-%m-%d %H:%M:%S')} UTC) ==="
    ]
    if crypto:
        lines.append("")
        lines.extend(_format_rows("Cryptocurrencies", "24h Change", crypto))
    if stocks:
        lines.append("")
        lines.extend(_format_rows("Stocks", "Change", stocks))
    if not crypto and not stocks:
        lines.append("No price data available. Run update to fetch prices.")
    return "\n".join(lines)


def format_statistics(stats: dict) -> str:
    lines = [
        "=== Oracle Statistics ===",
        f"Total Crypto Symbols: {stats.get('total_crypto_symbols', 0)}",
        f"Total Stock Symbols: {stats.get('total_stock_symbols', 0)}",
        f"Last Update: {stats.get('last_update', 'N/A')}",
    ]
    if "avg_crypto_price" in stats:
        lines.append(f"Average Crypto Price: ${stats['avg_crypto_price']:,.2f}")
    if "avg_stock_price" in stats:
        lines.append(f"Average Stock Price: ${stats['avg_stock_price']:,.2f}")
    return "\n".join(lines)


async def _start(oracle: Oracle, interval: int) -> None:
    shared = SharedOracle(oracle)

    async def _print_prices(_count: int) -> None:
        async with shared.read() as o:
            print(format_price_table(o), flush=True)

    refresher = PriceRefresher(shared, interval, on_refresh=_print_prices)
    await refresher.start()
    try:
        await asyncio.Event().wait()
    finally:
        await refresher.stop()


async def _price(oracle: Oracle, symbol: str, asset_type: str) -> int:
    asset_class = AssetClass(asset_type)
    configured = {s.lower() for s in oracle.get_symbols(asset_class)}
    if symbol.strip().lower() not in configured:
        logger.error("Symbol '%s' not configured for %s", symbol, asset_class.value)
        return 1

    record = await oracle.get_price(asset_class, symbol)
    print(f"Current price for {symbol.upper()}: ${record.price:,.2f} ({record.source})")
    print(f"Last updated: {record.timestamp.isoformat()}")
    return 0


def _list(oracle: Oracle, asset_type: str) -> int:
    if asset_type in ("crypto", "all"):
        print("Available Cryptocurrencies:")
        for symbol in oracle.get_symbols(AssetClass.CRYPTO):
            print(f"  {symbol}")
    if asset_type == "all":
        print()
    if asset_type in ("stock", "all"):
        print("Available Stocks:")
        for symbol in oracle.get_symbols(AssetClass.STOCK):
            print(f"  {symbol}")
    return 0


async def _stats(oracle: Oracle) -> int:
    await oracle.update_all_prices()
    print(format_statistics(oracle.get_statistics()))
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command; returns the process exit code."""
    configure_logging(args.log_level)

    try:
        config = load_config(args.config)
        oracle = Oracle(config)

        if args.command == "start":
            interval = args.interval if args.interval is not None else config.general.update_interval
            await _start(oracle, interval)
            return 0
        if args.command == "price":
            return await _price(oracle, args.symbol, args.asset_type)
        if args.command == "list":
            return _list(oracle, args.asset_type)
        if args.command == "stats":
            return await _stats(oracle)
    except OracleError as e:
        logger.error("%s", e)
        return 1

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
