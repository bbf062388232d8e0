"""Symbol normalization between configured ids and exchange trading pairs."""
from __future__ import annotations

import re

# CoinGecko id -> exchange ticker
COINGECKO_TICKERS: dict[str, str] = {
    "bitcoin": "BTC",
    "ethereum": "ETH",
    "tether": "USDT",
    "binancecoin": "BNB",
    "solana": "SOL",
    "usd-coin": "USDC",
    "staked-ether": "STETH",
    "ripple": "XRP",
    "dogecoin": "DOGE",
    "toncoin": "TON",
    "cardano": "ADA",
    "avalanche-2": "AVAX",
    "shiba-inu": "SHIB",
    "chainlink": "LINK",
    "polkadot": "DOT",
    "tron": "TRX",
    "litecoin": "LTC",
    "sui": "SUI",
}

TICKER_TO_COINGECKO: dict[str, str] = {v: k for k, v in COINGECKO_TICKERS.items()}

# Longest first so USDT wins over USD
QUOTE_ASSETS: tuple[str, ...] = ("USDT", "USDC", "BUSD", "USD", "EUR")

_SEPARATORS_RE = re.compile(r"[-/_\s]+")


def base_asset(symbol: str) -> str:
    """Extract the base ticker from a configured symbol.

    ``bitcoin`` -> ``BTC``, ``eth-usd`` -> ``ETH``, ``BTCUSDT`` -> ``BTC``.
    """
    cleaned = symbol.strip()
    ticker = COINGECKO_TICKERS.get(cleaned.lower())
    if ticker:
        return ticker

    parts = [p for p in _SEPARATORS_RE.split(cleaned.upper()) if p]
    if not parts:
        return ""
    if len(parts) > 1:
        return parts[0]

    compact = parts[0]
    if compact not in TICKER_TO_COINGECKO:
        for quote in QUOTE_ASSETS:
            if compact.endswith(quote) and len(compact) - len(quote) >= 2:
                return compact[: -len(quote)]
    return compact


def to_pair(symbol: str, quote: str, separator: str = "") -> str:
    """Provider pair syntax for ``symbol`` quoted in the provider's ``quote`` asset."""
    return f"{base_asset(symbol)}{separator}{quote.upper()}"


def coingecko_id(symbol: str) -> str:
    """CoinGecko id for a configured symbol (ids pass through, tickers are mapped)."""
    cleaned = symbol.strip()
    return TICKER_TO_COINGECKO.get(cleaned.upper(), cleaned.lower())
