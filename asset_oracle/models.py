"""Data models. Price records are frozen."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssetClass(str, enum.Enum):
    """The two independent price domains."""

    CRYPTO = "crypto"
    STOCK = "stock"

    @classmethod
    def _missing_(cls, value: object) -> AssetClass | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "stocks":
                normalized = "stock"
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class ProviderId(str, enum.Enum):
    """Identity of an external price source; the value is stamped on records."""

    BINANCE = "binance"
    COINBASE = "coinbase"
    COINGECKO = "coingecko"
    ALPHA_VANTAGE = "alpha_vantage"
    FINNHUB = "finnhub"
    YAHOO_FINANCE = "yahoo_finance"


@dataclass(frozen=True)
class PriceRecord:
    """Normalized result of one successful fetch for one symbol."""

    symbol: str
    price: float
    source: str
    change_absolute: float | None = None
    change_percent: float | None = None
    volume: float | None = None
    market_cap: float | None = None
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def key(self) -> str:
        """Case-insensitive cache key."""
        return self.symbol.lower()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON / CLI output."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "change_absolute": self.change_absolute,
            "change_percent": self.change_percent,
            "volume": self.volume,
            "market_cap": self.market_cap,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
        }
