"""In-memory cache of the latest price per symbol."""
from __future__ import annotations

from datetime import datetime

from .models import PriceRecord, utcnow


class PriceCache:
    """Latest PriceRecord for each symbol of one asset class.

    Keys are lowercased symbols; the record keeps its display casing.
    Not locked; the Oracle's owner serializes writers.
    """

    def __init__(self) -> None:
        self._prices: dict[str, PriceRecord] = {}
        self._last_update: datetime | None = None

    def update(self, record: PriceRecord) -> None:
        """Store a record, replacing whatever was cached for that symbol."""
        self._prices[record.key] = record
        self._last_update = utcnow()

    def get(self, symbol: str) -> PriceRecord | None:
        return self._prices.get(symbol.strip().lower())

    def get_all(self) -> list[PriceRecord]:
        """Snapshot of all cached records."""
        return list(self._prices.values())

    def symbols(self) -> list[str]:
        return list(self._prices)

    def average_price(self) -> float | None:
        """Arithmetic mean of cached prices, or None when empty."""
        if not self._prices:
            return None
        return sum(r.price for r in self._prices.values()) / len(self._prices)

    @property
    def last_update(self) -> datetime | None:
        """Instant of the most recent write; None until the first one."""
        return self._last_update

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, symbol: str) -> bool:
        return symbol.strip().lower() in self._prices
