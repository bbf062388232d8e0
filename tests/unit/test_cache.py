"""Unit tests for the price cache."""
from __future__ import annotations

import pytest

from asset_oracle.cache import PriceCache
from asset_oracle.models import PriceRecord


def _record(symbol: str, price: float, source: str = "binance") -> PriceRecord:
    return PriceRecord(symbol=symbol, price=price, source=source)


class TestPriceCache:
    def test_empty(self) -> None:
        cache = PriceCache()
        assert len(cache) == 0
        assert cache.get("bitcoin") is None
        assert cache.get_all() == []
        assert cache.average_price() is None
        assert cache.last_update is None

    def test_update_and_get(self) -> None:
        cache = PriceCache()
        r = _record("bitcoin", 50000.0)
        cache.update(r)
        assert cache.get("bitcoin") is r
        assert "bitcoin" in cache
        assert cache.last_update is not None

    def test_lookup_is_case_insensitive(self) -> None:
        cache = PriceCache()
        cache.update(_record("AAPL", 150.0, "finnhub"))
        assert cache.get("aapl") is not None
        assert cache.get(" Aapl ") is not None
        assert cache.get("aapl").symbol == "AAPL"
        assert cache.symbols() == ["aapl"]

    def test_update_replaces_existing(self) -> None:
        cache = PriceCache()
        cache.update(_record("bitcoin", 50000.0))
        cache.update(_record("bitcoin", 51000.0, "coingecko"))
        assert len(cache) == 1
        assert cache.get("bitcoin").price == 51000.0
        assert cache.get("bitcoin").source == "coingecko"

    def test_average_price(self) -> None:
        cache = PriceCache()
        cache.update(_record("a", 10.0))
        cache.update(_record("b", 30.0))
        assert cache.average_price() == pytest.approx(20.0)
