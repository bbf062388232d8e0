"""Integration tests for the Oracle: updates, cache reads, direct fetch, statistics."""
from __future__ import annotations

import logging

import pytest

from asset_oracle.config import AppConfig, CryptoConfig, GeneralConfig, StockConfig
from asset_oracle.errors import ConfigError, PriceNotFound
from asset_oracle.models import AssetClass
from asset_oracle.services import Oracle


@pytest.fixture()
def crypto_provider(fake_provider_factory):
    return fake_provider_factory(
        "binance", {"bitcoin": 50000.0, "ethereum": 3000.0, "sui": 4.0}
    )


@pytest.fixture()
def stock_provider(fake_provider_factory):
    return fake_provider_factory("yahoo_finance", {"AAPL": 10.0, "MSFT": 30.0})


@pytest.fixture()
def oracle(sample_config: AppConfig, crypto_provider, stock_provider) -> Oracle:
    return Oracle(
        sample_config,
        providers={AssetClass.CRYPTO: [crypto_provider], AssetClass.STOCK: [stock_provider]},
    )


class TestConstruction:
    def test_rejects_empty_symbols(self) -> None:
        with pytest.raises(ConfigError):
            Oracle(AppConfig())

    def test_rejects_zero_timeout(self) -> None:
        cfg = AppConfig(
            crypto=CryptoConfig(symbols=("bitcoin",)),
            general=GeneralConfig(request_timeout=0),
        )
        with pytest.raises(ConfigError):
            Oracle(cfg)

    def test_builds_default_chains(self, sample_config: AppConfig) -> None:
        oracle = Oracle(sample_config)
        # No keys configured: nothing fetched yet, caches empty
        assert oracle.get_all_prices(AssetClass.CRYPTO) == []
        assert oracle.get_all_prices(AssetClass.STOCK) == []


class TestUpdates:
    @pytest.mark.asyncio
    async def test_update_crypto(self, oracle: Oracle) -> None:
        assert await oracle.update_crypto_prices() == 3
        assert len(oracle.get_all_prices(AssetClass.CRYPTO)) == 3
        assert oracle.get_all_prices(AssetClass.STOCK) == []

    @pytest.mark.asyncio
    async def test_update_stock(self, oracle: Oracle) -> None:
        assert await oracle.update_stock_prices() == 2
        assert {r.symbol for r in oracle.get_all_prices("stock")} == {"AAPL", "MSFT"}

    @pytest.mark.asyncio
    async def test_update_all(self, oracle: Oracle) -> None:
        assert await oracle.update_all_prices() == 5

    @pytest.mark.asyncio
    async def test_update_all_tolerates_failing_class(
        self,
        sample_config: AppConfig,
        crypto_provider,
        fake_provider_factory,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.ERROR, logger="asset_oracle.services.oracle")
        oracle = Oracle(
            sample_config,
            providers={
                AssetClass.CRYPTO: [crypto_provider],
                AssetClass.STOCK: [fake_provider_factory("yahoo_finance", fail_all=True)],
            },
        )
        assert await oracle.update_all_prices() == 3
        assert oracle.get_all_prices(AssetClass.STOCK) == []

        errors = [
            r for r in caplog.records
            if r.name == "asset_oracle.services.oracle" and r.levelno == logging.ERROR
        ]
        assert len(errors) == 1
        assert "Failed to update stock prices" in errors[0].getMessage()

    @pytest.mark.asyncio
    async def test_update_keeps_previous_values_on_failure(
        self, sample_config: AppConfig, fake_provider_factory
    ) -> None:
        flaky = fake_provider_factory("binance", {"bitcoin": 50000.0})
        oracle = Oracle(
            sample_config,
            providers={
                AssetClass.CRYPTO: [flaky],
                AssetClass.STOCK: [fake_provider_factory("yahoo_finance", {"AAPL": 1.0})],
            },
        )
        await oracle.update_crypto_prices()
        flaky.fail_all = True
        await oracle.update_all_prices()

        cached = await oracle.get_price(AssetClass.CRYPTO, "bitcoin")
        assert cached.price == 50000.0

    @pytest.mark.asyncio
    async def test_no_symbols_for_class(self, fake_provider_factory) -> None:
        cfg = AppConfig(stocks=StockConfig(symbols=("AAPL",)))
        provider = fake_provider_factory("binance", {"bitcoin": 1.0})
        oracle = Oracle(
            cfg,
            providers={
                AssetClass.CRYPTO: [provider],
                AssetClass.STOCK: [fake_provider_factory("yahoo_finance", {"AAPL": 1.0})],
            },
        )
        assert await oracle.update_crypto_prices() == 0
        assert provider.calls == []


class TestGetPrice:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_providers(self, oracle: Oracle, crypto_provider) -> None:
        await oracle.update_crypto_prices()
        crypto_provider.calls.clear()

        record = await oracle.get_price(AssetClass.CRYPTO, "BITCOIN")
        assert record.price == 50000.0
        assert crypto_provider.calls == []

    @pytest.mark.asyncio
    async def test_cache_miss_fetches_directly(self, oracle: Oracle, stock_provider) -> None:
        record = await oracle.get_price(AssetClass.STOCK, "AAPL")
        assert record.price == 10.0
        assert stock_provider.calls == ["AAPL"]
        # Direct fetches are not cached
        assert oracle.get_all_prices(AssetClass.STOCK) == []

    @pytest.mark.asyncio
    async def test_not_found(self, oracle: Oracle) -> None:
        with pytest.raises(PriceNotFound) as exc_info:
            await oracle.get_price(AssetClass.STOCK, "ZZZZ")
        assert exc_info.value.symbol == "ZZZZ"
        assert "Price not found for symbol: ZZZZ" in str(exc_info.value)

    def test_get_symbols_returns_configured(self, oracle: Oracle) -> None:
        assert oracle.get_symbols(AssetClass.CRYPTO) == ["bitcoin", "ethereum", "sui"]
        assert oracle.get_symbols("stock") == ["AAPL", "MSFT"]


class TestStatistics:
    def test_before_any_update(self, oracle: Oracle) -> None:
        stats = oracle.get_statistics()
        assert stats["total_crypto_symbols"] == 0
        assert stats["total_stock_symbols"] == 0
        assert "avg_crypto_price" not in stats
        assert "avg_stock_price" not in stats
        assert stats["last_update"]

    @pytest.mark.asyncio
    async def test_after_stock_update(self, oracle: Oracle) -> None:
        before = oracle.last_update
        await oracle.update_stock_prices()

        stats = oracle.get_statistics()
        assert stats["total_stock_symbols"] == 2
        assert stats["avg_stock_price"] == pytest.approx(20.0)
        assert "avg_crypto_price" not in stats
        assert oracle.last_update >= before
