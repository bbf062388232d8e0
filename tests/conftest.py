"""Shared test fixtures and fake providers."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any

import pytest

from asset_oracle.config import AppConfig, CryptoConfig, GeneralConfig, StockConfig
from asset_oracle.errors import ApiError
from asset_oracle.models import PriceRecord


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def general_config() -> GeneralConfig:
    return GeneralConfig(request_timeout=5.0, max_retries=3, retry_delay_base=0.0, update_interval=1)


@pytest.fixture()
def sample_config(general_config: GeneralConfig) -> AppConfig:
    return AppConfig(
        crypto=CryptoConfig(symbols=("bitcoin", "ethereum", "sui")),
        stocks=StockConfig(symbols=("AAPL", "MSFT")),
        general=general_config,
    )


@pytest.fixture()
def keyed_config(general_config: GeneralConfig) -> AppConfig:
    """All credentialed providers available."""
    return AppConfig(
        crypto=CryptoConfig(
            symbols=("bitcoin",),
            coingecko_api_key="cg-key",
            binance_api_key="bn-key",
            coinbase_api_key="cb-key",
        ),
        stocks=StockConfig(
            symbols=("AAPL",),
            alpha_vantage_api_key="av-key",
            finnhub_api_key="fh-key",
        ),
        general=general_config,
    )


SAMPLE_YAML = textwrap.dedent("""\
    crypto:
      symbols: [bitcoin, ethereum]
      default_vs_currency: USD
      coingecko_api_key: "${TEST_CG_KEY}"
      coinbase_api_key: ""
    stocks:
      symbols: [AAPL, BRK.B]
      finnhub_api_key: "${TEST_FINNHUB_KEY}"
    general:
      request_timeout: 10
      max_retries: 2
      retry_delay_base: 0.5
      update_interval: 60
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    p = tmp_path / "config.yaml"
    p.write_text(SAMPLE_YAML)
    return p


# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class FakeProvider:
    """In-memory provider; symbols in ``prices`` succeed, everything else fails."""

    def __init__(
        self,
        provider_id: str,
        prices: dict[str, float] | None = None,
        *,
        fail_all: bool = False,
    ) -> None:
        self.provider_id = provider_id
        self.prices = prices or {}
        self.fail_all = fail_all
        self.calls: list[str] = []

    async def fetch_one(self, symbol: str) -> PriceRecord:
        self.calls.append(symbol)
        if self.fail_all or symbol not in self.prices:
            raise ApiError(f"{self.provider_id} has no price for {symbol}")
        return PriceRecord(symbol=symbol, price=self.prices[symbol], source=self.provider_id)


@pytest.fixture()
def fake_provider_factory():
    def _make(provider_id: str, prices: dict[str, float] | None = None, **kwargs: Any) -> FakeProvider:
        return FakeProvider(provider_id, prices, **kwargs)

    return _make
