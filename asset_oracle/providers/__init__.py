"""Price providers and the per-asset-class fallback chains built from them."""
from __future__ import annotations

from typing import Callable

from ..config import AppConfig
from ..interfaces.price_provider import PriceProvider
from ..models import AssetClass, ProviderId
from ..retrier import HttpRetrier
from .alpha_vantage import AlphaVantageProvider
from .binance import BinanceProvider
from .coinbase import CoinbaseProvider
from .coingecko import CoinGeckoProvider
from .finnhub import FinnhubProvider
from .yahoo import YahooFinanceProvider

# Which provider is tried first, among those available
PREFERENCE_ORDER: dict[AssetClass, tuple[ProviderId, ...]] = {
    AssetClass.CRYPTO: (ProviderId.BINANCE, ProviderId.COINBASE, ProviderId.COINGECKO),
    AssetClass.STOCK: (ProviderId.ALPHA_VANTAGE, ProviderId.FINNHUB, ProviderId.YAHOO_FINANCE),
}

# Order of the remaining providers after the primary fails
FALLBACK_ORDER: dict[AssetClass, tuple[ProviderId, ...]] = {
    AssetClass.CRYPTO: (ProviderId.BINANCE, ProviderId.COINBASE, ProviderId.COINGECKO),
    AssetClass.STOCK: (ProviderId.YAHOO_FINANCE, ProviderId.FINNHUB, ProviderId.ALPHA_VANTAGE),
}

# Registry of provider factories keyed by provider id.
_PROVIDER_FACTORIES: dict[ProviderId, Callable[[HttpRetrier, AppConfig], PriceProvider]] = {
    ProviderId.BINANCE: lambda http, cfg: BinanceProvider(http, cfg.crypto),
    ProviderId.COINBASE: lambda http, cfg: CoinbaseProvider(http, cfg.crypto),
    ProviderId.COINGECKO: lambda http, cfg: CoinGeckoProvider(http, cfg.crypto),
    ProviderId.ALPHA_VANTAGE: lambda http, cfg: AlphaVantageProvider(http, cfg.stocks),
    ProviderId.FINNHUB: lambda http, cfg: FinnhubProvider(http, cfg.stocks),
    ProviderId.YAHOO_FINANCE: lambda http, cfg: YahooFinanceProvider(http),
}


def is_available(provider_id: ProviderId, config: AppConfig) -> bool:
    """Credentialed providers are usable only when their key is configured."""
    if provider_id is ProviderId.COINBASE:
        return config.crypto.coinbase_api_key is not None
    if provider_id is ProviderId.ALPHA_VANTAGE:
        return config.stocks.alpha_vantage_api_key is not None
    if provider_id is ProviderId.FINNHUB:
        return config.stocks.finnhub_api_key is not None
    return True


def available_providers(asset_class: AssetClass, config: AppConfig) -> list[ProviderId]:
    return [p for p in PREFERENCE_ORDER[asset_class] if is_available(p, config)]


def provider_chain(asset_class: AssetClass, config: AppConfig) -> list[ProviderId]:
    """Primary provider followed by the remaining available ones in fallback order."""
    available = available_providers(asset_class, config)
    primary = available[0]
    return [primary] + [
        p for p in FALLBACK_ORDER[asset_class] if p is not primary and p in available
    ]


def build_providers(
    asset_class: AssetClass, config: AppConfig, http: HttpRetrier
) -> list[PriceProvider]:
    return [_PROVIDER_FACTORIES[pid](http, config) for pid in provider_chain(asset_class, config)]


__all__ = [
    "AlphaVantageProvider",
    "BinanceProvider",
    "CoinbaseProvider",
    "CoinGeckoProvider",
    "FinnhubProvider",
    "YahooFinanceProvider",
    "FALLBACK_ORDER",
    "PREFERENCE_ORDER",
    "available_providers",
    "build_providers",
    "is_available",
    "provider_chain",
]
