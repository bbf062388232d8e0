"""Asset price oracle: crypto and equity prices from multiple providers with fallback."""
from .aggregator import AssetClassAggregator
from .cache import PriceCache
from .config import AppConfig, load_config
from .errors import (
    AllSourcesFailedError,
    ApiError,
    ConfigError,
    NetworkError,
    OracleError,
    PriceNotFound,
)
from .models import AssetClass, PriceRecord, ProviderId
from .retrier import HttpRetrier
from .services import Oracle, PriceRefresher, SharedOracle

__all__ = [
    "AllSourcesFailedError",
    "ApiError",
    "AppConfig",
    "AssetClass",
    "AssetClassAggregator",
    "ConfigError",
    "HttpRetrier",
    "NetworkError",
    "Oracle",
    "OracleError",
    "PriceCache",
    "PriceNotFound",
    "PriceRecord",
    "PriceRefresher",
    "ProviderId",
    "SharedOracle",
    "load_config",
]
