"""Configuration loader: reads config.yaml and interpolates env vars."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CRYPTO_SYMBOLS: tuple[str, ...] = (
    "sui",
    "bitcoin",
    "ethereum",
    "tether",
    "usd-coin",
    "binancecoin",
    "ripple",
)

DEFAULT_STOCK_SYMBOLS: tuple[str, ...] = (
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "TSLA", "META", "BRK.B", "AVGO", "JPM",
    "LLY", "V", "UNH", "XOM", "MA", "ORCL", "HD", "PG", "JNJ", "COST",
    "ABBV", "NFLX", "BAC", "CRM", "KO", "AMD", "PEP", "TMO", "LIN", "WMT",
    "ABT", "CSCO", "ACN", "DIS", "MRK", "VZ", "ADBE", "COP", "INTC", "IBM",
    "TXN", "GE", "QCOM", "PM", "CAT", "NOW", "CVX", "GS", "INTU", "SPGI",
)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CryptoConfig:
    symbols: tuple[str, ...] = ()
    default_vs_currency: str = "usd"
    coingecko_api_key: str | None = None
    binance_api_key: str | None = None
    binance_secret_key: str | None = None
    coinbase_api_key: str | None = None


@dataclass(frozen=True)
class StockConfig:
    symbols: tuple[str, ...] = ()
    alpha_vantage_api_key: str | None = None
    finnhub_api_key: str | None = None


@dataclass(frozen=True)
class GeneralConfig:
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_delay_base: float = 1.0
    update_interval: int = 30


@dataclass(frozen=True)
class AppConfig:
    crypto: CryptoConfig = field(default_factory=CryptoConfig)
    stocks: StockConfig = field(default_factory=StockConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)


def default_config() -> AppConfig:
    """Configuration written out when no config file exists yet."""
    return AppConfig(
        crypto=CryptoConfig(symbols=DEFAULT_CRYPTO_SYMBOLS),
        stocks=StockConfig(symbols=DEFAULT_STOCK_SYMBOLS),
        general=GeneralConfig(),
    )


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _optional_str(value: Any) -> str | None:
    """Credentials: unset env references interpolate to "", which means absent."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_crypto(raw: dict[str, Any]) -> CryptoConfig:
    return CryptoConfig(
        symbols=tuple(str(s) for s in raw.get("symbols") or []),
        default_vs_currency=str(raw.get("default_vs_currency") or "usd").lower(),
        coingecko_api_key=_optional_str(raw.get("coingecko_api_key")),
        binance_api_key=_optional_str(raw.get("binance_api_key")),
        binance_secret_key=_optional_str(raw.get("binance_secret_key")),
        coinbase_api_key=_optional_str(raw.get("coinbase_api_key")),
    )


def _build_stocks(raw: dict[str, Any]) -> StockConfig:
    return StockConfig(
        symbols=tuple(str(s) for s in raw.get("symbols") or []),
        alpha_vantage_api_key=_optional_str(raw.get("alpha_vantage_api_key")),
        finnhub_api_key=_optional_str(raw.get("finnhub_api_key")),
    )


def _whole_number(value: Any, name: str) -> int:
    """int() that refuses to truncate fractional values such as 0.5."""
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def _build_general(raw: dict[str, Any]) -> GeneralConfig:
    try:
        return GeneralConfig(
            request_timeout=float(raw.get("request_timeout", 30.0)),
            max_retries=_whole_number(raw.get("max_retries", 3), "max_retries"),
            retry_delay_base=float(raw.get("retry_delay_base", 1.0)),
            update_interval=_whole_number(raw.get("update_interval", 30), "update_interval"),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid general settings: {e}") from e


def config_to_dict(cfg: AppConfig) -> dict[str, Any]:
    """Plain-data form of the config, suitable for yaml.safe_dump."""
    return {
        "crypto": {
            "symbols": list(cfg.crypto.symbols),
            "default_vs_currency": cfg.crypto.default_vs_currency,
            "coingecko_api_key": cfg.crypto.coingecko_api_key,
            "binance_api_key": cfg.crypto.binance_api_key,
            "binance_secret_key": cfg.crypto.binance_secret_key,
            "coinbase_api_key": cfg.crypto.coinbase_api_key,
        },
        "stocks": {
            "symbols": list(cfg.stocks.symbols),
            "alpha_vantage_api_key": cfg.stocks.alpha_vantage_api_key,
            "finnhub_api_key": cfg.stocks.finnhub_api_key,
        },
        "general": {
            "request_timeout": cfg.general.request_timeout,
            "max_retries": cfg.general.max_retries,
            "retry_delay_base": cfg.general.retry_delay_base,
            "update_interval": cfg.general.update_interval,
        },
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load application configuration from YAML + .env.

    A missing file is not an error: the defaults are written to that path
    and returned, so the operator has a template to add API keys to.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (two levels up from this file).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        cfg = default_config()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.safe_dump(config_to_dict(cfg), f, sort_keys=False)
        logger.info(
            "Created default config file at %s; edit it to add your API keys",
            config_path,
        )
        return cfg

    if not config_path.is_file():
        raise ConfigError(f"Config path '{config_path}' is not a regular file")

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config file '{config_path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a mapping")

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        crypto=_build_crypto(raw.get("crypto") or {}),
        stocks=_build_stocks(raw.get("stocks") or {}),
        general=_build_general(raw.get("general") or {}),
    )
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def validate_config(cfg: AppConfig) -> None:
    """Raise ConfigError on invalid configuration."""
    if not cfg.crypto.symbols and not cfg.stocks.symbols:
        raise ConfigError("No symbols configured for crypto or stocks")

    if cfg.general.request_timeout <= 0:
        raise ConfigError("Request timeout must be greater than 0")

    if cfg.general.max_retries < 1:
        raise ConfigError("max_retries must be at least 1")

    if cfg.general.retry_delay_base < 0:
        raise ConfigError("retry_delay_base must not be negative")

    if cfg.general.update_interval <= 0:
        raise ConfigError("update_interval must be greater than 0")
