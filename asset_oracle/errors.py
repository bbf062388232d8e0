"""Exception hierarchy for the price oracle."""
from __future__ import annotations


class OracleError(Exception):
    """Base class for every error raised by the oracle core."""


class NetworkError(OracleError):
    """Transport-level failure: connection refused, DNS, timeout."""


class ApiError(OracleError):
    """Provider answered with a non-success status or an unusable payload."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class AllSourcesFailedError(ApiError):
    """Every provider in a fallback chain failed."""


class ConfigError(OracleError):
    """Invalid or missing configuration."""


class PriceNotFound(OracleError):
    """No cached price and no provider could supply one."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Price not found for symbol: {symbol}")
        self.symbol = symbol
