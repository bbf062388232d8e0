"""Shared helpers for turning provider payload fields into numbers."""
from __future__ import annotations

import math
from typing import Any

from ..errors import ApiError


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_price(value: Any, *, provider: str, symbol: str) -> float:
    """Required price field: must be a finite number greater than zero."""
    number = _to_float(value)
    if number is None or number <= 0:
        raise ApiError(f"Invalid price from {provider} for {symbol}: {value!r}")
    return number


def parse_optional(value: Any) -> float | None:
    """Optional numeric field: anything unparsable degrades to None."""
    return _to_float(value)


def require_symbol(symbol: str | None, provider: str) -> str:
    cleaned = (symbol or "").strip()
    if not cleaned:
        raise ApiError(f"{provider}: empty symbol provided")
    return cleaned


def change_from_reference(price: float, reference: float | None) -> tuple[float | None, float | None]:
    """Absolute and percent change of ``price`` against ``reference``."""
    if reference is None:
        return None, None
    change = price - reference
    percent = (change / reference) * 100 if reference else 0.0
    return change, percent


def require_mapping(data: Any, *, provider: str, symbol: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ApiError(f"Unexpected {provider} payload for {symbol}: {type(data).__name__}")
    return data
