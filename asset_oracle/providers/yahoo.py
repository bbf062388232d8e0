"""Yahoo Finance chart provider (free, no API key)."""
from __future__ import annotations

from ..errors import ApiError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import (
    change_from_reference,
    parse_optional,
    parse_price,
    require_mapping,
    require_symbol,
)

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def yahoo_symbol(symbol: str) -> str:
    """Yahoo writes share classes with a dash: BRK.B -> BRK-B."""
    return symbol.upper().replace(".", "-").replace("/", "-")


class YahooFinanceProvider:
    """Last price and previous close from the public chart endpoint.

    Can be rate-limited or blocked without notice; it is the always-available
    fallback, not the preferred source.
    """

    provider_id = ProviderId.YAHOO_FINANCE

    def __init__(self, http: HttpRetrier) -> None:
        self._http = http

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "Yahoo Finance").upper()
        data = await self._http.get_json(
            f"{YAHOO_CHART_URL}/{yahoo_symbol(symbol)}",
            headers={"User-Agent": USER_AGENT},
            label=f"Yahoo Finance ({symbol})",
        )
        payload = require_mapping(data, provider="Yahoo Finance", symbol=symbol)

        chart = payload.get("chart") or {}
        results = chart.get("result") or []
        if not results or not isinstance(results[0], dict):
            raise ApiError(f"Yahoo Finance returned no chart for {symbol}: {chart.get('error')}")
        meta = results[0].get("meta") or {}

        price = parse_price(meta.get("regularMarketPrice"), provider="Yahoo Finance", symbol=symbol)
        previous_close = parse_optional(meta.get("previousClose"))
        if previous_close is None:
            previous_close = parse_optional(meta.get("chartPreviousClose"))
        change, change_pct = change_from_reference(
            price, previous_close if previous_close is not None else price
        )

        return PriceRecord(
            symbol=symbol,
            price=price,
            source=self.provider_id.value,
            change_absolute=change,
            change_percent=change_pct,
            volume=parse_optional(meta.get("regularMarketVolume")),
        )
