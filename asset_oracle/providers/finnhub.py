"""Finnhub quote provider (requires an API key)."""
from __future__ import annotations

from ..config import StockConfig
from ..errors import ConfigError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import parse_optional, parse_price, require_mapping, require_symbol

FINNHUB_QUOTE_URL = "https://finnhub.io/api/v1/quote"


class FinnhubProvider:
    provider_id = ProviderId.FINNHUB

    def __init__(self, http: HttpRetrier, config: StockConfig) -> None:
        if not config.finnhub_api_key:
            raise ConfigError("Finnhub API key not configured")
        self._http = http
        self._api_key = config.finnhub_api_key

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "Finnhub").upper()
        data = await self._http.get_json(
            FINNHUB_QUOTE_URL,
            params={"symbol": symbol, "token": self._api_key},
            label=f"Finnhub ({symbol})",
        )
        quote = require_mapping(data, provider="Finnhub", symbol=symbol)

        # Unknown symbols are reported as c == 0, which parse_price rejects
        price = parse_price(quote.get("c"), provider="Finnhub", symbol=symbol)
        return PriceRecord(
            symbol=symbol,
            price=price,
            source=self.provider_id.value,
            change_absolute=parse_optional(quote.get("d")),
            change_percent=parse_optional(quote.get("dp")),
        )
