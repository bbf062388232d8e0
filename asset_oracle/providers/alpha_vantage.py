"""Alpha Vantage GLOBAL_QUOTE provider (requires an API key)."""
from __future__ import annotations

from ..config import StockConfig
from ..errors import ApiError, ConfigError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import parse_optional, parse_price, require_mapping, require_symbol

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"


class AlphaVantageProvider:
    provider_id = ProviderId.ALPHA_VANTAGE

    def __init__(self, http: HttpRetrier, config: StockConfig) -> None:
        if not config.alpha_vantage_api_key:
            raise ConfigError("Alpha Vantage API key not configured")
        self._http = http
        self._api_key = config.alpha_vantage_api_key

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "Alpha Vantage").upper()
        data = await self._http.get_json(
            ALPHA_VANTAGE_URL,
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key},
            label=f"Alpha Vantage ({symbol})",
        )
        payload = require_mapping(data, provider="Alpha Vantage", symbol=symbol)

        # Throttled or unknown symbols come back as 200 with a Note/empty quote
        quote = payload.get("Global Quote")
        if not isinstance(quote, dict) or not quote:
            detail = payload.get("Note") or payload.get("Information") or payload.get("Error Message")
            raise ApiError(f"Alpha Vantage returned no quote for {symbol}: {detail or 'empty response'}")

        price = parse_price(quote.get("05. price"), provider="Alpha Vantage", symbol=symbol)
        return PriceRecord(
            symbol=str(quote.get("01. symbol") or symbol).upper(),
            price=price,
            source=self.provider_id.value,
            change_absolute=parse_optional(quote.get("09. change")),
            change_percent=parse_optional(quote.get("10. change percent")),
            volume=parse_optional(quote.get("06. volume")),
        )
