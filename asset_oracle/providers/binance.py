"""Binance exchange ticker provider."""
from __future__ import annotations

import logging

from ..config import CryptoConfig
from ..errors import OracleError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import parse_optional, parse_price, require_mapping, require_symbol
from .symbols import to_pair

logger = logging.getLogger(__name__)

BINANCE_API_URL = "https://api.binance.com/api/v3"
QUOTE_ASSET = "USDT"


class BinanceProvider:
    """Spot prices from the Binance public REST API.

    Tries the 24h rolling ticker first (price, change, volume) and falls back
    to the bare price endpoint when that fails.
    """

    provider_id = ProviderId.BINANCE

    def __init__(self, http: HttpRetrier, config: CryptoConfig) -> None:
        self._http = http
        self._headers = (
            {"X-MBX-APIKEY": config.binance_api_key} if config.binance_api_key else None
        )

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "Binance")
        pair = to_pair(symbol, QUOTE_ASSET)

        try:
            return await self._fetch_24hr_ticker(symbol, pair)
        except OracleError as e:
            logger.warning("Binance 24hr ticker failed for %s: %s", pair, e)
            return await self._fetch_price_only(symbol, pair)

    async def _fetch_24hr_ticker(self, symbol: str, pair: str) -> PriceRecord:
        data = await self._http.get_json(
            f"{BINANCE_API_URL}/ticker/24hr",
            params={"symbol": pair},
            headers=self._headers,
            label=f"Binance 24hr ({pair})",
        )
        ticker = require_mapping(data, provider="Binance", symbol=pair)
        price = parse_price(ticker.get("lastPrice"), provider="Binance", symbol=pair)

        return PriceRecord(
            symbol=symbol.lower(),
            price=price,
            source=self.provider_id.value,
            change_absolute=parse_optional(ticker.get("priceChange")),
            change_percent=parse_optional(ticker.get("priceChangePercent")),
            volume=parse_optional(ticker.get("volume")),
        )

    async def _fetch_price_only(self, symbol: str, pair: str) -> PriceRecord:
        data = await self._http.get_json(
            f"{BINANCE_API_URL}/ticker/price",
            params={"symbol": pair},
            headers=self._headers,
            label=f"Binance price ({pair})",
        )
        ticker = require_mapping(data, provider="Binance", symbol=pair)
        price = parse_price(ticker.get("price"), provider="Binance", symbol=pair)
        return PriceRecord(symbol=symbol.lower(), price=price, source=self.provider_id.value)
