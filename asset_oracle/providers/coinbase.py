"""Coinbase exchange ticker and spot price provider."""
from __future__ import annotations

import logging

from ..config import CryptoConfig
from ..errors import OracleError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import (
    change_from_reference,
    parse_optional,
    parse_price,
    require_mapping,
    require_symbol,
)
from .symbols import to_pair

logger = logging.getLogger(__name__)

COINBASE_EXCHANGE_URL = "https://api.exchange.coinbase.com"
COINBASE_SPOT_URL = "https://api.coinbase.com/v2/prices"


class CoinbaseProvider:
    """Prices from Coinbase.

    The Exchange API ticker gives the last trade; its 24h stats add open and
    volume. When the ticker is unavailable the retail spot endpoint is used.
    """

    provider_id = ProviderId.COINBASE

    def __init__(self, http: HttpRetrier, config: CryptoConfig) -> None:
        self._http = http
        self._quote = config.default_vs_currency.upper()

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "Coinbase")
        pair = to_pair(symbol, self._quote, "-")

        try:
            return await self._fetch_exchange_ticker(symbol, pair)
        except OracleError as e:
            logger.warning("Coinbase exchange ticker failed for %s: %s", pair, e)
            return await self._fetch_spot(symbol, pair)

    async def _fetch_exchange_ticker(self, symbol: str, pair: str) -> PriceRecord:
        data = await self._http.get_json(
            f"{COINBASE_EXCHANGE_URL}/products/{pair}/ticker",
            label=f"Coinbase ticker ({pair})",
        )
        ticker = require_mapping(data, provider="Coinbase", symbol=pair)
        price = parse_price(ticker.get("price"), provider="Coinbase", symbol=pair)

        # Stats are a nice-to-have; a failure still yields a price-only record
        try:
            stats = require_mapping(
                await self._http.get_json(
                    f"{COINBASE_EXCHANGE_URL}/products/{pair}/stats",
                    label=f"Coinbase stats ({pair})",
                ),
                provider="Coinbase",
                symbol=pair,
            )
        except OracleError as e:
            logger.debug("Coinbase stats unavailable for %s: %s", pair, e)
            stats = {}

        change, change_pct = change_from_reference(price, parse_optional(stats.get("open")))
        return PriceRecord(
            symbol=symbol.lower(),
            price=price,
            source=self.provider_id.value,
            change_absolute=change,
            change_percent=change_pct,
            volume=parse_optional(stats.get("volume")),
        )

    async def _fetch_spot(self, symbol: str, pair: str) -> PriceRecord:
        data = await self._http.get_json(
            f"{COINBASE_SPOT_URL}/{pair}/spot",
            label=f"Coinbase spot ({pair})",
        )
        payload = require_mapping(data, provider="Coinbase", symbol=pair)
        spot = payload.get("data") or {}
        price = parse_price(
            spot.get("amount") if isinstance(spot, dict) else None,
            provider="Coinbase",
            symbol=pair,
        )
        return PriceRecord(symbol=symbol.lower(), price=price, source=self.provider_id.value)
