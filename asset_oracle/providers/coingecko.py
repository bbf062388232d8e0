"""CoinGecko simple-price provider (batch capable)."""
from __future__ import annotations

import logging

from ..config import CryptoConfig
from ..errors import ApiError
from ..models import PriceRecord, ProviderId
from ..retrier import HttpRetrier
from .parsing import parse_optional, parse_price, require_mapping, require_symbol
from .symbols import coingecko_id

logger = logging.getLogger(__name__)

COINGECKO_SIMPLE_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class CoinGeckoProvider:
    """Prices keyed by CoinGecko coin id; works without an API key."""

    provider_id = ProviderId.COINGECKO

    def __init__(self, http: HttpRetrier, config: CryptoConfig) -> None:
        self._http = http
        self._vs_currency = config.default_vs_currency.lower()
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if config.coingecko_api_key:
            self._headers["x-cg-demo-api-key"] = config.coingecko_api_key

    async def fetch_one(self, symbol: str) -> PriceRecord:
        symbol = require_symbol(symbol, "CoinGecko")
        records = await self.fetch_many([symbol])
        if not records:
            raise ApiError(f"CoinGecko returned no price for {symbol}")
        return records[0]

    async def fetch_many(self, symbols: list[str]) -> list[PriceRecord]:
        """Fetch several coins in one request.

        Coins missing from the response, or without a usable price, are
        skipped rather than failing the batch.
        """
        # CoinGecko id -> record symbol (configured casing, lowercased)
        requested: dict[str, str] = {}
        for symbol in symbols:
            if symbol and symbol.strip():
                requested.setdefault(coingecko_id(symbol), symbol.strip().lower())
        if not requested:
            return []

        vs = self._vs_currency
        data = await self._http.get_json(
            COINGECKO_SIMPLE_PRICE_URL,
            params={
                "ids": ",".join(requested),
                "vs_currencies": vs,
                "include_24hr_change": "true",
                "include_24hr_vol": "true",
                "include_market_cap": "true",
            },
            headers=self._headers,
            label="CoinGecko",
        )
        payload = require_mapping(data, provider="CoinGecko", symbol=",".join(requested))
        logger.debug("CoinGecko returned data for %d coins", len(payload))

        records: list[PriceRecord] = []
        for coin_id, record_symbol in requested.items():
            entry = payload.get(coin_id)
            if not isinstance(entry, dict):
                continue
            try:
                price = parse_price(entry.get(vs), provider="CoinGecko", symbol=coin_id)
            except ApiError as e:
                logger.warning("%s", e)
                continue

            change_pct = parse_optional(entry.get(f"{vs}_24h_change"))
            records.append(
                PriceRecord(
                    symbol=record_symbol,
                    price=price,
                    source=self.provider_id.value,
                    change_absolute=(price * change_pct) / 100 if change_pct is not None else None,
                    change_percent=change_pct,
                    volume=parse_optional(entry.get(f"{vs}_24h_vol")),
                    market_cap=parse_optional(entry.get(f"{vs}_market_cap")),
                )
            )
        return records
