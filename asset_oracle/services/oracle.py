"""Oracle orchestration: owns the caches and the per-class aggregators."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Sequence

from ..aggregator import AssetClassAggregator
from ..cache import PriceCache
from ..config import AppConfig, validate_config
from ..errors import AllSourcesFailedError, PriceNotFound
from ..interfaces.price_provider import PriceProvider
from ..models import AssetClass, PriceRecord, utcnow
from ..providers import build_providers
from ..retrier import HttpRetrier

logger = logging.getLogger(__name__)


class Oracle:
    """Price view for crypto and equities, refreshed on demand.

    Methods assume one caller at a time for mutations; sharing an instance
    between a refresher and readers goes through ``SharedOracle``.
    """

    def __init__(
        self,
        config: AppConfig,
        providers: Mapping[AssetClass, Sequence[PriceProvider]] | None = None,
    ) -> None:
        validate_config(config)
        self._config = config
        self._created_at = utcnow()

        http = HttpRetrier(config.general)
        self._aggregators: dict[AssetClass, AssetClassAggregator] = {}
        self._caches: dict[AssetClass, PriceCache] = {}
        for asset_class in AssetClass:
            if providers is not None and asset_class in providers:
                chain = list(providers[asset_class])
            else:
                chain = build_providers(asset_class, config, http)
            self._aggregators[asset_class] = AssetClassAggregator(asset_class, chain)
            self._caches[asset_class] = PriceCache()
            logger.info(
                "%s provider chain: %s",
                asset_class.value,
                " -> ".join(self._aggregators[asset_class].provider_names),
            )

        logger.info("Oracle initialized successfully")

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def _configured_symbols(self, asset_class: AssetClass) -> tuple[str, ...]:
        if asset_class is AssetClass.CRYPTO:
            return self._config.crypto.symbols
        return self._config.stocks.symbols

    async def update_prices(self, asset_class: AssetClass | str) -> int:
        """Fetch every configured symbol of one class into its cache.

        Returns the number of records written (0 when no symbols are
        configured). Raises AllSourcesFailedError when nothing could be fetched.
        """
        asset_class = AssetClass(asset_class)
        symbols = self._configured_symbols(asset_class)
        records = await self._aggregators[asset_class].fetch_all(symbols)

        cache = self._caches[asset_class]
        for record in records:
            cache.update(record)
        return len(records)

    async def update_crypto_prices(self) -> int:
        return await self.update_prices(AssetClass.CRYPTO)

    async def update_stock_prices(self) -> int:
        return await self.update_prices(AssetClass.STOCK)

    async def update_all_prices(self) -> int:
        """Refresh both classes independently; a failing class is only logged."""
        total_updated = 0
        for asset_class in AssetClass:
            try:
                count = await self.update_prices(asset_class)
            except Exception as e:
                logger.error("Failed to update %s prices: %s", asset_class.value, e)
                continue
            total_updated += count
            logger.info("Updated %d %s prices", count, asset_class.value)
        return total_updated

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_price(self, asset_class: AssetClass | str, symbol: str) -> PriceRecord:
        """Cached record for ``symbol``, or a direct fetch on a cache miss.

        The direct fetch is not written back to the cache.
        """
        asset_class = AssetClass(asset_class)
        cached = self._caches[asset_class].get(symbol)
        if cached is not None:
            return cached

        logger.info("Cache miss for %s %s, fetching directly", asset_class.value, symbol)
        try:
            return await self._aggregators[asset_class].fetch_one(symbol)
        except AllSourcesFailedError as e:
            logger.warning("%s", e)
            raise PriceNotFound(symbol) from e

    def get_symbols(self, asset_class: AssetClass | str) -> list[str]:
        """Configured symbol universe, independent of what has been fetched."""
        return list(self._configured_symbols(AssetClass(asset_class)))

    def get_all_prices(self, asset_class: AssetClass | str) -> list[PriceRecord]:
        return self._caches[AssetClass(asset_class)].get_all()

    @property
    def last_update(self) -> datetime:
        """Most recent cache write, or construction time before any write."""
        writes = [c.last_update for c in self._caches.values() if c.last_update is not None]
        return max(writes) if writes else self._created_at

    def get_statistics(self) -> dict[str, Any]:
        """Counts, last update and per-class average price.

        A class with an empty cache has no ``avg_*`` key at all.
        """
        crypto = self._caches[AssetClass.CRYPTO]
        stock = self._caches[AssetClass.STOCK]

        stats: dict[str, Any] = {
            "total_crypto_symbols": len(crypto),
            "total_stock_symbols": len(stock),
            "last_update": self.last_update.isoformat(),
        }

        avg_crypto = crypto.average_price()
        if avg_crypto is not None:
            stats["avg_crypto_price"] = avg_crypto

        avg_stock = stock.average_price()
        if avg_stock is not None:
            stats["avg_stock_price"] = avg_stock

        return stats
