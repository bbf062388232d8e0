"""Per-asset-class aggregation: primary provider, ordered fallbacks, concurrent symbols."""
from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .errors import AllSourcesFailedError
from .interfaces.price_provider import PriceProvider
from .models import AssetClass, PriceRecord

logger = logging.getLogger(__name__)


def _provider_name(provider: PriceProvider) -> str:
    return str(getattr(provider.provider_id, "value", provider.provider_id))


class AssetClassAggregator:
    """Fetches prices for one asset class through an ordered provider chain.

    ``providers[0]`` is the primary; the rest are fallbacks in the order they
    are tried. Attempts for one symbol are strictly sequential; separate
    symbols run concurrently.
    """

    def __init__(self, asset_class: AssetClass, providers: Sequence[PriceProvider]) -> None:
        self.asset_class = asset_class
        self._providers = list(providers)

    @property
    def provider_names(self) -> list[str]:
        return [_provider_name(p) for p in self._providers]

    async def fetch_one(self, symbol: str) -> PriceRecord:
        """Walk the chain for one symbol and return the first success.

        Raises:
            AllSourcesFailedError: every provider failed.
        """
        errors: list[str] = []
        for index, provider in enumerate(self._providers):
            name = _provider_name(provider)
            try:
                record = await provider.fetch_one(symbol)
            except Exception as exc:
                errors.append(f"{name}: {exc}")
                logger.warning("Failed to fetch %s %s from %s: %s", self.asset_class.value, symbol, name, exc)
                continue

            if index > 0:
                logger.info("Fetched %s price using %s fallback", symbol, name)
            return record

        raise AllSourcesFailedError(
            f"All {self.asset_class.value} providers failed for {symbol}: "
            f"{'; '.join(errors) or 'no providers configured'}"
        )

    async def fetch_all(self, symbols: Sequence[str]) -> list[PriceRecord]:
        """Best-effort batch fetch; failed symbols are logged and left out.

        Results are in completion order, not input order.

        Raises:
            AllSourcesFailedError: the input was non-empty and nothing succeeded.
        """
        if not symbols:
            return []

        tasks = [asyncio.create_task(self._fetch_logged(symbol)) for symbol in symbols]
        records: list[PriceRecord] = []
        try:
            for next_done in asyncio.as_completed(tasks):
                record = await next_done
                if record is not None:
                    records.append(record)
        finally:
            # No fetch outlives the batch, e.g. when the caller is cancelled
            for task in tasks:
                if not task.done():
                    task.cancel()

        if not records:
            raise AllSourcesFailedError(
                f"All {self.asset_class.value} price sources failed"
            )

        logger.info(
            "Fetched %d/%d %s prices", len(records), len(symbols), self.asset_class.value
        )
        return records

    async def _fetch_logged(self, symbol: str) -> PriceRecord | None:
        try:
            return await self.fetch_one(symbol)
        except AllSourcesFailedError as e:
            logger.error("%s", e)
            return None
