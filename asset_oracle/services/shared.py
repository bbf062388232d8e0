"""Sharing one Oracle between a background refresher and concurrent readers."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from ..errors import ConfigError
from ..models import AssetClass, PriceRecord
from .oracle import Oracle

logger = logging.getLogger(__name__)


class ReadWriteLock:
    """asyncio readers-writer lock.

    Any number of readers, or a single writer. A waiting writer blocks new
    readers so periodic refreshes are not starved by a steady read load.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._waiting_writers == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            finally:
                self._waiting_writers -= 1
                # Readers parked behind a cancelled writer must re-check
                self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writing(self) -> bool:
        return self._writer


class SharedOracle:
    """The single owner of an Oracle and the lock guarding it."""

    def __init__(self, oracle: Oracle) -> None:
        self._oracle = oracle
        self._lock = ReadWriteLock()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[Oracle]:
        async with self._lock.read():
            yield self._oracle

    @asynccontextmanager
    async def write(self) -> AsyncIterator[Oracle]:
        async with self._lock.write():
            yield self._oracle

    async def refresh(self) -> int:
        """Run ``update_all_prices`` with exclusive access."""
        async with self.write() as oracle:
            return await oracle.update_all_prices()

    async def get_price(self, asset_class: AssetClass | str, symbol: str) -> PriceRecord:
        async with self.read() as oracle:
            return await oracle.get_price(asset_class, symbol)

    async def get_symbols(self, asset_class: AssetClass | str) -> list[str]:
        async with self.read() as oracle:
            return oracle.get_symbols(asset_class)

    async def get_all_prices(self, asset_class: AssetClass | str) -> list[PriceRecord]:
        async with self.read() as oracle:
            return oracle.get_all_prices(asset_class)

    async def get_statistics(self) -> dict:
        async with self.read() as oracle:
            return oracle.get_statistics()


RefreshCallback = Callable[[int], Awaitable[None]]


class PriceRefresher:
    """Background task refreshing a SharedOracle on a fixed interval.

    Lifecycle:
        refresher = PriceRefresher(shared, interval=30)
        await refresher.start()     # immediate refresh, then periodic
        await refresher.force_refresh()
        await refresher.stop()
    """

    def __init__(
        self,
        shared: SharedOracle,
        interval: float,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        if interval <= 0:
            raise ConfigError(f"Refresh interval must be greater than 0, got {interval}")
        self._shared = shared
        self._interval = interval
        self._on_refresh = on_refresh
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Price refresher already running")
            return

        # Do an immediate first refresh so readers have data right away
        await self._refresh_once()
        if self.running:
            # A concurrent start() won while this one was refreshing
            return

        self._task = asyncio.create_task(self._refresh_loop(), name="price-refresher")
        logger.info("Price refresher started: %.1fs interval", self._interval)

    async def stop(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Price refresher stopped")

    async def force_refresh(self) -> int:
        """Refresh now, outside the schedule."""
        return await self._shared.refresh()

    async def _refresh_loop(self) -> None:
        """Refresh on interval. First refresh already happened in start()."""
        while True:
            await asyncio.sleep(self._interval)
            await self._refresh_once()

    async def _refresh_once(self) -> None:
        try:
            count = await self._shared.refresh()
            logger.info("Updated %d price feeds", count)
            if self._on_refresh is not None:
                await self._on_refresh(count)
        except Exception as e:
            # The loop retries on the next interval
            logger.error("Failed to update prices: %s", e)
