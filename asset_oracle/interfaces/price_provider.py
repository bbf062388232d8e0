"""Price provider protocol: one external price source."""
from typing import Protocol

from ..models import PriceRecord, ProviderId


class PriceProvider(Protocol):
    """Abstract interface for turning one symbol into a price record.

    Implementations raise an ``OracleError`` subclass instead of returning
    a partial record.
    """

    provider_id: ProviderId

    async def fetch_one(self, symbol: str) -> PriceRecord: ...
