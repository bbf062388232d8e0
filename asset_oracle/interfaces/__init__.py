"""Protocol interfaces for the price oracle."""
from .price_provider import PriceProvider

__all__ = ["PriceProvider"]
