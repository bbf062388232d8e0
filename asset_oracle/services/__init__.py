"""Service modules"""
from .oracle import Oracle
from .shared import PriceRefresher, ReadWriteLock, SharedOracle

__all__ = ["Oracle", "PriceRefresher", "ReadWriteLock", "SharedOracle"]
