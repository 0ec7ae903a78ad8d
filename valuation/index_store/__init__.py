"""
HPI Index Store

Read interface over the regional home price index and an in-memory
implementation loaded from JSON or CSV exports of the market_hpi table.
"""

from .base import IndexStore
from .memory import IndexRow, InMemoryIndexStore

__all__ = [
    "IndexStore",
    "IndexRow",
    "InMemoryIndexStore",
]
