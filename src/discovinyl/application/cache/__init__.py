"""Caching layer - keeps spreadsheet reads off the hot path."""

from discovinyl.application.cache.base_cache import BaseCache, InMemoryCache
from discovinyl.application.cache.row_cache import SheetRowCache

__all__ = [
    "BaseCache",
    "InMemoryCache",
    "SheetRowCache",
]
