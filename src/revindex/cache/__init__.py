"""Result cache for remote queries."""

from revindex.cache.manager import CacheManager
from revindex.cache.storage import FileCacheStorage

__all__ = ["CacheManager", "FileCacheStorage"]
