"""Response cache storage."""

from .cache import CachedResponse, MemoryCache
from .factory import get_response_cache

__all__ = ["CachedResponse", "MemoryCache", "get_response_cache"]
