"""Factory functions to create cache instances.

The service keeps one response cache per process. Only the in-memory
backend exists today; callers go through ``get_response_cache`` so the
web app and tests share the same instance.
"""

from functools import lru_cache

import structlog

from .cache import MemoryCache

logger = structlog.get_logger()


@lru_cache(maxsize=1)
def get_response_cache() -> MemoryCache:
    """Get the process-wide response cache."""
    logger.info("using_memory_cache")
    return MemoryCache()


def clear_cache():
    """Clear cached instances (useful for testing)."""
    get_response_cache.cache_clear()
