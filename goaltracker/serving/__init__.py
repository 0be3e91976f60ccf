"""
Serving Module
"""
from .cache import init_redis, close_redis, get_redis, portal_cache, CacheManager

__all__ = [
    "init_redis",
    "close_redis",
    "get_redis",
    "portal_cache",
    "CacheManager",
]
