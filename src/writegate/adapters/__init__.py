"""Cache adapters for writegate."""

from writegate.adapters._overlay import LayeredCache
from writegate.adapters.base import Cache, DataProxy
from writegate.adapters.memory import MemoryCache
from writegate.adapters.redis import RedisCache

__all__ = [
    "Cache",
    "DataProxy",
    "LayeredCache",
    "MemoryCache",
    "RedisCache",
]
