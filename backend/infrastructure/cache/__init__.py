from .cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore
from .cached_provider import CachedWeatherSourceProvider

__all__ = [
    "CacheStore",
    "CachedWeatherSourceProvider",
    "InMemoryCacheStore",
    "RedisCacheStore",
]
