"""Cache Infrastructure - Backend-Implementations."""

from .cache_factory import CacheBackend, create_cache
from .diskcache_adapter import DiskcacheAdapter
from .null_adapter import NullCache
from .redis_adapter import RedisAdapter
from .stage_cache import CacheStage, StageCache, normalize_title_key, normalize_url_key

__all__ = [
    "CacheBackend",
    "CacheStage",
    "DiskcacheAdapter",
    "NullCache",
    "RedisAdapter",
    "StageCache",
    "create_cache",
    "normalize_title_key",
    "normalize_url_key",
]
