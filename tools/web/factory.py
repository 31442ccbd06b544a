"""Factories for the cache and aggregator collaborators."""

from api.engine_registry import registered_engines
from config.config import CacheBackend, Config
from utils.logger import get_logger

from .aggregator import MultiEngineAggregator
from .cache import InMemoryTTLCache, RedisCache, SharedCache

logger = get_logger(__name__)

# Singleton cache instance (process-shared)
_cache_instance: SharedCache | None = None


def create_cache_from_env(config: Config) -> SharedCache:
    """
    Create the shared result cache from configuration.

    Configuration:
        CACHE_BACKEND: "memory" (default) or "redis"
        REDIS_URL: Redis connection URL for the redis backend
        CACHE_TTL_SECONDS: Entry lifetime in seconds (default: 600)
        CACHE_MAX_ENTRIES: Size cap for the memory backend (default: 10000)

    Returns:
        Process-wide SharedCache instance

    Raises:
        ValueError: If CACHE_BACKEND is not a known backend
    """
    global _cache_instance

    if _cache_instance is not None:
        return _cache_instance

    if config.CACHE_BACKEND == CacheBackend.REDIS.value:
        logger.info(f"Using Redis result cache at {config.REDIS_URL}")
        _cache_instance = RedisCache(config.REDIS_URL, ttl_seconds=config.CACHE_TTL_SECONDS)
    elif config.CACHE_BACKEND == CacheBackend.MEMORY.value:
        logger.info("Using in-memory result cache")
        _cache_instance = InMemoryTTLCache(
            ttl_seconds=config.CACHE_TTL_SECONDS, max_entries=config.CACHE_MAX_ENTRIES
        )
    else:
        raise ValueError(f"Unknown CACHE_BACKEND '{config.CACHE_BACKEND}'")

    return _cache_instance


def reset_cache_instance() -> None:
    """Drop the process-wide cache (for testing)."""
    global _cache_instance
    _cache_instance = None


def create_aggregator() -> MultiEngineAggregator:
    engines = registered_engines()
    if not engines:
        logger.warning("No upstream search engines registered; searches will return no results")
    return MultiEngineAggregator()
