"""Cache and aggregation collaborators for the search pipeline."""

from .aggregator import MultiEngineAggregator, SearchAggregator
from .cache import InMemoryTTLCache, RedisCache, SharedCache
from .factory import create_aggregator, create_cache_from_env

__all__ = [
    "InMemoryTTLCache",
    "MultiEngineAggregator",
    "RedisCache",
    "SearchAggregator",
    "SharedCache",
    "create_aggregator",
    "create_cache_from_env",
]
