"""
ResultResolver - resolve one (query, page) pair through cache, gate and aggregator.
"""

import asyncio

from api.engine_registry import EngineHandler
from config.config import MAX_SAFE_SEARCH_LEVEL
from models.search_results import ResultBundle
from models.search_settings import SearchSettings
from orchestrator.blocklist import is_match_from_filter_list
from orchestrator.cache_key import build_cache_key
from orchestrator.errors import CacheError
from tools.web.aggregator import SearchAggregator
from tools.web.cache import SharedCache
from utils.logger import get_logger

logger = get_logger(__name__)


class ResultResolver:
    """
    Resolves a single results page.

    Per call: one cache read, at most one cache write and at most one
    aggregation call. Disallowed, filtered and no-engine outcomes are cached
    like any other result.
    """

    def __init__(
        self,
        config,
        cache: SharedCache,
        aggregator: SearchAggregator,
        blocklist_path: str | None = None,
        filter_fn=is_match_from_filter_list,
    ):
        """
        Initialize the resolver.

        Args:
            config: Server configuration (host/port, timeouts, aggregator flags)
            cache: Shared result cache
            aggregator: Multi-engine aggregation backend
            blocklist_path: Rules file for the strict tier (defaults to config lookup)
            filter_fn: Blocklist matcher, replaceable in tests
        """
        self.config = config
        self.cache = cache
        self.aggregator = aggregator
        self.blocklist_path = blocklist_path or config.blocklist_path()
        self.filter_fn = filter_fn

    def cache_key(self, query: str, page: int, settings: SearchSettings) -> str:
        return build_cache_key(
            self.config.BINDING_IP,
            self.config.PORT,
            query,
            page,
            settings.safe_search_level,
            settings.engines,
        )

    async def _read_cache(self, cache_key: str) -> ResultBundle | None:
        try:
            return await self.cache.get(cache_key)
        except CacheError as e:
            logger.warning(
                f"Cache read failed, treating as miss: {e}",
                extra={"extra_fields": {"cache_key": cache_key}},
            )
            return None

    def _engine_handles(self, engines) -> list[EngineHandler]:
        handles = []
        for name in engines:
            try:
                handles.append(EngineHandler.new(name))
            except KeyError:
                # the per-request warning is logged by SearchOrchestrator
                logger.debug(
                    f"Skipping unknown engine '{name}'",
                    extra={"extra_fields": {"engine": name}},
                )
        return handles

    async def _is_blocked(self, query: str) -> bool:
        # file reads and regex matching stay off the event loop thread
        return await asyncio.to_thread(self.filter_fn, self.blocklist_path, query)

    async def resolve(
        self, query: str, page: int, settings: SearchSettings
    ) -> tuple[ResultBundle, str]:
        """
        Fetch results for a query and zero-indexed page.

        Args:
            query: Search query
            page: Zero-indexed page number
            settings: Resolved request settings

        Returns:
            Tuple of (bundle, cache key used)

        Raises:
            UpstreamError: If aggregation fails
            FilterRuleError: If the blocklist is unreadable or malformed
            CacheError: If writing the resolved bundle back fails
        """
        safe_search_level = settings.safe_search_level
        cache_key = self.cache_key(query, page, settings)

        cached = await self._read_cache(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for page {page}", extra={"extra_fields": {"page": page}})
            return cached, cache_key

        if safe_search_level == MAX_SAFE_SEARCH_LEVEL and await self._is_blocked(query):
            results = ResultBundle()
            results.set_disallowed()
            results.set_safe_search_level(safe_search_level)
            await self.cache.put([results], [cache_key])
            logger.info(
                "Query disallowed by blocklist",
                extra={"extra_fields": {"page": page, "safe_search_level": safe_search_level}},
            )
            return results, cache_key

        if settings.engines:
            results = await self.aggregator.aggregate(
                query,
                page,
                self.config.RANDOM_DELAY,
                self.config.DEBUG,
                self._engine_handles(settings.engines),
                self.config.REQUEST_TIMEOUT,
                safe_search_level,
            )
        else:
            results = ResultBundle()
            results.set_no_engines_selected()

        if not results.engine_errors and not results.results and not results.no_engines_selected:
            results.set_filtered()

        results.set_safe_search_level(safe_search_level)
        await self.cache.put([results], [cache_key])
        return results, cache_key
