"""
SearchOrchestrator - top-level entry point for a search request.

Resolves the request settings, resolves the requested page together with its
neighbours concurrently, and refreshes the cache for the whole window in a
detached background task.
"""

import asyncio
from dataclasses import dataclass

from api.engine_registry import unknown_engines
from models.search_results import ResultBundle
from models.search_settings import SearchSettings
from orchestrator.result_resolver import ResultResolver
from orchestrator.safe_search import resolve_safe_search_level
from tools.web.aggregator import SearchAggregator
from tools.web.cache import SharedCache
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RedirectOutcome:
    location: str = "/"


@dataclass(frozen=True)
class RenderableResult:
    query: str
    page: int  # zero-indexed
    results: ResultBundle
    colorscheme: str
    theme: str
    animation: str


class SearchOrchestrator:
    """
    Orchestrates one search request over the shared cache and aggregator.

    Example usage:
        orchestrator = SearchOrchestrator(config, cache, aggregator)
        outcome = await orchestrator.handle("sweden", 1, None, None)
    """

    def __init__(
        self,
        config,
        cache: SharedCache,
        aggregator: SearchAggregator,
        resolver: ResultResolver | None = None,
    ):
        self.config = config
        self.cache = cache
        self.aggregator = aggregator
        self.resolver = resolver or ResultResolver(config, cache, aggregator)
        self._background_tasks: set[asyncio.Task] = set()

    def resolve_settings(self, stored_preferences, request_safe_search: int | None) -> SearchSettings:
        """Build settings from stored preferences or config, then finalize the safe-search level."""
        settings = SearchSettings.from_preferences(stored_preferences, self.config)
        level = resolve_safe_search_level(
            settings.safe_search_level, request_safe_search, self.config.SAFE_SEARCH
        )
        return settings.with_safe_search_level(level)

    @staticmethod
    def prefetch_window(requested_page: int | None) -> tuple[int, int, int]:
        """
        Convert a 1-indexed page into (previous, current, next) zero-indexed pages.

        Pages 0 and 1 both map to internal page 0; previous never goes below 0.
        """
        current = max(requested_page or 1, 1) - 1
        return max(current - 1, 0), current, current + 1

    async def handle(
        self,
        query: str | None,
        requested_page: int | None,
        stored_preferences,
        request_safe_search: int | None = None,
    ) -> RenderableResult | RedirectOutcome:
        """
        Resolve a search request.

        Args:
            query: Raw `q` parameter
            requested_page: 1-indexed page from the request, None for the first page
            stored_preferences: Validated cookie preferences, None if absent or malformed
            request_safe_search: `safesearch` override from the request, if any

        Returns:
            RenderableResult for the current page, or RedirectOutcome for an empty query

        Raises:
            UpstreamError, FilterRuleError, CacheError: From any page in the window
        """
        if query is None or not query.strip():
            return RedirectOutcome(location="/")

        settings = self.resolve_settings(stored_preferences, request_safe_search)
        previous_page, page, next_page = self.prefetch_window(requested_page)

        if previous_page != page:
            pages = (previous_page, page, next_page)
        else:
            pages = (page, next_page)

        unknown = unknown_engines(settings.engines)
        if unknown:
            logger.warning(
                f"Selected engines are not available and will be skipped: {', '.join(unknown)}",
                extra={"extra_fields": {"unknown_engines": unknown, "pages": list(pages)}},
            )

        logger.info(
            f"Resolving pages {list(pages)}",
            extra={
                "extra_fields": {
                    "pages": list(pages),
                    "safe_search_level": settings.safe_search_level,
                    "engine_count": len(settings.engines),
                }
            },
        )

        resolved = await asyncio.gather(
            *(self.resolver.resolve(query, p, settings) for p in pages)
        )
        current_results, _ = resolved[pages.index(page)]

        self._schedule_background_write(
            [bundle for bundle, _ in resolved], [key for _, key in resolved]
        )

        return RenderableResult(
            query=query,
            page=page,
            results=current_results,
            colorscheme=settings.colorscheme,
            theme=settings.theme,
            animation=settings.animation,
        )

    def _schedule_background_write(self, bundles: list[ResultBundle], keys: list[str]) -> None:
        """Detach a batched cache refresh; the request never waits on or sees its outcome."""
        task = asyncio.create_task(self.cache.put(bundles, keys))
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_write_done)

    def _on_background_write_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                f"Background cache refresh failed: {exc}",
                extra={"extra_fields": {"error_type": type(exc).__name__}},
            )

    @property
    def pending_background_writes(self) -> int:
        return len(self._background_tasks)

    async def drain_background_writes(self) -> None:
        """Wait for pending background cache refreshes; failures are already logged."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
