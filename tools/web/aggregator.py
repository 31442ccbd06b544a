"""
Fan-out of one query to the selected upstream engines.

Engines run concurrently with a per-call timeout. Each engine failure is
normalized into an EngineErrorInfo instead of failing the whole page, so the
renderer can show which engines were unavailable.
"""

import asyncio
import random
from abc import ABC, abstractmethod
from collections.abc import Sequence

from api.base_engine import EngineError
from api.engine_registry import EngineHandler
from models.search_results import EngineErrorInfo, ResultBundle, SearchResult
from orchestrator.errors import UpstreamError
from utils.logger import get_logger

logger = get_logger(__name__)


class SearchAggregator(ABC):
    """Boundary of the multi-source aggregation engine."""

    @abstractmethod
    async def aggregate(
        self,
        query: str,
        page: int,
        random_delay: bool,
        debug: bool,
        engine_handles: Sequence[EngineHandler],
        timeout: float,
        safe_search_level: int,
    ) -> ResultBundle:
        """
        Query every engine handle and merge their results into one bundle.

        Raises:
            UpstreamError: If aggregation failed as a whole
        """


class MultiEngineAggregator(SearchAggregator):
    """
    Concurrent aggregator over registered engines.

    Example usage:
        aggregator = MultiEngineAggregator()
        bundle = await aggregator.aggregate(
            "sweden", 0, False, False, [EngineHandler.new("duckduckgo")], 30, 0
        )
    """

    def __init__(self, min_delay_s: float = 1.0, max_delay_s: float = 10.0):
        self.min_delay_s = min_delay_s
        self.max_delay_s = max_delay_s

    async def _safe_call(
        self, handle: EngineHandler, query: str, page: int, timeout: float, safe_search_level: int
    ) -> list[SearchResult] | EngineErrorInfo:
        """Call one engine, converting any failure into an EngineErrorInfo."""
        try:
            results = await asyncio.wait_for(
                handle.engine.results(query, page, timeout, safe_search_level), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Timeout for engine {handle.name}",
                extra={"extra_fields": {"engine": handle.name, "timeout_s": timeout}},
            )
            return EngineErrorInfo(engine=handle.name, error_type="request")
        except EngineError as e:
            if e.kind != "empty_result_set":
                logger.warning(
                    f"Engine {handle.name} failed: {e}",
                    extra={"extra_fields": {"engine": handle.name, "error_type": e.kind}},
                )
            return EngineErrorInfo(engine=handle.name, error_type=e.kind)
        except Exception as e:
            kind = handle.engine.normalize_error(e)
            logger.error(
                f"Unexpected error for engine {handle.name}: {e}",
                extra={
                    "extra_fields": {
                        "engine": handle.name,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            return EngineErrorInfo(engine=handle.name, error_type=kind)

        if not results:
            return EngineErrorInfo(engine=handle.name, error_type="empty_result_set")
        return results

    async def aggregate(
        self,
        query: str,
        page: int,
        random_delay: bool,
        debug: bool,
        engine_handles: Sequence[EngineHandler],
        timeout: float,
        safe_search_level: int,
    ) -> ResultBundle:
        if random_delay and not debug:
            await asyncio.sleep(random.uniform(self.min_delay_s, self.max_delay_s))

        outcomes = await asyncio.gather(
            *(self._safe_call(h, query, page, timeout, safe_search_level) for h in engine_handles)
        )

        merged: dict[str, SearchResult] = {}
        errors: list[EngineErrorInfo] = []
        for handle, outcome in zip(engine_handles, outcomes):
            if isinstance(outcome, EngineErrorInfo):
                errors.append(outcome)
                continue
            for result in outcome:
                existing = merged.get(result.url)
                if existing is None:
                    result.add_engine(handle.name)
                    merged[result.url] = result
                else:
                    existing.add_engine(handle.name)

        if engine_handles and len(errors) == len(engine_handles):
            if all(e.error_type != "empty_result_set" for e in errors):
                raise UpstreamError(
                    f"All {len(engine_handles)} engines failed for query page {page}: "
                    + ", ".join(f"{e.engine}={e.error_type}" for e in errors)
                )

        logger.info(
            f"Aggregated {len(merged)} results from {len(engine_handles)} engines",
            extra={
                "extra_fields": {
                    "page": page,
                    "engine_count": len(engine_handles),
                    "result_count": len(merged),
                    "error_count": len(errors),
                }
            },
        )

        return ResultBundle(
            results=list(merged.values()),
            engine_errors=errors,
            safe_search_level=safe_search_level,
        )
