from abc import ABC, abstractmethod

from models.search_results import SearchResult

ENGINE_ERROR_KINDS = {"empty_result_set", "request", "unexpected"}


class EngineError(Exception):
    """Raised by an upstream engine; `kind` classifies the failure for the renderer."""

    def __init__(self, kind: str, message: str = ""):
        super().__init__(message or kind)
        self.kind = kind if kind in ENGINE_ERROR_KINDS else "unexpected"


class BaseSearchEngine(ABC):
    """
    Abstract base class for upstream search engines.
    Concrete engines inherit from this class and are registered by name.
    """

    name: str = "base"

    @abstractmethod
    async def results(
        self, query: str, page: int, timeout: float, safe_search_level: int
    ) -> list[SearchResult]:
        """
        Fetch one page of results from the upstream engine.

        Args:
            query: The search query
            page: Zero-indexed page number
            timeout: Request timeout in seconds
            safe_search_level: Effective safe-search level to forward upstream

        Returns:
            Results in the engine's own order

        Raises:
            EngineError: With kind "empty_result_set" when the engine found nothing,
                "request" on transport/HTTP failures, "unexpected" otherwise
        """
        pass

    def normalize_error(self, exc: BaseException) -> str:
        """
        Map an exception raised while querying this engine to an error kind.
        Subclasses can override this when their client raises richer errors.
        """
        if isinstance(exc, EngineError):
            return exc.kind
        if isinstance(exc, (TimeoutError, ConnectionError, OSError)):
            return "request"
        return "unexpected"
