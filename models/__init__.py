"""
Models package for search settings and result bundles.
"""

from .search_results import EngineErrorInfo, ResultBundle, SearchResult
from .search_settings import SearchSettings

__all__ = ["EngineErrorInfo", "ResultBundle", "SearchResult", "SearchSettings"]
