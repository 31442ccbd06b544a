"""Error types raised by the query-resolution pipeline."""


class SearchError(Exception):
    """Base class for all search pipeline failures."""


class ConfigOrQueryParseError(SearchError):
    """Raised when request parameters or configuration values cannot be parsed."""


class FilterRuleError(SearchError):
    """Raised when the blocklist cannot be read or one of its rules fails to compile."""

    def __init__(self, message: str, path: str | None = None, line_no: int | None = None):
        super().__init__(message)
        self.path = path
        self.line_no = line_no


class UpstreamError(SearchError):
    """Raised when the aggregation engine fails as a whole."""


class CacheError(SearchError):
    """Raised when the cache backend fails to read or write."""
