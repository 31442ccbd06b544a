import pytest
from dotenv import load_dotenv

from config.config import Config
from models.search_results import ResultBundle, SearchResult
from orchestrator.errors import CacheError
from tools.web.aggregator import SearchAggregator
from tools.web.cache import InMemoryTTLCache, SharedCache

# Load environment variables from .env file for tests
load_dotenv()

BLOCKLIST_RULES = "\n".join([r"(?i)\bforbidden\b", r"^badword$", r"blocked-[0-9]+"]) + "\n"


class FakeAggregator(SearchAggregator):
    """
    Offline aggregator that records every call.

    Returns two results per page unless `empty` is set, and raises `error`
    when one is configured.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.error: Exception | None = None
        self.empty = False
        self.engine_errors = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def pages(self) -> list[int]:
        return sorted(call["page"] for call in self.calls)

    async def aggregate(
        self, query, page, random_delay, debug, engine_handles, timeout, safe_search_level
    ) -> ResultBundle:
        self.calls.append(
            {
                "query": query,
                "page": page,
                "random_delay": random_delay,
                "debug": debug,
                "engines": [h.name for h in engine_handles],
                "timeout": timeout,
                "safe_search_level": safe_search_level,
            }
        )
        if self.error is not None:
            raise self.error
        if self.empty:
            return ResultBundle(engine_errors=list(self.engine_errors))
        return ResultBundle(
            results=[
                SearchResult(
                    title=f"{query} result {page}-{i}",
                    url=f"https://example.com/{page}/{i}",
                    description=f"About {query}",
                    engines=["duckduckgo"],
                )
                for i in range(2)
            ],
            engine_errors=list(self.engine_errors),
        )


class FlakyCache(SharedCache):
    """In-memory cache whose reads and/or writes can be made to fail."""

    def __init__(self, fail_get: bool = False, fail_put: bool = False):
        self.inner = InMemoryTTLCache(ttl_seconds=600)
        self.fail_get = fail_get
        self.fail_put = fail_put
        self.put_calls: list[list[str]] = []

    async def get(self, key):
        if self.fail_get:
            raise CacheError("cache unavailable")
        return await self.inner.get(key)

    async def put(self, bundles, keys):
        self.put_calls.append(list(keys))
        if self.fail_put:
            raise CacheError("cache unavailable")
        await self.inner.put(bundles, keys)


@pytest.fixture
def blocklist_file(tmp_path):
    path = tmp_path / "blocklist.txt"
    path.write_text(BLOCKLIST_RULES, encoding="utf-8")
    return path


@pytest.fixture
def mock_env(monkeypatch, blocklist_file):
    """Fixture to pin the search configuration for testing."""
    env_vars = {
        "BINDING_IP": "127.0.0.1",
        "PORT": "8080",
        "SAFE_SEARCH": "0",
        "UPSTREAM_SEARCH_ENGINES": "duckduckgo=true,searx=true,brave=false",
        "REQUEST_TIMEOUT": "30",
        "RANDOM_DELAY": "false",
        "DEBUG": "false",
        "CACHE_BACKEND": "memory",
        "CACHE_TTL_SECONDS": "600",
        "BLOCKLIST_PATH": str(blocklist_file),
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def config(mock_env):
    return Config()


@pytest.fixture
def aggregator():
    return FakeAggregator()


@pytest.fixture
def cache():
    return InMemoryTTLCache(ttl_seconds=600)


@pytest.fixture
def flaky_cache():
    return FlakyCache()
