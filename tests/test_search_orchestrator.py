"""
Tests for SearchOrchestrator: settings resolution, prefetch window, fan-out
and the detached cache refresh.
"""

import asyncio
import logging

import pytest

from orchestrator.errors import UpstreamError
from orchestrator.search_orchestrator import RedirectOutcome, RenderableResult, SearchOrchestrator
from server.schemas.requests import CookiePreferences


@pytest.fixture
def orchestrator(config, cache, aggregator):
    return SearchOrchestrator(config, cache, aggregator)


async def _handle_and_drain(orchestrator, *args):
    outcome = await orchestrator.handle(*args)
    await orchestrator.drain_background_writes()
    return outcome


@pytest.mark.parametrize("query", [None, "", "   ", "\t\n"])
def test_blank_query_redirects(orchestrator, aggregator, query):
    outcome = asyncio.run(orchestrator.handle(query, 1, None))
    assert outcome == RedirectOutcome(location="/")
    assert aggregator.call_count == 0


@pytest.mark.parametrize(
    "requested, window",
    [(None, (0, 0, 1)), (0, (0, 0, 1)), (1, (0, 0, 1)), (2, (0, 1, 2)), (5, (3, 4, 5))],
)
def test_prefetch_window(requested, window):
    assert SearchOrchestrator.prefetch_window(requested) == window


def test_first_page_resolves_current_and_next_only(orchestrator, aggregator):
    outcome = asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, None))
    assert isinstance(outcome, RenderableResult)
    assert outcome.page == 0
    assert aggregator.pages == [0, 1]


def test_second_page_resolves_three_pages(orchestrator, aggregator):
    outcome = asyncio.run(_handle_and_drain(orchestrator, "sweden", 2, None))
    assert outcome.page == 1
    assert aggregator.pages == [0, 1, 2]
    assert outcome.results.results[0].title == "sweden result 1-0"


def test_defaults_come_from_config(orchestrator, aggregator):
    outcome = asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, None))
    assert outcome.results.safe_search_level == 0
    assert outcome.theme == "simple"
    assert outcome.colorscheme == "catppuccin-mocha"
    assert all(call["safe_search_level"] == 0 for call in aggregator.calls)


def test_stored_preferences_override_defaults(orchestrator, cache):
    prefs = CookiePreferences(engines=["searx"], safe_search_level=2, theme="dark")
    outcome = asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, prefs))
    assert outcome.results.safe_search_level == 2
    assert outcome.theme == "dark"
    assert outcome.animation == "simple-frosted-glow"
    key = "http://127.0.0.1:8080/search?q=sweden&page=0&safesearch=2&engines=searx"
    assert asyncio.run(cache.get(key)) is not None


def test_url_cannot_request_strict_tier(orchestrator, aggregator):
    prefs = CookiePreferences(engines=["duckduckgo"], safe_search_level=1)
    outcome = asyncio.run(_handle_and_drain(orchestrator, "forbidden", 1, prefs, 4))
    # server default (0) replaces the URL's 4, so the blocklist gate is skipped
    assert outcome.results.safe_search_level == 0
    assert not outcome.results.disallowed
    assert aggregator.call_count == 2


def test_strict_tier_from_stored_preferences_disallows(orchestrator, aggregator):
    prefs = CookiePreferences(engines=["duckduckgo"], safe_search_level=4)
    outcome = asyncio.run(_handle_and_drain(orchestrator, "forbidden", 1, prefs))
    assert outcome.results.disallowed
    assert outcome.results.results == []
    assert aggregator.call_count == 0


def test_no_engines_selected(orchestrator, aggregator):
    prefs = CookiePreferences(engines=[], safe_search_level=0)
    outcome = asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, prefs))
    assert outcome.results.no_engines_selected
    assert aggregator.call_count == 0


def test_any_page_failure_fails_the_request(orchestrator, aggregator):
    aggregator.error = UpstreamError("upstream down")
    with pytest.raises(UpstreamError):
        asyncio.run(orchestrator.handle("sweden", 2, None))


def test_background_refresh_writes_the_whole_window(config, flaky_cache, aggregator):
    orchestrator = SearchOrchestrator(config, flaky_cache, aggregator)
    asyncio.run(_handle_and_drain(orchestrator, "sweden", 2, None))

    # three individual writes from the resolver, then one batched refresh
    assert len(flaky_cache.put_calls) == 4
    batch = flaky_cache.put_calls[-1]
    assert [key.split("&page=")[1].split("&")[0] for key in batch] == ["0", "1", "2"]
    assert orchestrator.pending_background_writes == 0


def test_background_refresh_failure_is_not_surfaced(config, flaky_cache, aggregator):
    orchestrator = SearchOrchestrator(config, flaky_cache, aggregator)

    async def scenario():
        outcome = await orchestrator.handle("sweden", 1, None)
        flaky_cache.fail_put = True
        await orchestrator.drain_background_writes()
        return outcome

    # the detached batch has not started yet when fail_put flips
    outcome = asyncio.run(scenario())
    assert isinstance(outcome, RenderableResult)
    assert len(flaky_cache.put_calls) == 3
    assert orchestrator.pending_background_writes == 0


def test_background_refresh_does_not_block_the_response(config, aggregator):
    class SlowPutCache:
        def __init__(self):
            self.release = None
            self.batches = 0

        async def get(self, key):
            return None

        async def put(self, bundles, keys):
            if len(keys) > 1:
                self.batches += 1
                await self.release.wait()

    slow_cache = SlowPutCache()
    orchestrator = SearchOrchestrator(config, slow_cache, aggregator)

    async def scenario():
        slow_cache.release = asyncio.Event()
        outcome = await orchestrator.handle("sweden", 1, None)
        await asyncio.sleep(0)
        pending = orchestrator.pending_background_writes
        slow_cache.release.set()
        await orchestrator.drain_background_writes()
        return outcome, pending

    outcome, pending = asyncio.run(scenario())
    assert isinstance(outcome, RenderableResult)
    assert pending == 1
    assert slow_cache.batches == 1


def test_second_request_served_from_cache(orchestrator, aggregator):
    asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, None))
    asyncio.run(_handle_and_drain(orchestrator, "sweden", 1, None))
    assert aggregator.call_count == 2


def test_unknown_engines_are_warned_about_once_per_request(orchestrator, aggregator, caplog):
    prefs = CookiePreferences(engines=["searx", "nosuchengine"], safe_search_level=0)
    with caplog.at_level(logging.DEBUG):
        asyncio.run(_handle_and_drain(orchestrator, "sweden", 2, prefs))

    warnings = [
        r for r in caplog.records
        if r.levelno == logging.WARNING and "not available" in r.getMessage()
    ]
    assert aggregator.call_count == 3
    assert len(warnings) == 1
    assert "nosuchengine" in warnings[0].getMessage()
