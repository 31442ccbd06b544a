import json

import pytest

from models.search_settings import SearchSettings
from orchestrator.errors import ConfigOrQueryParseError
from server.schemas.requests import parse_cookie_preferences, parse_search_params


def test_search_params_parse_integers():
    params = parse_search_params({"q": "sweden", "page": "3", "safesearch": "1"})
    assert params.q == "sweden"
    assert params.page == 3
    assert params.safesearch == 1


def test_search_params_optional_fields():
    params = parse_search_params({"q": "sweden", "page": ""})
    assert params.page is None
    assert params.safesearch is None


@pytest.mark.parametrize("raw", [{"page": "x"}, {"page": "-2"}, {"safesearch": "1.5"}])
def test_search_params_reject_malformed(raw):
    with pytest.raises(ConfigOrQueryParseError):
        parse_search_params({"q": "sweden", **raw})


def test_cookie_parsed():
    raw = json.dumps({"engines": ["searx", "duckduckgo"], "safe_search_level": 3, "animation": "none"})
    prefs = parse_cookie_preferences(raw)
    assert prefs.engines == ["searx", "duckduckgo"]
    assert prefs.safe_search_level == 3
    assert prefs.theme is None


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "{not json",
        json.dumps({"engines": ["searx"]}),
        json.dumps({"engines": "searx", "safe_search_level": 1}),
        json.dumps({"engines": [], "safe_search_level": 9}),
        json.dumps(["searx"]),
    ],
)
def test_absent_or_malformed_cookie_is_ignored(raw):
    assert parse_cookie_preferences(raw) is None


def test_cookie_preferences_fill_missing_style_from_config(config):
    prefs = parse_cookie_preferences(json.dumps({"engines": ["searx"], "safe_search_level": 1, "theme": "dark"}))
    settings = SearchSettings.from_preferences(prefs, config)
    assert settings.engines == ("searx",)
    assert settings.theme == "dark"
    assert settings.colorscheme == config.COLORSCHEME
    assert settings.animation == config.ANIMATION


def test_missing_cookie_uses_config(config):
    assert SearchSettings.from_preferences(None, config) == SearchSettings.from_config(config)
