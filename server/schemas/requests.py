"""Pydantic request models for FastAPI endpoints."""

import json
from collections.abc import Mapping

from pydantic import BaseModel, Field, ValidationError

from orchestrator.errors import ConfigOrQueryParseError
from utils.logger import get_logger

logger = get_logger(__name__)

PREFERENCES_COOKIE = "appCookie"


class SearchParams(BaseModel):
    q: str | None = None
    page: int | None = Field(None, ge=0)
    safesearch: int | None = Field(None, ge=0)


class CookiePreferences(BaseModel):
    engines: list[str]
    safe_search_level: int = Field(..., ge=0, le=4)
    colorscheme: str | None = None
    theme: str | None = None
    animation: str | None = None


def parse_search_params(query_params: Mapping[str, str]) -> SearchParams:
    """
    Validate the raw query string parameters of /search.

    Raises:
        ConfigOrQueryParseError: If page or safesearch are not non-negative integers
    """
    try:
        return SearchParams(
            q=query_params.get("q"),
            page=query_params.get("page") or None,
            safesearch=query_params.get("safesearch") or None,
        )
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise ConfigOrQueryParseError(f"Invalid search parameters: {fields}") from e


def parse_cookie_preferences(raw: str | None) -> CookiePreferences | None:
    """Parse the preferences cookie; absent or malformed cookies yield None."""
    if not raw:
        return None
    try:
        return CookiePreferences.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        logger.info(f"Ignoring malformed {PREFERENCES_COOKIE} cookie: {type(e).__name__}")
        return None
