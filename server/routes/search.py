"""Index and search page endpoints."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from config.config import Config
from orchestrator.search_orchestrator import RedirectOutcome, SearchOrchestrator
from server.dependencies import get_config, get_search_orchestrator
from server.rendering import render_index_page, render_search_page
from server.schemas.requests import (
    PREFERENCES_COOKIE,
    parse_cookie_preferences,
    parse_search_params,
)
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Search"])


@router.get("/", response_class=HTMLResponse)
async def index(config: Config = Depends(get_config)):
    """Landing page with the search form."""
    return HTMLResponse(render_index_page(config.COLORSCHEME, config.THEME, config.ANIMATION))


@router.get("/search", response_class=HTMLResponse)
async def search(
    request: Request,
    orchestrator: SearchOrchestrator = Depends(get_search_orchestrator),
):
    """
    Search results page.

    Query parameters: `q` (required), `page` (1-indexed, default 1) and
    `safesearch` (optional override). A missing or blank `q` redirects to `/`.

    Example:
        curl "http://127.0.0.1:8080/search?q=sweden&page=1"
    """
    params = parse_search_params(request.query_params)
    preferences = parse_cookie_preferences(request.cookies.get(PREFERENCES_COOKIE))

    outcome = await orchestrator.handle(params.q, params.page, preferences, params.safesearch)

    if isinstance(outcome, RedirectOutcome):
        return RedirectResponse(url=outcome.location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    html = render_search_page(
        outcome.colorscheme,
        outcome.theme,
        outcome.animation,
        outcome.query,
        outcome.results,
        outcome.page,
    )
    return HTMLResponse(content=html, status_code=status.HTTP_200_OK)
