"""FastAPI application factory."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from orchestrator.errors import (
    CacheError,
    ConfigOrQueryParseError,
    FilterRuleError,
    SearchError,
    UpstreamError,
)
from server.dependencies import get_config, get_search_orchestrator
from server.middleware import RequestIDMiddleware
from server.routes import health, search
from server.schemas.responses import ErrorDTO
from utils.logger import get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    ConfigOrQueryParseError: status.HTTP_400_BAD_REQUEST,
    FilterRuleError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UpstreamError: status.HTTP_502_BAD_GATEWAY,
    CacheError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    config = app.dependency_overrides.get(get_config, get_config)()
    logger.info(
        "Search server starting up",
        extra={
            "extra_fields": {
                "server": config.get_server_info(),
                "cache_backend": config.CACHE_BACKEND,
                "safe_search": config.SAFE_SEARCH,
                "engines": config.enabled_engines(),
            }
        },
    )

    yield

    override = app.dependency_overrides.get(get_search_orchestrator)
    orchestrator = override() if override else getattr(get_search_orchestrator, "_instance", None)
    if orchestrator is not None:
        # Flush prefetched pages still being written
        await orchestrator.drain_background_writes()
        await orchestrator.cache.close()
    logger.info("Search server shutting down")


async def search_error_handler(request: Request, exc: SearchError) -> JSONResponse:
    """Map pipeline errors to HTTP responses."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    request_id = getattr(request.state, "request_id", None)
    log = logger.warning if status_code < 500 else logger.error
    log(
        f"Search request failed: {exc}",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "error_type": type(exc).__name__,
                "status_code": status_code,
            }
        },
    )
    body = ErrorDTO(detail=str(exc), error_type=type(exc).__name__, request_id=request_id)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Metasurf",
        description="Privacy-respecting meta search engine",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(SearchError, search_error_handler)

    app.include_router(health.router)
    app.include_router(search.router)

    # Stylesheets referenced by the rendered pages
    static_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "public", "static")
    if os.path.isdir(static_dir):
        app.mount("/static", StaticFiles(directory=static_dir), name="static")
    else:
        logger.warning(f"Static directory not found at {static_dir}; skipping static mount")

    return app
