"""
LogSight Web API

FastAPI application serving the match document built from a console log.

This package exposes:
- create_app: App factory (tests pass a prebuilt match document)
- app: The FastAPI application (used by uvicorn and server.py); it loads the
  log named by the configuration when it starts
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from logsight.analytics import analyze_log
from logsight.api.shared import __version__
from logsight.core.config import get_config
from logsight.core.schemas import MatchData

logger = logging.getLogger(__name__)


def create_app(match: MatchData | None = None, log_path: str | Path | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        match: Match document to serve as-is
        log_path: Log to parse at startup when no document is given; falls
            back to ``parser.log_path`` from the configuration

    Returns:
        Configured FastAPI app
    """
    config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.match is None:
            path = log_path or config.parser.log_path
            if path:
                # LogReadError propagates and aborts startup
                app.state.match = analyze_log(path, encoding=config.parser.encoding)
                logger.info(f"Serving match from {path}")
            else:
                logger.warning("No log path configured; match routes will return 503")
        yield

    # =========================================================================
    # FastAPI App Creation
    # =========================================================================

    app = FastAPI(
        title="LogSight API",
        description="CS:GO match log analyzer - scores, rounds and player statistics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.match = match

    # =========================================================================
    # Middleware
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # =========================================================================
    # Global Exception Handler
    # =========================================================================

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler to prevent information disclosure."""
        logger.exception(f"Unhandled exception for {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": "An unexpected error occurred. Please try again later.",
            },
        )

    # =========================================================================
    # Include Route Modules
    # =========================================================================

    from logsight.api.routes_match import router as match_router

    app.include_router(match_router)

    return app


app = create_app()
