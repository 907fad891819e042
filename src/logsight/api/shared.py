"""
Shared utilities for the LogSight API.

Contains the response models and the dependency that hands the loaded match
document to the route modules.
"""

import logging

from fastapi import HTTPException, Request
from pydantic import BaseModel, Field

from logsight import __version__
from logsight.core.schemas import MatchData

logger = logging.getLogger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = __version__
    rounds: int = Field(0, description="Rounds in the loaded match (0 if none)")


class MapInfo(BaseModel):
    """Match header: map, date and duration."""

    map: str
    date: str
    duration: str


# =============================================================================
# Dependencies
# =============================================================================


def get_loaded_match(request: Request) -> MatchData | None:
    """The match document stored on the app, if any."""
    return getattr(request.app.state, "match", None)


def get_match(request: Request) -> MatchData:
    """Dependency: the loaded match document, or 503 if none is loaded."""
    match = get_loaded_match(request)
    if match is None:
        raise HTTPException(status_code=503, detail="No match loaded")
    return match
