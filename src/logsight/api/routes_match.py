"""
Match route handlers.

Endpoints:
- GET /health: health check
- GET /api/match: full match document
- GET /api/match/map: map, date and duration
- GET /api/match/teams: team stats
- GET /api/match/rounds: all rounds
- GET /api/match/rounds/{number}: one round
- GET /api/match/rounds/{number}/roster: one round, every player listed
- GET /api/match/players: all players
- GET /api/match/players/{name}: one player
- GET /api/match/scoreboard: cumulative scoreboard up to a round
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from logsight.api.shared import HealthResponse, MapInfo, get_loaded_match, get_match
from logsight.core.schemas import MatchData
from logsight.scoreboard import cumulative_stats, find_player, find_round, round_roster

logger = logging.getLogger(__name__)

router = APIRouter(tags=["match"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Health check."""
    match = get_loaded_match(request)
    return HealthResponse(rounds=len(match["rounds"]) if match else 0)


@router.get("/api/match")
async def get_full_match(match: MatchData = Depends(get_match)) -> dict[str, Any]:
    """The full match document."""
    return match


@router.get("/api/match/map", response_model=MapInfo)
async def get_map(match: MatchData = Depends(get_match)) -> MapInfo:
    """Map, date and duration."""
    return MapInfo(map=match["map"], date=match["date"], duration=match["duration"])


@router.get("/api/match/teams")
async def get_teams(match: MatchData = Depends(get_match)) -> list[dict[str, Any]]:
    """Both teams, starting-CT team first."""
    return match["teams"]


@router.get("/api/match/rounds")
async def get_rounds(match: MatchData = Depends(get_match)) -> list[dict[str, Any]]:
    """Every round in order."""
    return match["rounds"]


@router.get("/api/match/rounds/{number}")
async def get_round(number: int, match: MatchData = Depends(get_match)) -> dict[str, Any]:
    """A single round."""
    round_ = find_round(match, number)
    if round_ is None:
        raise HTTPException(status_code=404, detail=f"Round {number} not found")
    return round_


@router.get("/api/match/rounds/{number}/roster")
async def get_round_roster(
    number: int, match: MatchData = Depends(get_match)
) -> list[dict[str, Any]]:
    """A round's player rows, with zeroed rows for players who did nothing."""
    roster = round_roster(match, number)
    if roster is None:
        raise HTTPException(status_code=404, detail=f"Round {number} not found")
    return roster


@router.get("/api/match/players")
async def get_players(match: MatchData = Depends(get_match)) -> list[dict[str, Any]]:
    """Every player, most kills first."""
    return match["players"]


@router.get("/api/match/players/{name}")
async def get_player(name: str, match: MatchData = Depends(get_match)) -> dict[str, Any]:
    """A single player."""
    player = find_player(match, name)
    if player is None:
        raise HTTPException(status_code=404, detail=f"Player {name!r} not found")
    return player


@router.get("/api/match/scoreboard")
async def get_scoreboard(
    through_round: int | None = Query(None, ge=0, description="Rounds to include"),
    match: MatchData = Depends(get_match),
) -> list[dict[str, Any]]:
    """Cumulative scoreboard after ``through_round`` rounds (all rounds by default)."""
    if through_round is None:
        through_round = len(match["rounds"])
    return cumulative_stats(match, through_round)
