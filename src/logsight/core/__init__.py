"""
LogSight Core - Foundation modules for log analysis.

This module contains the fundamental components:
- constants: Side tags, win reasons and the halftime rule
- config: Application configuration management
- utils: Timing, safe arithmetic and formatting helpers
- schemas: Data contracts for the match document
"""

from logsight.core.constants import (
    ACE_KILLS,
    HALF_LENGTH,
    FlashSide,
    Side,
    WinReason,
    is_first_half,
    resolve_sides,
    side_for_team,
)
from logsight.core.schemas import (
    MatchData,
    PlayerStats,
    RoundData,
    RoundPlayerStats,
    TeamStats,
)

__all__ = [
    # Enums
    "FlashSide",
    "Side",
    "WinReason",
    # Constants
    "ACE_KILLS",
    "HALF_LENGTH",
    # Side resolution
    "is_first_half",
    "resolve_sides",
    "side_for_team",
    # Schemas (data contracts)
    "MatchData",
    "PlayerStats",
    "RoundData",
    "RoundPlayerStats",
    "TeamStats",
]
