"""
LogSight Data Contracts

EVERY data structure that leaves the aggregation engine is defined here.
If you need a field that doesn't exist here, ADD IT HERE FIRST,
then update the producer and consumers.

Keys are camelCase because the document is served verbatim as JSON to the
dashboard.

Producers: analytics.py, domains/combat.py, domains/utility.py
Consumers: api/, export.py, scoreboard.py, cli.py
"""

from __future__ import annotations

from typing import TypedDict

# ============================================================
# ROUND DETAIL
# ============================================================


class KillFeedEntry(TypedDict):
    """A kill as shown in a round's kill feed."""

    timestamp: str  # ISO 8601
    killer: str
    killerTeam: str
    victim: str
    victimTeam: str
    weapon: str
    headshot: bool


class BlindEffect(TypedDict):
    """One person caught by a flashbang."""

    victim: str
    victimSide: str  # "CT", "T" or "Spectator"
    duration: float  # seconds
    isSelf: bool
    isTeammate: bool
    isEnemy: bool
    isSpectator: bool


class FlashReport(TypedDict):
    """A thrown flashbang and everyone it blinded."""

    timestamp: str
    thrower: str
    throwerTeam: str  # team name, or "Spectator"
    throwerSide: str  # "CT", "T" or "Spectator"
    entindex: int
    blinds: list[BlindEffect]


class ChatMessage(TypedDict):
    """A chat line, timed relative to round start."""

    timestamp: str
    relativeTime: str  # "M:SS", or "-M:SS" during freeze time
    player: str
    team: str
    side: str  # "CT" or "T"
    message: str
    isTeamChat: bool
    isFreezeTime: bool


class RoundPlayerStats(TypedDict):
    """A player's numbers for a single round."""

    name: str
    team: str
    side: str
    kills: int
    deaths: int
    assists: int
    damage: int
    survived: bool


class RoundScore(TypedDict):
    """Running score after a round, by side."""

    ct: int
    t: int


class RoundData(TypedDict):
    """Everything known about one round."""

    number: int
    winner: str  # team name
    winnerSide: str  # "CT" or "T"
    winReason: str  # "elimination", "bomb_defused", "bomb_exploded", "timeout"
    duration: int  # seconds
    score: RoundScore
    playerStats: list[RoundPlayerStats]
    kills: list[KillFeedEntry]
    chat: list[ChatMessage]
    flashes: list[FlashReport]


# ============================================================
# TEAMS
# ============================================================


class RoundWinTypes(TypedDict):
    elimination: int
    bombDefused: int
    bombExploded: int
    timeout: int


class TeamStats(TypedDict):
    """Final team numbers."""

    name: str
    finalScore: int
    firstHalfScore: int
    secondHalfScore: int
    roundWinTypes: RoundWinTypes
    ctRoundsWon: int
    tRoundsWon: int


# ============================================================
# PLAYERS
# ============================================================


class SpectatorBlind(TypedDict):
    name: str
    totalTime: float


class FlashStats(TypedDict):
    """Flashbang effectiveness for one thrower."""

    thrown: int
    enemiesBlinded: int
    enemyBlindTime: float
    teammatesBlinded: int
    teammateBlindTime: float
    selfFlashes: int
    selfBlindTime: float
    spectatorsFlashed: int
    spectatorBlinds: list[SpectatorBlind]


class MultiKillRounds(TypedDict):
    twoK: int
    threeK: int
    fourK: int
    ace: int


class SplitStats(TypedDict):
    """Kills/deaths/ADR/HS% for one half or one side."""

    kills: int
    deaths: int
    adr: float
    hsPercent: int


class PlayerStats(TypedDict):
    """Cumulative player numbers for the whole match."""

    name: str
    team: str
    kills: int
    deaths: int
    assists: int
    adr: float
    hsPercent: int
    firstHalf: SplitStats
    secondHalf: SplitStats
    ctSide: SplitStats
    tSide: SplitStats
    openingKills: int
    openingDeaths: int
    clutchesWon: int
    clutchesAttempted: int
    flashStats: FlashStats
    legShotPercent: int
    leftLegDamage: int
    rightLegDamage: int
    totalDamageDealt: int
    multiKillRounds: MultiKillRounds


# ============================================================
# MATCH DOCUMENT - the only artifact the core produces
# ============================================================


class MatchData(TypedDict):
    """The full match document."""

    map: str
    date: str  # DD/MM/YYYY
    duration: str  # "M:SS"
    teams: list[TeamStats]  # starting-CT team first
    rounds: list[RoundData]
    players: list[PlayerStats]  # sorted by kills, descending
