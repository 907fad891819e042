"""
Scoreboard helpers for the match document.

Read-only views over a MatchData document used by the CLI and the API:
- Full-roster round view (players without events get zeroed rows)
- Cumulative "timeline" scoreboard up to a given round
- Scoreboard rows for overall, per-half and per-side views
- Team rosters and average round length
"""

import logging
from enum import StrEnum
from typing import Any

from logsight.core.constants import side_for_team
from logsight.core.schemas import MatchData, PlayerStats, RoundData, RoundPlayerStats
from logsight.core.utils import format_clock, percentage, round_half_up, safe_divide

logger = logging.getLogger(__name__)


class ScoreboardView(StrEnum):
    """Which slice of the player stats a scoreboard shows."""

    OVERALL = "overall"
    FIRST_HALF = "first-half"
    SECOND_HALF = "second-half"
    CT = "ct"
    T = "t"


# View -> PlayerStats key holding the split
_SPLIT_KEYS = {
    ScoreboardView.FIRST_HALF: "firstHalf",
    ScoreboardView.SECOND_HALF: "secondHalf",
    ScoreboardView.CT: "ctSide",
    ScoreboardView.T: "tSide",
}


def starting_ct_team(match: MatchData) -> str:
    """Name of the team that started on CT (listed first)."""
    return match["teams"][0]["name"] if match["teams"] else ""


def find_round(match: MatchData, number: int) -> RoundData | None:
    """Look up a round by its number."""
    for round_ in match["rounds"]:
        if round_["number"] == number:
            return round_
    return None


def find_player(match: MatchData, name: str) -> PlayerStats | None:
    """Look up a player by name."""
    for player in match["players"]:
        if player["name"] == name:
            return player
    return None


def round_roster(match: MatchData, number: int) -> list[RoundPlayerStats] | None:
    """
    Every player's row for one round.

    Players who did nothing that round get a zeroed row on the side their
    team played; with no death recorded they count as survivors.

    Args:
        match: The match document
        number: Round number

    Returns:
        Rows in scoreboard order, or None if the round does not exist
    """
    round_ = find_round(match, number)
    if round_ is None:
        return None

    starting_ct = starting_ct_team(match)
    recorded = {row["name"]: row for row in round_["playerStats"]}
    roster: list[RoundPlayerStats] = []
    for player in match["players"]:
        row = recorded.get(player["name"])
        if row is None:
            row = {
                "name": player["name"],
                "team": player["team"],
                "side": str(side_for_team(player["team"], number, starting_ct)),
                "kills": 0,
                "deaths": 0,
                "assists": 0,
                "damage": 0,
                "survived": True,
            }
        roster.append(row)
    return roster


def cumulative_stats(match: MatchData, through_round: int) -> list[dict[str, Any]]:
    """
    Scoreboard as it stood after ``through_round`` rounds.

    Sums the per-round rows of the first ``through_round`` rounds; headshots
    come from the kill feeds.

    Args:
        match: The match document
        through_round: Number of rounds to include (clamped to the match)

    Returns:
        One row per player, most kills first
    """
    rounds = match["rounds"][: max(0, through_round)]
    totals: dict[str, dict[str, Any]] = {}

    for round_ in rounds:
        headshots: dict[str, int] = {}
        for kill in round_["kills"]:
            if kill["headshot"]:
                headshots[kill["killer"]] = headshots.get(kill["killer"], 0) + 1

        for row in round_["playerStats"]:
            entry = totals.setdefault(
                row["name"],
                {"name": row["name"], "team": row["team"], "kills": 0, "deaths": 0,
                 "assists": 0, "damage": 0, "headshots": 0},
            )
            entry["kills"] += row["kills"]
            entry["deaths"] += row["deaths"]
            entry["assists"] += row["assists"]
            entry["damage"] += row["damage"]
            entry["headshots"] += headshots.get(row["name"], 0)

    round_count = len(rounds)
    rows = []
    for entry in totals.values():
        entry["adr"] = round_half_up(safe_divide(entry["damage"], round_count), 1)
        entry["hsPercent"] = percentage(entry["headshots"], entry["kills"])
        rows.append(entry)
    rows.sort(key=lambda row: row["kills"], reverse=True)
    return rows


def scoreboard_rows(
    match: MatchData, view: ScoreboardView = ScoreboardView.OVERALL
) -> list[dict[str, Any]]:
    """
    Kills, deaths, ADR and HS% per player for the chosen view.

    Rows keep the document's player order (most kills overall first).
    """
    rows = []
    for player in match["players"]:
        if view is ScoreboardView.OVERALL:
            source: Any = player
        else:
            source = player[_SPLIT_KEYS[view]]
        rows.append(
            {
                "name": player["name"],
                "team": player["team"],
                "kills": source["kills"],
                "deaths": source["deaths"],
                "adr": source["adr"],
                "hsPercent": source["hsPercent"],
            }
        )
    return rows


def players_by_team(match: MatchData) -> dict[str, list[PlayerStats]]:
    """Players grouped by team, in team order."""
    grouped: dict[str, list[PlayerStats]] = {team["name"]: [] for team in match["teams"]}
    for player in match["players"]:
        grouped.setdefault(player["team"], []).append(player)
    return grouped


def average_round_length(match: MatchData) -> str:
    """Mean round duration as ``M:SS``; "0:00" with no rounds."""
    rounds = match["rounds"]
    if not rounds:
        return "0:00"
    average = sum(round_["duration"] for round_ in rounds) / len(rounds)
    return format_clock(round_half_up(average))
