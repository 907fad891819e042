"""
LogSight CS:GO Match Log Analyzer - Constants

Defines side tags, round end reasons and the fixed halftime rule used to
attribute rounds to teams.
"""

from enum import StrEnum


class Side(StrEnum):
    """
    Combatant side.

    Kills, damage, chat and round outcomes always involve one of these two.
    """

    CT = "CT"
    T = "T"

    @property
    def opponent(self) -> "Side":
        return Side.T if self is Side.CT else Side.CT


class FlashSide(StrEnum):
    """
    Side of a flashbang thrower or blind victim.

    Spectators can be caught by a flash (or be logged as throwing one while
    swapping teams), so this tag has a third, non-combatant value.
    """

    CT = "CT"
    T = "T"
    SPECTATOR = "Spectator"


class WinReason(StrEnum):
    """How a round was decided."""

    ELIMINATION = "elimination"
    BOMB_DEFUSED = "bomb_defused"
    BOMB_EXPLODED = "bomb_exploded"
    TIMEOUT = "timeout"


# Log side labels -> side tags
LOG_SIDE_LABELS = {
    "CT": Side.CT,
    "TERRORIST": Side.T,
}

LOG_FLASH_SIDE_LABELS = {
    "CT": FlashSide.CT,
    "TERRORIST": FlashSide.T,
    "Spectator": FlashSide.SPECTATOR,
}

# Rounds per half. Sides swap after this many rounds, regardless of any
# halftime markers in the log.
HALF_LENGTH = 15

# Multi-kill thresholds (kills in one round)
ACE_KILLS = 5

# Hit groups tracked separately for leg-shot percentage
LEFT_LEG_HITGROUP = "left leg"
RIGHT_LEG_HITGROUP = "right leg"

# Victim name fragments that denote world entities rather than players
NON_PLAYER_VICTIM_MARKERS = ("func_", "prop_")


def parse_side(label: str) -> Side:
    """Convert a log side label (``CT``/``TERRORIST``) to a :class:`Side`."""
    return LOG_SIDE_LABELS.get(label, Side.T)


def parse_flash_side(label: str) -> FlashSide:
    """Convert a log side label to a :class:`FlashSide`."""
    return LOG_FLASH_SIDE_LABELS.get(label, FlashSide.SPECTATOR)


def parse_win_reason(notice: str) -> WinReason:
    """
    Map an SFUI round-end notice to a win reason.

    Args:
        notice: e.g. ``SFUI_Notice_Bomb_Defused``

    Returns:
        The matching WinReason; unknown notices count as timeouts.
    """
    if "Bomb_Defused" in notice:
        return WinReason.BOMB_DEFUSED
    if "Target_Bombed" in notice:
        return WinReason.BOMB_EXPLODED
    if "CTs_Win" in notice or "Terrorists_Win" in notice:
        return WinReason.ELIMINATION
    return WinReason.TIMEOUT


def is_first_half(round_number: int) -> bool:
    """Rounds 1-15 are the first half."""
    return round_number <= HALF_LENGTH


def resolve_sides(round_number: int, starting_ct: str, starting_t: str) -> tuple[str, str]:
    """
    Resolve which team plays which side in a given round.

    Args:
        round_number: 1-based round number
        starting_ct: Team that started on CT
        starting_t: Team that started on T

    Returns:
        (ct_team, t_team) for that round
    """
    if is_first_half(round_number):
        return starting_ct, starting_t
    return starting_t, starting_ct


def side_for_team(team: str, round_number: int, starting_ct: str) -> Side:
    """Side a team plays in the given round."""
    started_ct = team == starting_ct
    if is_first_half(round_number):
        return Side.CT if started_ct else Side.T
    return Side.T if started_ct else Side.CT


def rounds_in_half(total_rounds: int) -> tuple[int, int]:
    """
    Split a round count into (first half, second half) round counts.

    The second half absorbs everything past round 15, overtime included.
    """
    first = min(HALF_LENGTH, total_rounds)
    return first, max(0, total_rounds - HALF_LENGTH)
