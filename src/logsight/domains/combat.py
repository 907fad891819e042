"""
Combat Analysis Module for CS:GO Match Logs

Implements the situational combat metrics:
- Opening duel (first blood) detection
- Clutch detection and outcome
- Multi-kill round classification (2k, 3k, 4k, ace)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from logsight.core.constants import ACE_KILLS, Side
from logsight.core.schemas import MultiKillRounds
from logsight.parser import Round

logger = logging.getLogger(__name__)


@dataclass
class OpeningDuel:
    """First cross-side kill of a round."""

    round_num: int
    winner: str
    winner_side: Side
    loser: str
    loser_side: Side
    weapon: str
    headshot: bool


@dataclass
class ClutchSituation:
    """A player left alone against at least one opponent."""

    round_num: int
    clutcher: str
    side: Side
    enemies_alive: int
    won: bool

    @property
    def scenario(self) -> str:
        return f"1v{self.enemies_alive}"


@dataclass
class MultiKillCounts:
    """Rounds in which a player got 2, 3, 4 or 5+ kills."""

    two_k: int = 0
    three_k: int = 0
    four_k: int = 0
    ace: int = 0

    def add_round(self, kills: int) -> None:
        if kills == 2:
            self.two_k += 1
        elif kills == 3:
            self.three_k += 1
        elif kills == 4:
            self.four_k += 1
        elif kills >= ACE_KILLS:
            self.ace += 1

    def to_dict(self) -> MultiKillRounds:
        return {
            "twoK": self.two_k,
            "threeK": self.three_k,
            "fourK": self.four_k,
            "ace": self.ace,
        }


def find_opening_duel(round_: Round) -> OpeningDuel | None:
    """
    Find the opening duel of a round.

    Same-side kills never open a round.

    Args:
        round_: A closed round

    Returns:
        The first cross-side kill as an OpeningDuel, or None if there was none
    """
    for kill in round_.kills:
        if kill.is_cross_side:
            return OpeningDuel(
                round_num=round_.number,
                winner=kill.killer,
                winner_side=kill.killer_side,
                loser=kill.victim,
                loser_side=kill.victim_side,
                weapon=kill.weapon,
                headshot=kill.headshot,
            )
    return None


def detect_clutch(round_: Round) -> ClutchSituation | None:
    """
    Detect the clutch situation of a round, if any.

    Everyone who took part in a kill that round (killer or victim) starts out
    alive on the side they were logged with. Cross-side kills are replayed in
    order; the first time a victim's side is down to a single player while the
    other side still has someone standing, that player is the clutcher. Only
    the first such situation per round is reported.

    Args:
        round_: A closed round

    Returns:
        ClutchSituation for the lone player, or None
    """
    # dicts rather than sets so the survivor picked is stable between runs
    alive: dict[Side, dict[str, None]] = {Side.CT: {}, Side.T: {}}
    for kill in round_.kills:
        alive[kill.killer_side].setdefault(kill.killer)
        alive[kill.victim_side].setdefault(kill.victim)

    for kill in round_.kills:
        if not kill.is_cross_side:
            continue
        side = kill.victim_side
        alive[side].pop(kill.victim, None)

        enemies = len(alive[side.opponent])
        if len(alive[side]) == 1 and enemies > 0:
            clutcher = next(iter(alive[side]))
            won = round_.winner_side == side
            logger.debug(
                f"Clutch detected: {clutcher} 1v{enemies} in round {round_.number} "
                f"- {'won' if won else 'lost'}"
            )
            return ClutchSituation(
                round_num=round_.number,
                clutcher=clutcher,
                side=side,
                enemies_alive=enemies,
                won=won,
            )
    return None


def classify_multi_kills(kills_per_round: Iterable[int]) -> MultiKillCounts:
    """
    Count multi-kill rounds from a player's per-round kill counts.

    Each round counts once: a five-kill round is one ace.
    """
    counts = MultiKillCounts()
    for kills in kills_per_round:
        counts.add_round(kills)
    return counts
