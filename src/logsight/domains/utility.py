"""
Utility Analysis Module for CS:GO Match Logs

Implements flashbang effectiveness tracking:
- Linking blinds to the flashbang that caused them
- Classifying each blind relative to the thrower (self, teammate, enemy, spectator)
- Accumulating blind counts and durations per thrower
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from logsight.core.constants import FlashSide
from logsight.core.schemas import BlindEffect, FlashReport, FlashStats
from logsight.core.utils import round_half_up
from logsight.parser import BlindEvent, FlashThrowEvent, Round

logger = logging.getLogger(__name__)


class BlindKind(StrEnum):
    """Who a flashbang caught, relative to its thrower."""

    SELF = "self"
    TEAMMATE = "teammate"
    ENEMY = "enemy"
    SPECTATOR = "spectator"


def classify_blind(
    thrower: str, thrower_side: FlashSide, victim: str, victim_side: FlashSide
) -> BlindKind:
    """
    Classify a blind relative to the thrower.

    Checked in order: the thrower themselves, a spectator, a player on the
    thrower's side, anyone else.
    """
    if victim == thrower:
        return BlindKind.SELF
    if victim_side is FlashSide.SPECTATOR:
        return BlindKind.SPECTATOR
    if victim_side == thrower_side:
        return BlindKind.TEAMMATE
    return BlindKind.ENEMY


@dataclass
class AttributedBlind:
    """A blind and how it relates to the flash's thrower."""

    event: BlindEvent
    kind: BlindKind

    def to_dict(self) -> BlindEffect:
        return {
            "victim": self.event.victim,
            "victimSide": str(self.event.victim_side),
            "duration": self.event.duration,
            "isSelf": self.kind is BlindKind.SELF,
            "isTeammate": self.kind is BlindKind.TEAMMATE,
            "isEnemy": self.kind is BlindKind.ENEMY,
            "isSpectator": self.kind is BlindKind.SPECTATOR,
        }


@dataclass
class AttributedFlash:
    """A thrown flashbang with every blind it caused."""

    throw: FlashThrowEvent
    thrower_team: str
    blinds: list[AttributedBlind] = field(default_factory=list)

    def to_dict(self) -> FlashReport:
        return {
            "timestamp": self.throw.timestamp.isoformat(),
            "thrower": self.throw.thrower,
            "throwerTeam": self.thrower_team,
            "throwerSide": str(self.throw.thrower_side),
            "entindex": self.throw.entindex,
            "blinds": [blind.to_dict() for blind in self.blinds],
        }


def thrower_team_name(round_: Round, side: FlashSide) -> str:
    """Team name for a flash side in this round; spectators keep their tag."""
    if side is FlashSide.CT:
        return round_.ct_team
    if side is FlashSide.T:
        return round_.t_team
    return str(FlashSide.SPECTATOR)


def attribute_flashes(round_: Round) -> list[AttributedFlash]:
    """
    Join a round's blinds to its flash throws by entity index.

    Args:
        round_: A closed round

    Returns:
        One AttributedFlash per throw, in throw order
    """
    blinds_by_entindex: dict[int, list[BlindEvent]] = {}
    for blind in round_.blinds:
        blinds_by_entindex.setdefault(blind.entindex, []).append(blind)

    flashes = []
    for throw in round_.flashes:
        flash = AttributedFlash(
            throw=throw,
            thrower_team=thrower_team_name(round_, throw.thrower_side),
        )
        for blind in blinds_by_entindex.get(throw.entindex, []):
            kind = classify_blind(throw.thrower, throw.thrower_side, blind.victim, blind.victim_side)
            flash.blinds.append(AttributedBlind(event=blind, kind=kind))
        flashes.append(flash)
    return flashes


@dataclass
class FlashAccumulator:
    """Running flashbang totals for one thrower across the match."""

    thrown: int = 0
    enemies_blinded: int = 0
    enemy_blind_time: float = 0.0
    teammates_blinded: int = 0
    teammate_blind_time: float = 0.0
    self_flashes: int = 0
    self_blind_time: float = 0.0
    spectators_flashed: int = 0
    # spectator name -> total seconds, merged across rounds
    spectator_blinds: dict[str, float] = field(default_factory=dict)

    def add(self, flash: AttributedFlash) -> None:
        """Count a throw and every blind it caused."""
        self.thrown += 1
        for blind in flash.blinds:
            duration = blind.event.duration
            if blind.kind is BlindKind.ENEMY:
                self.enemies_blinded += 1
                self.enemy_blind_time += duration
            elif blind.kind is BlindKind.TEAMMATE:
                self.teammates_blinded += 1
                self.teammate_blind_time += duration
            elif blind.kind is BlindKind.SELF:
                self.self_flashes += 1
                self.self_blind_time += duration
            else:
                self.spectators_flashed += 1
                name = blind.event.victim
                self.spectator_blinds[name] = self.spectator_blinds.get(name, 0.0) + duration

    def to_dict(self) -> FlashStats:
        return {
            "thrown": self.thrown,
            "enemiesBlinded": self.enemies_blinded,
            "enemyBlindTime": round_half_up(self.enemy_blind_time, 2),
            "teammatesBlinded": self.teammates_blinded,
            "teammateBlindTime": round_half_up(self.teammate_blind_time, 2),
            "selfFlashes": self.self_flashes,
            "selfBlindTime": round_half_up(self.self_blind_time, 2),
            "spectatorsFlashed": self.spectators_flashed,
            "spectatorBlinds": [
                {"name": name, "totalTime": round_half_up(total, 2)}
                for name, total in self.spectator_blinds.items()
            ],
        }
