"""
Match Statistics Engine for CS:GO Match Logs

Turns the rounds extracted by the parser into the match document:
- Team scores by half, side and win reason
- Per-player kills, deaths, assists and ADR (overall, per half, per side)
- Opening duels and clutches
- Flashbang effectiveness
- Multi-kill rounds
- Per-round kill feed, chat transcript and running score
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from logsight.core.constants import (
    LEFT_LEG_HITGROUP,
    RIGHT_LEG_HITGROUP,
    FlashSide,
    Side,
    WinReason,
    is_first_half,
    resolve_sides,
    rounds_in_half,
    side_for_team,
)
from logsight.core.schemas import (
    ChatMessage,
    KillFeedEntry,
    MatchData,
    PlayerStats,
    RoundData,
    RoundPlayerStats,
    SplitStats,
    TeamStats,
)
from logsight.core.utils import (
    PerformanceMonitor,
    format_clock,
    format_relative_time,
    percentage,
    round_half_up,
    safe_divide,
    to_day_first_date,
)
from logsight.domains.combat import (
    ClutchSituation,
    MultiKillCounts,
    OpeningDuel,
    classify_multi_kills,
    detect_clutch,
    find_opening_duel,
)
from logsight.domains.utility import FlashAccumulator, attribute_flashes
from logsight.parser import ParsedLog, Round, parse_log

logger = logging.getLogger(__name__)


# ============================================================================
# Accumulators
# ============================================================================


@dataclass
class BucketStats:
    """Kills, deaths, headshots and damage for one slice of the match."""

    kills: int = 0
    deaths: int = 0
    headshots: int = 0
    damage: int = 0

    def to_dict(self, rounds_played: int) -> SplitStats:
        return {
            "kills": self.kills,
            "deaths": self.deaths,
            "adr": round_half_up(safe_divide(self.damage, rounds_played), 1),
            "hsPercent": percentage(self.headshots, self.kills),
        }


@dataclass
class PlayerAccumulator:
    """
    Running counters for one player.

    ``team`` is fixed at the player's first appearance.
    """

    name: str
    team: str
    overall: BucketStats = field(default_factory=BucketStats)
    first_half: BucketStats = field(default_factory=BucketStats)
    second_half: BucketStats = field(default_factory=BucketStats)
    ct_side: BucketStats = field(default_factory=BucketStats)
    t_side: BucketStats = field(default_factory=BucketStats)
    assists: int = 0
    opening_kills: int = 0
    opening_deaths: int = 0
    clutches_won: int = 0
    clutches_attempted: int = 0
    left_leg_damage: int = 0
    right_leg_damage: int = 0
    total_damage_dealt: int = 0
    flash: FlashAccumulator = field(default_factory=FlashAccumulator)
    kills_per_round: list[int] = field(default_factory=list)
    multi_kills: MultiKillCounts = field(default_factory=MultiKillCounts)

    def _buckets(self, round_number: int, side: Side) -> tuple[BucketStats, ...]:
        half = self.first_half if is_first_half(round_number) else self.second_half
        side_bucket = self.ct_side if side is Side.CT else self.t_side
        return self.overall, half, side_bucket

    def record_kill(self, round_number: int, side: Side, headshot: bool) -> None:
        for bucket in self._buckets(round_number, side):
            bucket.kills += 1
            if headshot:
                bucket.headshots += 1

    def record_death(self, round_number: int, side: Side) -> None:
        for bucket in self._buckets(round_number, side):
            bucket.deaths += 1

    def record_damage(self, round_number: int, side: Side, amount: int) -> None:
        for bucket in self._buckets(round_number, side):
            bucket.damage += amount

    def to_dict(self, total_rounds: int, starting_ct: str) -> PlayerStats:
        """
        Build the player's entry in the match document.

        Args:
            total_rounds: Number of rounds in the match
            starting_ct: Team that started on CT, used to count how many
                rounds this player's team spent on each side
        """
        first_rounds, second_rounds = rounds_in_half(total_rounds)
        if self.team == starting_ct:
            ct_rounds, t_rounds = first_rounds, second_rounds
        else:
            ct_rounds, t_rounds = second_rounds, first_rounds

        leg_damage = self.left_leg_damage + self.right_leg_damage
        overall = self.overall.to_dict(total_rounds)
        return {
            "name": self.name,
            "team": self.team,
            "kills": self.overall.kills,
            "deaths": self.overall.deaths,
            "assists": self.assists,
            "adr": overall["adr"],
            "hsPercent": overall["hsPercent"],
            "firstHalf": self.first_half.to_dict(first_rounds),
            "secondHalf": self.second_half.to_dict(second_rounds),
            "ctSide": self.ct_side.to_dict(ct_rounds),
            "tSide": self.t_side.to_dict(t_rounds),
            "openingKills": self.opening_kills,
            "openingDeaths": self.opening_deaths,
            "clutchesWon": self.clutches_won,
            "clutchesAttempted": self.clutches_attempted,
            "flashStats": self.flash.to_dict(),
            "legShotPercent": percentage(leg_damage, self.total_damage_dealt),
            "leftLegDamage": self.left_leg_damage,
            "rightLegDamage": self.right_leg_damage,
            "totalDamageDealt": self.total_damage_dealt,
            "multiKillRounds": self.multi_kills.to_dict(),
        }


@dataclass
class TeamAccumulator:
    """Running counters for one team."""

    name: str
    final_score: int = 0
    first_half_score: int = 0
    second_half_score: int = 0
    ct_rounds_won: int = 0
    t_rounds_won: int = 0
    win_types: dict[WinReason, int] = field(
        default_factory=lambda: {reason: 0 for reason in WinReason}
    )

    def record_win(self, round_number: int, side: Side, reason: WinReason) -> None:
        self.final_score += 1
        if is_first_half(round_number):
            self.first_half_score += 1
        else:
            self.second_half_score += 1
        if side is Side.CT:
            self.ct_rounds_won += 1
        else:
            self.t_rounds_won += 1
        self.win_types[reason] += 1

    def to_dict(self) -> TeamStats:
        return {
            "name": self.name,
            "finalScore": self.final_score,
            "firstHalfScore": self.first_half_score,
            "secondHalfScore": self.second_half_score,
            "roundWinTypes": {
                "elimination": self.win_types[WinReason.ELIMINATION],
                "bombDefused": self.win_types[WinReason.BOMB_DEFUSED],
                "bombExploded": self.win_types[WinReason.BOMB_EXPLODED],
                "timeout": self.win_types[WinReason.TIMEOUT],
            },
            "ctRoundsWon": self.ct_rounds_won,
            "tRoundsWon": self.t_rounds_won,
        }


# ============================================================================
# Analyzer
# ============================================================================


class MatchAnalyzer:
    """
    Builds the match document from a parsed log.

    Usage:
        analyzer = MatchAnalyzer(parse_log("match.log"))
        match = analyzer.analyze()
    """

    def __init__(self, parsed: ParsedLog):
        """
        Initialize analyzer.

        Args:
            parsed: Output of the log parser
        """
        self.parsed = parsed
        self.starting_ct = parsed.starting_ct
        self.starting_t = parsed.starting_t
        self._reset()

    def _reset(self) -> None:
        self._players: dict[str, PlayerAccumulator] = {}
        # [starting CT team, starting T team]
        self._teams = [TeamAccumulator(self.starting_ct), TeamAccumulator(self.starting_t)]
        self._score = {Side.CT: 0, Side.T: 0}
        self.opening_duels: list[OpeningDuel] = []
        self.clutches: list[ClutchSituation] = []

    def _player(self, name: str, team: str) -> PlayerAccumulator:
        """Get or create the accumulator for a player."""
        player = self._players.get(name)
        if player is None:
            player = PlayerAccumulator(name=name, team=team)
            self._players[name] = player
        return player

    @property
    def players(self) -> list[PlayerAccumulator]:
        """Accumulators from the last analyze() call, in first-appearance order."""
        return list(self._players.values())

    def analyze(self) -> MatchData:
        """
        Walk every round once and assemble the match document.

        Returns:
            MatchData ready to be served or exported
        """
        self._reset()

        rounds = self.parsed.rounds
        round_data = [self._analyze_round(round_) for round_ in rounds]

        for player in self._players.values():
            player.multi_kills = classify_multi_kills(player.kills_per_round)

        total_rounds = len(rounds)
        players = [p.to_dict(total_rounds, self.starting_ct) for p in self._players.values()]
        players.sort(key=lambda p: p["kills"], reverse=True)

        if rounds:
            elapsed = (rounds[-1].end_time - rounds[0].start_time).total_seconds()
            duration = format_clock(elapsed)
        else:
            duration = format_clock(0)

        logger.info(
            f"Analyzed {total_rounds} rounds, {len(players)} players, "
            f"{len(self.clutches)} clutch situations"
        )
        return {
            "map": self.parsed.map_name,
            "date": to_day_first_date(self.parsed.date),
            "duration": duration,
            "teams": [team.to_dict() for team in self._teams],
            "rounds": round_data,
            "players": players,
        }

    def _analyze_round(self, round_: Round) -> RoundData:
        number = round_.number
        ct_team, t_team = resolve_sides(number, self.starting_ct, self.starting_t)

        def team_for(side: Side) -> str:
            return ct_team if side is Side.CT else t_team

        # Win attribution
        winner_side = round_.winner_side
        winner_is_starting_ct = (winner_side is Side.CT) == is_first_half(number)
        winner = self._teams[0 if winner_is_starting_ct else 1]
        winner.record_win(number, winner_side, round_.win_reason)
        self._score[winner_side] += 1

        # Participants in first-appearance order: kills, then damage
        participants: dict[str, None] = {}
        for kill in round_.kills:
            self._player(kill.killer, team_for(kill.killer_side))
            self._player(kill.victim, team_for(kill.victim_side))
            participants.setdefault(kill.killer)
            participants.setdefault(kill.victim)
        for hit in round_.damage:
            self._player(hit.attacker, team_for(hit.attacker_side))
            self._player(hit.victim, team_for(hit.victim_side))
            participants.setdefault(hit.attacker)
            participants.setdefault(hit.victim)

        # Damage (cross-side only)
        round_damage: dict[str, int] = {}
        for hit in round_.damage:
            if not hit.is_cross_side:
                continue
            attacker = self._players[hit.attacker]
            round_damage[hit.attacker] = round_damage.get(hit.attacker, 0) + hit.damage
            attacker.total_damage_dealt += hit.damage
            if hit.hitgroup == LEFT_LEG_HITGROUP:
                attacker.left_leg_damage += hit.damage
            elif hit.hitgroup == RIGHT_LEG_HITGROUP:
                attacker.right_leg_damage += hit.damage
        for name, amount in round_damage.items():
            player = self._players[name]
            player.record_damage(number, side_for_team(player.team, number, self.starting_ct), amount)

        # Kills
        opening = find_opening_duel(round_)
        if opening is not None:
            self.opening_duels.append(opening)
            self._players[opening.winner].opening_kills += 1
            self._players[opening.loser].opening_deaths += 1

        round_kills: dict[str, int] = {}
        dead: set[str] = set()
        kill_feed: list[KillFeedEntry] = []
        for kill in round_.kills:
            if kill.is_cross_side:
                self._players[kill.killer].record_kill(number, kill.killer_side, kill.headshot)
                round_kills[kill.killer] = round_kills.get(kill.killer, 0) + 1
            self._players[kill.victim].record_death(number, kill.victim_side)
            dead.add(kill.victim)
            kill_feed.append(
                {
                    "timestamp": kill.timestamp.isoformat(),
                    "killer": kill.killer,
                    "killerTeam": team_for(kill.killer_side),
                    "victim": kill.victim,
                    "victimTeam": team_for(kill.victim_side),
                    "weapon": kill.weapon,
                    "headshot": kill.headshot,
                }
            )
        for name, kills in round_kills.items():
            self._players[name].kills_per_round.append(kills)

        # Assists
        round_assists: dict[str, int] = {}
        for assist in round_.assists:
            self._player(assist.assister, team_for(assist.assister_side)).assists += 1
            round_assists[assist.assister] = round_assists.get(assist.assister, 0) + 1

        # Clutch
        clutch = detect_clutch(round_)
        if clutch is not None:
            self.clutches.append(clutch)
            clutcher = self._player(clutch.clutcher, team_for(clutch.side))
            clutcher.clutches_attempted += 1
            if clutch.won:
                clutcher.clutches_won += 1

        # Flashes
        flashes = attribute_flashes(round_)
        for flash in flashes:
            if flash.throw.thrower_side is FlashSide.SPECTATOR:
                continue
            self._player(flash.throw.thrower, flash.thrower_team).flash.add(flash)

        # Round scoreboard
        player_stats: list[RoundPlayerStats] = []
        for name in participants:
            player = self._players[name]
            player_stats.append(
                {
                    "name": name,
                    "team": player.team,
                    "side": str(side_for_team(player.team, number, self.starting_ct)),
                    "kills": round_kills.get(name, 0),
                    "deaths": 1 if name in dead else 0,
                    "assists": round_assists.get(name, 0),
                    "damage": round_damage.get(name, 0),
                    "survived": name not in dead,
                }
            )
        player_stats.sort(key=lambda p: p["kills"], reverse=True)

        chat: list[ChatMessage] = [
            {
                "timestamp": message.timestamp.isoformat(),
                "relativeTime": format_relative_time(
                    (message.timestamp - round_.start_time).total_seconds()
                ),
                "player": message.player,
                "team": team_for(message.side),
                "side": str(message.side),
                "message": message.message,
                "isTeamChat": message.is_team_chat,
                "isFreezeTime": message.is_freeze_time,
            }
            for message in round_.chat
        ]

        return {
            "number": number,
            "winner": team_for(winner_side),
            "winnerSide": str(winner_side),
            "winReason": str(round_.win_reason),
            "duration": round_.duration_seconds,
            "score": {"ct": self._score[Side.CT], "t": self._score[Side.T]},
            "playerStats": player_stats,
            "kills": kill_feed,
            "chat": chat,
            "flashes": [flash.to_dict() for flash in flashes],
        }


def analyze_match(parsed: ParsedLog) -> MatchData:
    """Convenience function to analyze a parsed log."""
    return MatchAnalyzer(parsed).analyze()


def analyze_log(log_path: str | Path, encoding: str = "utf-8") -> MatchData:
    """
    Parse and analyze a log file in one step.

    Args:
        log_path: Path to the console log
        encoding: Text encoding of the log

    Returns:
        MatchData for the match in the log

    Raises:
        LogReadError: If the file cannot be read or decoded
    """
    with PerformanceMonitor(f"Parsing {Path(log_path).name}"):
        parsed = parse_log(log_path, encoding=encoding)
    with PerformanceMonitor("Analyzing match"):
        return analyze_match(parsed)
