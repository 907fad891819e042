"""
Console Log Parser for CS:GO Match Logs

Reads a game-server console log in a single pass and turns the lines that
matter into typed event records grouped by round. Lines that do not match a
known pattern, or arrive while the context they need is missing, are dropped
and the scan continues.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from logsight.core.constants import (
    NON_PLAYER_VICTIM_MARKERS,
    FlashSide,
    Side,
    WinReason,
    parse_flash_side,
    parse_side,
    parse_win_reason,
    resolve_sides,
)
from logsight.core.utils import parse_log_timestamp

logger = logging.getLogger(__name__)


class LogSightError(Exception):
    """Base class for LogSight errors."""


class LogReadError(LogSightError):
    """The log file could not be read or decoded."""


# ============================================================================
# Line Patterns
# ============================================================================

# srcds prefixes file logs with "L "; console captures do not
TIMESTAMP_RE = re.compile(r"^(?:L )?(\d{2}/\d{2}/\d{4}) - (\d{2}:\d{2}:\d{2}):")

MATCH_START_RE = re.compile(r'World triggered "Match_Start" on "(.+?)"')
ROUND_START_RE = re.compile(r'World triggered "Round_Start"')
ROUND_END_RE = re.compile(r'World triggered "Round_End"')
GAME_OVER_RE = re.compile(
    r"\s*Game Over: (\w+) (?:\d+ )?(\S+) score (\d+):(\d+)(?: after (\d+) min)?"
)
TEAM_PLAYING_RE = re.compile(r'Team playing "(CT|TERRORIST)": (.+)')
ROUND_WIN_RE = re.compile(r'Team "(CT|TERRORIST)" triggered "(SFUI_Notice_\w+)"')

# "name<userid><steamid><side>"
_PLAYER = r'"(.+?)<\d+><[^>]+><(CT|TERRORIST)>"'
_FLASH_PLAYER = r'"(.+?)<\d+><[^>]+><(CT|TERRORIST|Spectator)>"'

KILL_RE = re.compile(
    _PLAYER
    + r".*\[-?\d+ -?\d+ -?\d+\] killed "
    + _PLAYER
    + r'.*with "(\w+)"(?: \(([^)]*)\))?'
)
DAMAGE_HITGROUP_RE = re.compile(
    _PLAYER + r".*attacked " + _PLAYER + r'.*\(damage "(\d+)"\).*\(hitgroup "([^"]+)"\)'
)
DAMAGE_RE = re.compile(_PLAYER + r".*attacked " + _PLAYER + r'.*\(damage "(\d+)"\)')
ASSIST_RE = re.compile(_PLAYER + r' assisted killing "(.+?)<\d+>')
FLASH_THROW_RE = re.compile(
    _FLASH_PLAYER + r" threw flashbang \[.*\] flashbang entindex (\d+)\)"
)
BLIND_RE = re.compile(
    _FLASH_PLAYER
    + r" blinded for ([\d.]+) by "
    + _FLASH_PLAYER
    + r" from flashbang entindex (\d+)"
)
CHAT_RE = re.compile(_PLAYER + r' (say|say_team) "(.*)"')

# Status lines repeat the team names with the current sides after halftime
MATCH_STATUS_MARKER = "MatchStatus"


# ============================================================================
# Event Records
# ============================================================================


@dataclass(frozen=True)
class KillEvent:
    """A player killed another player."""

    timestamp: datetime
    killer: str
    killer_side: Side
    victim: str
    victim_side: Side
    weapon: str
    headshot: bool = False

    @property
    def is_cross_side(self) -> bool:
        return self.killer_side != self.victim_side


@dataclass(frozen=True)
class DamageEvent:
    """A player damaged another player."""

    timestamp: datetime
    attacker: str
    attacker_side: Side
    victim: str
    victim_side: Side
    damage: int
    hitgroup: str = ""

    @property
    def is_cross_side(self) -> bool:
        return self.attacker_side != self.victim_side


@dataclass(frozen=True)
class AssistEvent:
    """A player assisted in a kill."""

    timestamp: datetime
    assister: str
    assister_side: Side
    victim: str


@dataclass(frozen=True)
class FlashThrowEvent:
    """A flashbang was thrown. ``entindex`` ties it to the blinds it causes."""

    timestamp: datetime
    thrower: str
    thrower_side: FlashSide
    entindex: int


@dataclass(frozen=True)
class BlindEvent:
    """Someone was blinded by a flashbang."""

    timestamp: datetime
    victim: str
    victim_side: FlashSide
    thrower: str
    thrower_side: FlashSide
    duration: float
    entindex: int


@dataclass(frozen=True)
class ChatEvent:
    """A chat line. Freeze-time chat was said before the round started."""

    timestamp: datetime
    player: str
    side: Side
    message: str
    is_team_chat: bool = False
    is_freeze_time: bool = False


@dataclass(frozen=True)
class GameOverInfo:
    """Final result as reported by the server's game-over line."""

    mode: str
    map_name: str
    ct_score: int
    t_score: int
    minutes: int | None = None


# ============================================================================
# Rounds
# ============================================================================


@dataclass(frozen=True)
class Round:
    """
    A closed round and everything that happened in it.

    ct_team and t_team name the teams on each side in this round, after the
    halftime swap.
    """

    number: int
    start_time: datetime
    end_time: datetime
    ct_team: str
    t_team: str
    winner_side: Side = Side.CT
    win_reason: WinReason = WinReason.ELIMINATION
    kills: tuple[KillEvent, ...] = ()
    damage: tuple[DamageEvent, ...] = ()
    assists: tuple[AssistEvent, ...] = ()
    flashes: tuple[FlashThrowEvent, ...] = ()
    blinds: tuple[BlindEvent, ...] = ()
    chat: tuple[ChatEvent, ...] = ()

    @property
    def duration_seconds(self) -> int:
        """Whole seconds between round start and round end."""
        return math.floor((self.end_time - self.start_time).total_seconds())

    @property
    def winner_team(self) -> str:
        return self.ct_team if self.winner_side is Side.CT else self.t_team


@dataclass
class RoundBuilder:
    """Mutable round under construction while the round is active."""

    number: int
    start_time: datetime
    ct_team: str
    t_team: str
    winner_side: Side = Side.CT
    win_reason: WinReason = WinReason.ELIMINATION
    kills: list[KillEvent] = field(default_factory=list)
    damage: list[DamageEvent] = field(default_factory=list)
    assists: list[AssistEvent] = field(default_factory=list)
    flashes: list[FlashThrowEvent] = field(default_factory=list)
    blinds: list[BlindEvent] = field(default_factory=list)
    chat: list[ChatEvent] = field(default_factory=list)

    def close(self, end_time: datetime) -> Round:
        """Freeze the round with its end timestamp."""
        return Round(
            number=self.number,
            start_time=self.start_time,
            end_time=end_time,
            ct_team=self.ct_team,
            t_team=self.t_team,
            winner_side=self.winner_side,
            win_reason=self.win_reason,
            kills=tuple(self.kills),
            damage=tuple(self.damage),
            assists=tuple(self.assists),
            flashes=tuple(self.flashes),
            blinds=tuple(self.blinds),
            chat=tuple(self.chat),
        )


@dataclass(frozen=True)
class NoActiveRound:
    """Between rounds. Chat said now is held for the next round."""

    pending_chat: tuple[ChatEvent, ...] = ()


@dataclass(frozen=True)
class RoundActive:
    """A round is in progress."""

    builder: RoundBuilder


ScanState = NoActiveRound | RoundActive


@dataclass
class ParsedLog:
    """Everything extracted from one match log."""

    rounds: list[Round]
    map_name: str = ""
    date: str = ""  # MM/DD/YYYY as written in the log
    starting_ct: str = ""
    starting_t: str = ""
    game_over: GameOverInfo | None = None
    skipped_lines: int = 0

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)


# ============================================================================
# Parser
# ============================================================================


def find_last_match_start(lines: list[str]) -> int | None:
    """
    Index of the last match-start line.

    Warmup and server restarts each log their own match start; only the last
    one begins the real match.
    """
    last = None
    for index, line in enumerate(lines):
        if MATCH_START_RE.search(line) and not CHAT_RE.search(line):
            last = index
    return last


class _Scan:
    """Scan context shared by the line handlers of one parse."""

    def __init__(self) -> None:
        self.map_name = ""
        self.date = ""
        self.ct_team = ""
        self.t_team = ""
        self.rounds: list[Round] = []
        self.game_over: GameOverInfo | None = None
        self.finished = False
        self.skipped = 0

    @property
    def teams_known(self) -> bool:
        return bool(self.ct_team and self.t_team)

    def step(self, state: ScanState, line: str) -> ScanState:
        """Apply one log line and return the next state."""
        ts_match = TIMESTAMP_RE.match(line)
        if not ts_match:
            return state
        try:
            timestamp = parse_log_timestamp(ts_match.group(1), ts_match.group(2))
        except ValueError:
            self.skipped += 1
            return state
        if not self.date:
            self.date = ts_match.group(1)

        # player text can contain any of the server patterns below
        if match := CHAT_RE.search(line):
            return self._chat(state, match, timestamp)

        if match := MATCH_START_RE.search(line):
            self.map_name = match.group(1)
            return state

        if match := GAME_OVER_RE.match(line, ts_match.end()):
            self.game_over = GameOverInfo(
                mode=match.group(1),
                map_name=match.group(2),
                ct_score=int(match.group(3)),
                t_score=int(match.group(4)),
                minutes=int(match.group(5)) if match.group(5) else None,
            )
            if isinstance(state, RoundActive):
                logger.debug(f"Discarding unterminated round {state.builder.number}")
            self.finished = True
            return NoActiveRound()

        if (match := TEAM_PLAYING_RE.search(line)) and MATCH_STATUS_MARKER not in line:
            name = match.group(2).strip()
            if match.group(1) == "CT":
                self.ct_team = self.ct_team or name
            else:
                self.t_team = self.t_team or name
            return state

        if ROUND_START_RE.search(line):
            return self._open_round(state, timestamp)

        if ROUND_END_RE.search(line):
            if isinstance(state, RoundActive):
                self.rounds.append(state.builder.close(timestamp))
                return NoActiveRound()
            self.skipped += 1
            return state

        if not isinstance(state, RoundActive):
            self.skipped += 1
            return state

        if not self._round_event(state.builder, line, timestamp):
            self.skipped += 1
        return state

    def _open_round(self, state: ScanState, timestamp: datetime) -> ScanState:
        if not self.teams_known:
            self.skipped += 1
            return state

        pending: tuple[ChatEvent, ...] = ()
        if isinstance(state, RoundActive):
            logger.debug(f"Round {state.builder.number} restarted before it ended")
        else:
            pending = state.pending_chat

        number = len(self.rounds) + 1
        ct_team, t_team = resolve_sides(number, self.ct_team, self.t_team)
        builder = RoundBuilder(
            number=number,
            start_time=timestamp,
            ct_team=ct_team,
            t_team=t_team,
        )
        builder.chat.extend(pending)
        return RoundActive(builder)

    def _chat(self, state: ScanState, match: re.Match, timestamp: datetime) -> ScanState:
        if not self.teams_known:
            self.skipped += 1
            return state

        in_round = isinstance(state, RoundActive)
        message = ChatEvent(
            timestamp=timestamp,
            player=match.group(1),
            side=parse_side(match.group(2)),
            message=match.group(4),
            is_team_chat=match.group(3) == "say_team",
            is_freeze_time=not in_round,
        )
        if isinstance(state, RoundActive):
            state.builder.chat.append(message)
            return state
        return NoActiveRound(state.pending_chat + (message,))

    def _round_event(self, builder: RoundBuilder, line: str, timestamp: datetime) -> bool:
        """Record an in-round event. Returns False when nothing matched."""
        if match := KILL_RE.search(line):
            victim = match.group(3)
            if any(marker in victim for marker in NON_PLAYER_VICTIM_MARKERS):
                return False
            modifiers = match.group(6) or ""
            builder.kills.append(
                KillEvent(
                    timestamp=timestamp,
                    killer=match.group(1),
                    killer_side=parse_side(match.group(2)),
                    victim=victim,
                    victim_side=parse_side(match.group(4)),
                    weapon=match.group(5),
                    headshot="headshot" in modifiers,
                )
            )
            return True

        match = DAMAGE_HITGROUP_RE.search(line) or DAMAGE_RE.search(line)
        if match:
            builder.damage.append(
                DamageEvent(
                    timestamp=timestamp,
                    attacker=match.group(1),
                    attacker_side=parse_side(match.group(2)),
                    victim=match.group(3),
                    victim_side=parse_side(match.group(4)),
                    damage=int(match.group(5)),
                    hitgroup=match.group(6) if match.re is DAMAGE_HITGROUP_RE else "",
                )
            )
            return True

        if match := ASSIST_RE.search(line):
            builder.assists.append(
                AssistEvent(
                    timestamp=timestamp,
                    assister=match.group(1),
                    assister_side=parse_side(match.group(2)),
                    victim=match.group(3),
                )
            )
            return True

        if match := FLASH_THROW_RE.search(line):
            builder.flashes.append(
                FlashThrowEvent(
                    timestamp=timestamp,
                    thrower=match.group(1),
                    thrower_side=parse_flash_side(match.group(2)),
                    entindex=int(match.group(3)),
                )
            )
            return True

        if match := BLIND_RE.search(line):
            try:
                duration = float(match.group(3))
            except ValueError:
                return False
            builder.blinds.append(
                BlindEvent(
                    timestamp=timestamp,
                    victim=match.group(1),
                    victim_side=parse_flash_side(match.group(2)),
                    thrower=match.group(4),
                    thrower_side=parse_flash_side(match.group(5)),
                    duration=duration,
                    entindex=int(match.group(6)),
                )
            )
            return True

        if match := ROUND_WIN_RE.search(line):
            builder.winner_side = parse_side(match.group(1))
            builder.win_reason = parse_win_reason(match.group(2))
            return True

        return False


def parse_lines(lines: Iterable[str]) -> ParsedLog:
    """
    Parse already-read log lines.

    Args:
        lines: Log lines, with or without trailing newlines

    Returns:
        ParsedLog with the closed rounds and match metadata
    """
    lines = [line.rstrip("\r\n") for line in lines]
    start = find_last_match_start(lines)
    if start is None:
        logger.warning("No Match_Start found in log; no rounds parsed")
        return ParsedLog(rounds=[])

    scan = _Scan()
    state: ScanState = NoActiveRound()
    for line in lines[start:]:
        state = scan.step(state, line)
        if scan.finished:
            break

    if isinstance(state, RoundActive):
        logger.debug(f"Log ended inside round {state.builder.number}; round discarded")

    logger.debug(
        f"Parsed {len(scan.rounds)} rounds from {len(lines) - start} lines "
        f"({scan.skipped} timestamped lines skipped)"
    )
    return ParsedLog(
        rounds=scan.rounds,
        map_name=scan.map_name,
        date=scan.date,
        starting_ct=scan.ct_team,
        starting_t=scan.t_team,
        game_over=scan.game_over,
        skipped_lines=scan.skipped,
    )


class LogParser:
    """
    Parser for CS:GO console match logs.

    Reads the whole file once and hands the lines to :func:`parse_lines`.
    """

    def __init__(self, log_path: str | Path, encoding: str = "utf-8"):
        """
        Initialize the parser with a log file path.

        Args:
            log_path: Path to the console log
            encoding: Text encoding of the log
        """
        self.log_path = Path(log_path)
        self.encoding = encoding
        self._data: ParsedLog | None = None

    def parse(self) -> ParsedLog:
        """
        Parse the log file.

        Returns:
            ParsedLog containing all extracted rounds

        Raises:
            LogReadError: If the file cannot be read or decoded
        """
        if self._data is not None:
            return self._data

        logger.info(f"Parsing log: {self.log_path}")
        try:
            text = self.log_path.read_bytes().decode(self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise LogReadError(f"Cannot read log file {self.log_path}: {e}") from e

        self._data = parse_lines(text.split("\n"))
        logger.info(
            f"Parsed {self._data.total_rounds} rounds on "
            f"{self._data.map_name or 'unknown map'}"
        )
        return self._data


def parse_log(log_path: str | Path, encoding: str = "utf-8") -> ParsedLog:
    """Convenience function to parse a log file."""
    return LogParser(log_path, encoding=encoding).parse()
