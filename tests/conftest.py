"""Shared fixtures: a small builder for CS:GO console log text."""

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from logsight.analytics import analyze_match
from logsight.core.config import reset_config
from logsight.parser import parse_lines

BASE_TIME = datetime(2021, 11, 28, 20, 0, 0)

_LOG_SIDES = {"CT": "CT", "T": "TERRORIST", "TERRORIST": "TERRORIST", "Spectator": "Spectator"}


class LogBuilder:
    """Writes console log lines with a running clock."""

    def __init__(self, start: datetime = BASE_TIME):
        self.clock = start
        self.lines: list[str] = []
        self._user_ids: dict[str, int] = {}

    # -- plumbing ---------------------------------------------------------

    def wait(self, seconds: int) -> "LogBuilder":
        self.clock += timedelta(seconds=seconds)
        return self

    def line(self, text: str, advance: int = 1) -> "LogBuilder":
        stamp = self.clock.strftime("%m/%d/%Y - %H:%M:%S")
        self.lines.append(f"{stamp}: {text}")
        self.clock += timedelta(seconds=advance)
        return self

    def player(self, name: str, side: str) -> str:
        uid = self._user_ids.setdefault(name, len(self._user_ids) + 1)
        return f'"{name}<{uid}><STEAM_1:0:{uid}><{_LOG_SIDES[side]}>"'

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"

    def write(self, path: Path) -> Path:
        path.write_text(self.text(), encoding="utf-8")
        return path

    # -- match lifecycle --------------------------------------------------

    def match_start(self, map_name: str = "de_dust2") -> "LogBuilder":
        return self.line(f'World triggered "Match_Start" on "{map_name}"')

    def teams(self, ct: str = "Alpha", t: str = "Bravo") -> "LogBuilder":
        self.line(f'Team playing "CT": {ct}', advance=0)
        return self.line(f'Team playing "TERRORIST": {t}')

    def start(self, map_name: str = "de_dust2", ct: str = "Alpha", t: str = "Bravo") -> "LogBuilder":
        return self.match_start(map_name).teams(ct, t)

    def round_start(self) -> "LogBuilder":
        return self.line('World triggered "Round_Start"')

    def round_end(self) -> "LogBuilder":
        return self.line('World triggered "Round_End"')

    def round_win(self, side: str = "CT", notice: str | None = None) -> "LogBuilder":
        if notice is None:
            notice = "SFUI_Notice_CTs_Win" if side == "CT" else "SFUI_Notice_Terrorists_Win"
        return self.line(f'Team "{_LOG_SIDES[side]}" triggered "{notice}" (CT "0") (T "0")')

    def game_over(self, ct_score: int = 16, t_score: int = 14) -> "LogBuilder":
        return self.line(f"Game Over: competitive 1032 de_dust2 score {ct_score}:{t_score} after 45 min")

    def empty_round(self, winner: str = "CT", notice: str | None = None, length: int = 60) -> "LogBuilder":
        self.round_start()
        self.wait(length)
        self.round_win(winner, notice)
        return self.round_end()

    # -- events -----------------------------------------------------------

    def kill(self, killer: str, killer_side: str, victim: str, victim_side: str,
             weapon: str = "ak47", headshot: bool = False) -> "LogBuilder":
        suffix = " (headshot)" if headshot else ""
        return self.line(
            f"{self.player(killer, killer_side)} [100 -200 30] killed "
            f'{self.player(victim, victim_side)} [-50 60 30] with "{weapon}"{suffix}'
        )

    def damage(self, attacker: str, attacker_side: str, victim: str, victim_side: str,
               amount: int, hitgroup: str | None = "chest") -> "LogBuilder":
        text = (
            f"{self.player(attacker, attacker_side)} [0 0 0] attacked "
            f'{self.player(victim, victim_side)} [10 10 10] with "ak47" '
            f'(damage "{amount}") (damage_armor "5") (health "50") (armor "90")'
        )
        if hitgroup is not None:
            text += f' (hitgroup "{hitgroup}")'
        return self.line(text)

    def assist(self, assister: str, assister_side: str, victim: str, victim_side: str) -> "LogBuilder":
        return self.line(
            f"{self.player(assister, assister_side)} assisted killing {self.player(victim, victim_side)}"
        )

    def flash(self, thrower: str, side: str, entindex: int) -> "LogBuilder":
        return self.line(
            f"{self.player(thrower, side)} threw flashbang [120 -40 64] flashbang entindex {entindex})"
        )

    def blind(self, victim: str, victim_side: str, thrower: str, thrower_side: str,
              duration: float, entindex: int) -> "LogBuilder":
        return self.line(
            f"{self.player(victim, victim_side)} blinded for {duration:.2f} by "
            f"{self.player(thrower, thrower_side)} from flashbang entindex {entindex} "
        )

    def chat(self, name: str, side: str, message: str, team: bool = False) -> "LogBuilder":
        verb = "say_team" if team else "say"
        return self.line(f'{self.player(name, side)} {verb} "{message}"')


@pytest.fixture
def builder() -> LogBuilder:
    return LogBuilder()


@pytest.fixture
def alice_bob_log() -> LogBuilder:
    """One round: Alice (CT) headshots Bob (T) with an AK, CT win."""
    log = LogBuilder().start()
    log.round_start()
    log.kill("Alice", "CT", "Bob", "T", weapon="ak47", headshot=True)
    log.round_win("CT")
    log.round_end()
    return log


@pytest.fixture
def sample_log() -> LogBuilder:
    """
    Three rounds between Alpha (Alice, Carol on CT) and Bravo (Bob, Dave on T).

    Round 1: Alice opens on Bob, Dave kills Carol, Alice kills Dave. CT win.
    Round 2: Bob and Dave kill both CTs, bomb explodes. T win.
    Round 3: no kills, CT win on time.
    """
    log = LogBuilder().start()

    log.chat("Alice", "CT", "gl hf")
    log.wait(5)
    log.round_start()
    log.flash("Alice", "CT", 11)
    log.blind("Bob", "T", "Alice", "CT", 2.5, 11)
    log.blind("Carol", "CT", "Alice", "CT", 1.0, 11)
    log.damage("Alice", "CT", "Bob", "T", 27, hitgroup="left leg")
    log.damage("Alice", "CT", "Bob", "T", 73, hitgroup="head")
    log.kill("Alice", "CT", "Bob", "T", headshot=True)
    log.assist("Carol", "CT", "Bob", "T")
    log.damage("Dave", "T", "Carol", "CT", 100)
    log.kill("Dave", "T", "Carol", "CT", weapon="glock")
    log.damage("Alice", "CT", "Dave", "T", 100, hitgroup="right leg")
    log.kill("Alice", "CT", "Dave", "T", weapon="m4a1")
    log.chat("Alice", "CT", "nice", team=True)
    log.round_win("CT")
    log.round_end()

    log.wait(15)
    log.round_start()
    log.damage("Bob", "T", "Alice", "CT", 100)
    log.kill("Bob", "T", "Alice", "CT", weapon="awp")
    log.damage("Dave", "T", "Carol", "CT", 100)
    log.kill("Dave", "T", "Carol", "CT")
    log.wait(40)
    log.round_win("T", "SFUI_Notice_Target_Bombed")
    log.round_end()

    log.wait(15)
    log.empty_round("CT", "SFUI_Notice_Target_Saved", length=115)
    log.game_over(2, 1)
    return log


@pytest.fixture
def sample_match(sample_log):
    return analyze_match(parse_lines(sample_log.lines))


@pytest.fixture
def sample_log_path(tmp_path, sample_log) -> Path:
    return sample_log.write(tmp_path / "match.log")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep config files and LOGSIGHT_* variables on this machine out of tests."""
    for name in list(os.environ):
        if name.startswith("LOGSIGHT_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()
