"""
LogSight CLI - Command Line Interface for CS:GO Match Logs

Provides commands for:
- Analyzing a match log and printing the scoreboard
- Exporting the match document (JSON, CSV, Excel)
- Inspecting a single round
- Generating a default config file
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from logsight import __version__
from logsight.analytics import analyze_log
from logsight.core.config import (
    configure_logging,
    generate_default_config,
    get_config,
    load_config,
    set_config,
)
from logsight.core.schemas import MatchData
from logsight.export import export_match
from logsight.parser import LogReadError
from logsight.scoreboard import (
    ScoreboardView,
    average_round_length,
    find_round,
    round_roster,
    scoreboard_rows,
)

app = typer.Typer(
    name="logsight",
    help="CS:GO match log analyzer - scores, rounds and player statistics from a server log",
    add_completion=False,
)
console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]LogSight[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (YAML, TOML or JSON)",
        dir_okay=False,
    ),
) -> None:
    """LogSight - CS:GO Match Log Analyzer"""
    try:
        if config_file is not None:
            set_config(load_config(config_file))
        config = get_config()
    except ValueError as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(config.logging)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_match(log_path: Path) -> MatchData:
    """Parse and analyze a log, exiting with status 1 if it cannot be read."""
    encoding = get_config().parser.encoding
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Parsing match log...", total=None)
        try:
            match = analyze_log(log_path, encoding=encoding)
        except LogReadError as e:
            console.print(f"[red]Error reading log:[/red] {e}")
            raise typer.Exit(1)
        progress.update(task, description="Match log parsed successfully!")
    return match


# =============================================================================
# Display Helpers
# =============================================================================


def _display_header(match: MatchData) -> None:
    """Map, date, duration and final score."""
    teams = match["teams"]
    score = " - ".join(f"{escape(t['name']) or '?'} {t['finalScore']}" for t in teams)

    info_table = Table(title="Match Information", show_header=False)
    info_table.add_column("Property", style="cyan")
    info_table.add_column("Value", style="green")
    info_table.add_row("Map", escape(match["map"]) or "unknown")
    info_table.add_row("Date", match["date"] or "-")
    info_table.add_row("Duration", match["duration"])
    info_table.add_row("Rounds", str(len(match["rounds"])))
    info_table.add_row("Avg Round", average_round_length(match))
    info_table.add_row("Score", score)
    console.print(info_table)
    console.print()


def _display_teams(match: MatchData) -> None:
    """Team table: halves, sides and win reasons."""
    table = Table(title="Teams")
    table.add_column("Team", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("1st", justify="right")
    table.add_column("2nd", justify="right")
    table.add_column("CT", justify="right")
    table.add_column("T", justify="right")
    table.add_column("Elim", justify="right")
    table.add_column("Defuse", justify="right")
    table.add_column("Bomb", justify="right")
    table.add_column("Time", justify="right")

    for team in match["teams"]:
        wins = team["roundWinTypes"]
        table.add_row(
            escape(team["name"]),
            str(team["finalScore"]),
            str(team["firstHalfScore"]),
            str(team["secondHalfScore"]),
            str(team["ctRoundsWon"]),
            str(team["tRoundsWon"]),
            str(wins["elimination"]),
            str(wins["bombDefused"]),
            str(wins["bombExploded"]),
            str(wins["timeout"]),
        )

    console.print(table)
    console.print()


def _display_scoreboard(match: MatchData, view: ScoreboardView) -> None:
    """Player scoreboard for the chosen view, plus situational stats."""
    if not match["players"]:
        console.print("[yellow]No player statistics available[/yellow]")
        return

    table = Table(title=f"Scoreboard ({view.value})")
    table.add_column("Player", style="cyan")
    table.add_column("Team")
    table.add_column("K", justify="right")
    table.add_column("D", justify="right")
    table.add_column("ADR", justify="right")
    table.add_column("HS%", justify="right")
    if view is ScoreboardView.OVERALL:
        table.add_column("A", justify="right")
        table.add_column("Open K/D", justify="right")
        table.add_column("Clutch", justify="right")
        table.add_column("Flash E/T", justify="right")
        table.add_column("2K/3K/4K/Ace", justify="right")

    players = {p["name"]: p for p in match["players"]}
    for row in scoreboard_rows(match, view):
        cells = [
            escape(row["name"]),
            escape(row["team"]),
            str(row["kills"]),
            str(row["deaths"]),
            f"{row['adr']:.1f}",
            f"{row['hsPercent']}%",
        ]
        if view is ScoreboardView.OVERALL:
            p = players[row["name"]]
            flash = p["flashStats"]
            multi = p["multiKillRounds"]
            cells += [
                str(p["assists"]),
                f"{p['openingKills']}/{p['openingDeaths']}",
                f"{p['clutchesWon']}/{p['clutchesAttempted']}",
                f"{flash['enemiesBlinded']}/{flash['teammatesBlinded']}",
                f"{multi['twoK']}/{multi['threeK']}/{multi['fourK']}/{multi['ace']}",
            ]
        table.add_row(*cells)

    console.print(table)
    console.print()


# =============================================================================
# Commands
# =============================================================================


@app.command()
def analyze(
    log_path: Path = typer.Argument(
        ...,
        help="Path to the console log to analyze",
        dir_okay=False,
    ),
    view: ScoreboardView = typer.Option(
        ScoreboardView.OVERALL,
        "--view",
        help="Scoreboard view: overall, first-half, second-half, ct, t",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for results (format detected from extension: .json, .csv, .xlsx)"
    ),
) -> None:
    """
    Analyze a match log and display the scoreboard.

    Shows the match header, the team table and a player scoreboard. Use
    --view to switch the scoreboard to one half or one side.
    """
    console.print("\n[bold blue]LogSight[/bold blue] - Analyzing match log...\n")
    match = _load_match(log_path)

    _display_header(match)
    _display_teams(match)
    _display_scoreboard(match, view)

    if output:
        _export(match, output)


def _export(match: MatchData, output: Path) -> None:
    config = get_config()
    try:
        export_match(
            match,
            output,
            indent=config.export.json_indent,
            delimiter=config.export.csv_delimiter,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Results exported to:[/green] {output}")


@app.command()
def export(
    log_path: Path = typer.Argument(
        ...,
        help="Path to the console log",
        dir_okay=False,
    ),
    output: Optional[Path] = typer.Argument(
        None,
        help="Output file (default: export.output_path from config, match.json)",
    ),
) -> None:
    """
    Write the match document to a file for static hosting.
    """
    match = _load_match(log_path)
    _export(match, output or Path(get_config().export.output_path))


@app.command("round")
def round_detail(
    log_path: Path = typer.Argument(
        ...,
        help="Path to the console log",
        dir_okay=False,
    ),
    number: int = typer.Argument(..., help="Round number (1-based)"),
) -> None:
    """
    Show one round: every player's line, kill feed, flashes and chat.
    """
    match = _load_match(log_path)
    round_ = find_round(match, number)
    roster = round_roster(match, number)
    if round_ is None or roster is None:
        console.print(f"[red]Error:[/red] Round {number} not found ({len(match['rounds'])} rounds)")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold]{escape(round_['winner'])}[/bold] ({round_['winnerSide']}) won by "
            f"{round_['winReason'].replace('_', ' ')} in {round_['duration']}s\n"
            f"Score: CT {round_['score']['ct']} - {round_['score']['t']} T",
            title=f"Round {number}",
            border_style="blue",
        )
    )

    table = Table(title="Players")
    table.add_column("Player", style="cyan")
    table.add_column("Side")
    table.add_column("K", justify="right")
    table.add_column("D", justify="right")
    table.add_column("A", justify="right")
    table.add_column("DMG", justify="right")
    for row in roster:
        style = None if row["survived"] else "dim"
        table.add_row(
            escape(row["name"]),
            row["side"],
            str(row["kills"]),
            str(row["deaths"]),
            str(row["assists"]),
            str(row["damage"]),
            style=style,
        )
    console.print(table)

    if round_["kills"]:
        feed = Table(title="Kill Feed")
        feed.add_column("Killer", style="cyan")
        feed.add_column("Weapon")
        feed.add_column("Victim", style="red")
        for kill in round_["kills"]:
            weapon = escape(kill["weapon"]) + (" (HS)" if kill["headshot"] else "")
            feed.add_row(escape(kill["killer"]), weapon, escape(kill["victim"]))
        console.print(feed)

    if round_["flashes"]:
        flashes = Table(title="Flashes")
        flashes.add_column("Thrower", style="cyan")
        flashes.add_column("Blinded")
        for flash in round_["flashes"]:
            blinded = ", ".join(
                f"{escape(b['victim'])} {b['duration']:.2f}s"
                + (" (self)" if b["isSelf"] else " (team)" if b["isTeammate"] else "")
                for b in flash["blinds"]
            )
            flashes.add_row(escape(flash["thrower"]), blinded or "-")
        console.print(flashes)

    if round_["chat"]:
        console.print("\n[bold]Chat[/bold]")
        for message in round_["chat"]:
            channel = "(team) " if message["isTeamChat"] else ""
            console.print(
                f"  [dim]{message['relativeTime']}[/dim] {channel}"
                f"[cyan]{escape(message['player'])}[/cyan]: {escape(message['message'])}",
                highlight=False,
            )


@app.command()
def init_config(
    path: Path = typer.Argument(
        Path("logsight.yaml"),
        help="Where to write the config file (.yaml, .yml or .json)",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        console.print(f"[red]Error:[/red] {path} already exists (use --force to overwrite)")
        raise typer.Exit(1)
    try:
        generate_default_config(path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    console.print(f"[green]Config written to:[/green] {path}")


@app.command()
def info() -> None:
    """
    Display information about LogSight and the environment.
    """
    import platform as plat

    config = get_config()

    console.print(f"\n[bold blue]LogSight[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", plat.python_version())
    table.add_row("Platform", plat.system())
    table.add_row("Architecture", plat.machine())
    table.add_row("Log Path", config.parser.log_path or "[yellow]not set[/yellow]")
    table.add_row("Output Path", config.export.output_path)
    table.add_row("Server", f"{config.server.host}:{config.server.port}")

    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
