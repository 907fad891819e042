"""
Export Functionality for LogSight

Provides multiple export formats for the match document:
- JSON (default, the artifact the static dashboard loads)
- CSV (player scoreboard)
- Excel (XLSX)

Each format has its own advantages:
- JSON: Complete data, programmatic access
- CSV: Simple, widely compatible
- Excel: Multi-sheet, formatted
"""

import csv
import json
import logging
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Any

from logsight import __version__
from logsight.core.schemas import MatchData
from logsight.core.utils import timed
from logsight.scoreboard import average_round_length

logger = logging.getLogger(__name__)


# ============================================================================
# Data Conversion Utilities
# ============================================================================


def flatten_dict(d: dict, parent_key: str = "", sep: str = "_") -> dict:
    """Flatten a nested dictionary."""
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k
        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep).items())
        else:
            items.append((new_key, v))
    return dict(items)


# ============================================================================
# JSON Export
# ============================================================================


def export_to_json(
    match: MatchData,
    output_path: Path | None = None,
    indent: int | None = None,
    include_metadata: bool = False,
) -> str:
    """
    Export the match document to JSON.

    Args:
        match: The match document
        output_path: Optional path to write the file
        indent: JSON indentation level (None for compact output)
        include_metadata: Whether to add an ``_metadata`` block

    Returns:
        JSON string
    """
    export_data: dict[str, Any] = dict(match)

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "logsight_json",
                "version": __version__,
            },
            **export_data,
        }

    json_str = json.dumps(export_data, indent=indent, ensure_ascii=False)

    if output_path:
        output_path.write_text(json_str, encoding="utf-8")
        logger.info(f"Exported JSON to: {output_path}")

    return json_str


# ============================================================================
# CSV Export
# ============================================================================


def export_players_to_csv(
    match: MatchData,
    output_path: Path | None = None,
    delimiter: str = ",",
    include_header: bool = True,
) -> str:
    """
    Export the player table to CSV.

    Nested stats are flattened into ``parent_child`` columns.

    Args:
        match: The match document
        output_path: Optional path to write the file
        delimiter: CSV delimiter character
        include_header: Whether to include column headers

    Returns:
        CSV string
    """
    rows = [flatten_dict(dict(player)) for player in match["players"]]
    if not rows:
        return ""

    columns = list(rows[0].keys())

    output = StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, delimiter=delimiter)

    if include_header:
        writer.writeheader()

    for row in rows:
        # Lists (spectator blinds) are kept as JSON
        clean_row = {
            k: json.dumps(v, ensure_ascii=False) if isinstance(v, list) else v
            for k, v in row.items()
        }
        writer.writerow(clean_row)

    csv_str = output.getvalue()

    if output_path:
        output_path.write_text(csv_str, encoding="utf-8")
        logger.info(f"Exported CSV to: {output_path}")

    return csv_str


# ============================================================================
# Excel Export
# ============================================================================


def export_to_excel(match: MatchData, output_path: Path) -> None:
    """
    Export the match document to an Excel workbook.

    Creates a multi-sheet workbook with:
    - Match sheet with map, date and duration
    - Teams sheet
    - Players sheet (flattened stats)
    - Rounds sheet

    Args:
        match: The match document
        output_path: Path to write the Excel file
    """
    try:
        import pandas as pd
    except ImportError:
        raise ImportError("pandas is required for Excel export")

    try:
        import openpyxl  # noqa: F401
    except ImportError:
        raise ImportError("openpyxl is required for Excel export")

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        match_info = pd.DataFrame([{
            "Map": match["map"],
            "Date": match["date"],
            "Duration": match["duration"],
            "Rounds": len(match["rounds"]),
            "Average Round": average_round_length(match),
            "Players": len(match["players"]),
        }])
        match_info.T.to_excel(writer, sheet_name="Match", header=False)

        team_rows = []
        for team in match["teams"]:
            team_rows.append({
                "Team": team["name"],
                "Score": team["finalScore"],
                "1st Half": team["firstHalfScore"],
                "2nd Half": team["secondHalfScore"],
                "CT Wins": team["ctRoundsWon"],
                "T Wins": team["tRoundsWon"],
                "Elimination": team["roundWinTypes"]["elimination"],
                "Bomb Defused": team["roundWinTypes"]["bombDefused"],
                "Bomb Exploded": team["roundWinTypes"]["bombExploded"],
                "Timeout": team["roundWinTypes"]["timeout"],
            })
        if team_rows:
            pd.DataFrame(team_rows).to_excel(writer, sheet_name="Teams", index=False)

        player_rows = []
        for player in match["players"]:
            row = flatten_dict(dict(player))
            row["flashStats_spectatorBlinds"] = "; ".join(
                f"{s['name']} ({s['totalTime']}s)"
                for s in player["flashStats"]["spectatorBlinds"]
            )
            player_rows.append(row)
        if player_rows:
            pd.DataFrame(player_rows).to_excel(writer, sheet_name="Players", index=False)

        round_rows = []
        for round_ in match["rounds"]:
            round_rows.append({
                "Round": round_["number"],
                "Winner": round_["winner"],
                "Side": round_["winnerSide"],
                "Reason": round_["winReason"],
                "Duration (s)": round_["duration"],
                "CT Score": round_["score"]["ct"],
                "T Score": round_["score"]["t"],
                "Kills": len(round_["kills"]),
                "Flashes": len(round_["flashes"]),
            })
        if round_rows:
            pd.DataFrame(round_rows).to_excel(writer, sheet_name="Rounds", index=False)

    logger.info(f"Exported Excel to: {output_path}")


# ============================================================================
# Dispatch
# ============================================================================


@timed
def export_match(
    match: MatchData,
    output_path: Path,
    format: str | None = None,
    indent: int | None = None,
    delimiter: str = ",",
) -> None:
    """
    Export the match document to the specified format.

    Format is detected from file extension if not specified.

    Args:
        match: The match document
        output_path: Path to write the export
        format: Optional format override (json, csv, xlsx)
        indent: JSON indentation level
        delimiter: CSV delimiter character
    """
    if format is None:
        format = output_path.suffix.lstrip(".").lower()

    if format == "json":
        export_to_json(match, output_path, indent=indent)
    elif format == "csv":
        export_players_to_csv(match, output_path, delimiter=delimiter)
    elif format in ("xlsx", "excel"):
        export_to_excel(match, output_path)
    else:
        raise ValueError(f"Unsupported export format: {format}")
