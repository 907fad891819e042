"""Tests for match document export."""

import csv
import json
from io import StringIO

import pandas as pd
import pytest

from logsight import __version__
from logsight.analytics import analyze_match
from logsight.export import (
    export_match,
    export_players_to_csv,
    export_to_excel,
    export_to_json,
    flatten_dict,
)
from logsight.parser import parse_lines


class TestFlattenDict:
    """Tests for nested dict flattening."""

    def test_nested(self):
        """Nested keys are joined with underscores."""
        assert flatten_dict({"a": 1, "b": {"c": 2, "d": {"e": 3}}}) == {"a": 1, "b_c": 2, "b_d_e": 3}

    def test_lists_left_alone(self):
        """Lists are values, not nested dicts."""
        assert flatten_dict({"a": [1, 2]}) == {"a": [1, 2]}


class TestJsonExport:
    """Tests for the JSON document."""

    def test_round_trips(self, sample_match):
        """The JSON decodes to the same document."""
        assert json.loads(export_to_json(sample_match)) == sample_match

    def test_compact_by_default(self, sample_match):
        """No indentation unless asked for."""
        assert "\n" not in export_to_json(sample_match)
        assert "\n" in export_to_json(sample_match, indent=2)

    def test_metadata(self, sample_match):
        """Metadata is added in front when requested."""
        data = json.loads(export_to_json(sample_match, include_metadata=True))

        assert list(data)[0] == "_metadata"
        assert data["_metadata"]["version"] == __version__
        assert data["map"] == "de_dust2"

    def test_writes_file(self, sample_match, tmp_path):
        """The document is written as UTF-8."""
        path = tmp_path / "match.json"
        text = export_to_json(sample_match, path)

        assert path.read_text(encoding="utf-8") == text

    def test_unicode_names_kept(self, builder):
        """Non-ASCII player names are not escaped."""
        builder.start()
        builder.round_start()
        builder.kill("Zoë", "CT", "Bob", "T")
        builder.round_end()

        assert "Zoë" in export_to_json(analyze_match(parse_lines(builder.lines)))


class TestCsvExport:
    """Tests for the player CSV."""

    def test_one_row_per_player(self, sample_match):
        """Header plus one flattened row per player."""
        rows = list(csv.DictReader(StringIO(export_players_to_csv(sample_match))))

        assert [r["name"] for r in rows] == ["Alice", "Dave", "Bob", "Carol"]
        assert rows[0]["kills"] == "2"
        assert rows[0]["firstHalf_adr"] == "66.7"
        assert rows[0]["flashStats_enemiesBlinded"] == "1"
        assert json.loads(rows[0]["flashStats_spectatorBlinds"]) == []

    def test_delimiter_and_header(self, sample_match):
        """Custom delimiter, optional header."""
        text = export_players_to_csv(sample_match, delimiter=";", include_header=False)

        first_line = text.splitlines()[0]
        assert first_line.startswith("Alice;Alpha;2;")

    def test_no_players(self):
        """An empty match exports as an empty string."""
        assert export_players_to_csv({"players": []}) == ""


class TestExcelExport:
    """Tests for the Excel workbook."""

    def test_sheets(self, sample_match, tmp_path):
        """Match, Teams, Players and Rounds sheets are written."""
        path = tmp_path / "match.xlsx"
        export_to_excel(sample_match, path)

        sheets = pd.read_excel(path, sheet_name=None)
        assert list(sheets) == ["Match", "Teams", "Players", "Rounds"]
        assert list(sheets["Teams"]["Team"]) == ["Alpha", "Bravo"]
        assert list(sheets["Rounds"]["Round"]) == [1, 2, 3]
        assert len(sheets["Players"]) == 4


class TestExportMatch:
    """Tests for format dispatch."""

    @pytest.mark.parametrize("suffix", ["json", "csv", "xlsx"])
    def test_format_from_extension(self, sample_match, tmp_path, suffix):
        """The file extension picks the format."""
        path = tmp_path / f"match.{suffix}"
        export_match(sample_match, path)
        assert path.exists()
        assert path.stat().st_size > 0

    def test_format_override(self, sample_match, tmp_path):
        """An explicit format wins over the extension."""
        path = tmp_path / "match.out"
        export_match(sample_match, path, format="json")
        assert json.loads(path.read_text(encoding="utf-8"))["map"] == "de_dust2"

    def test_unsupported_format(self, sample_match, tmp_path):
        """Unknown formats are rejected."""
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_match(sample_match, tmp_path / "match.parquet")
