from pathlib import Path

import pytest

from pod_planner.data_loader import (
    load_roster_from_csv,
    parse_brackets,
    parse_power,
    parse_powers,
)


class TestSampleRosterFile:
    SAMPLE_PATH = Path(__file__).parent.parent / "data" / "sample_roster.csv"

    def test_sample_roster_loads(self):
        if not self.SAMPLE_PATH.exists():
            pytest.skip("Sample roster not found")
        participants, grouping = load_roster_from_csv(self.SAMPLE_PATH)
        assert len(participants) == 13
        assert grouping == {"table-1": ["Eli", "Fay"]}

    def test_sample_roster_loads_in_bracket_mode(self):
        if not self.SAMPLE_PATH.exists():
            pytest.skip("Sample roster not found")
        participants, _ = load_roster_from_csv(self.SAMPLE_PATH, bracket_mode=True)
        by_name = {p.name: p for p in participants}
        assert by_name["Max"].powers == (10.0,)
        assert by_name["Cleo"].brackets == ("3", "4")


class TestParsePowers:
    def test_single_value(self):
        assert parse_powers("7") == [7.0]

    def test_comma_separated(self):
        assert parse_powers("6, 7.5") == [6.0, 7.5]

    def test_range_expands_in_half_steps(self):
        assert parse_powers("6-7") == [6.0, 6.5, 7.0]

    def test_mixed_and_duplicates(self):
        assert parse_powers("6-7, 7, 9") == [6.0, 6.5, 7.0, 9.0]

    def test_blank_is_empty(self):
        assert parse_powers("") == []

    def test_off_grid_raises_error(self):
        with pytest.raises(ValueError, match="not a multiple of 0.5"):
            parse_power("7.3")

    def test_out_of_range_raises_error(self):
        with pytest.raises(ValueError, match="outside 1-10"):
            parse_power("11")

    def test_not_a_number_raises_error(self):
        with pytest.raises(ValueError, match="Invalid power value 'high'"):
            parse_powers("high")

    def test_reversed_range_raises_error(self):
        with pytest.raises(ValueError, match="Invalid power range"):
            parse_powers("8-6")


class TestParseBrackets:
    def test_brackets_are_normalised(self):
        assert parse_brackets("3, cEDH, 3") == ["3", "cedh"]

    def test_unknown_bracket_raises_error(self):
        with pytest.raises(ValueError, match="Unknown bracket '5'"):
            parse_brackets("5")


class TestLoadRosterFromCSV:
    @pytest.fixture
    def sample_csv(self, tmp_path: Path) -> Path:
        csv_content = """name,powers,group
Ava,"6, 7",
Ben,7,duo
Cleo,6-7,duo
Dev,8,
"""
        csv_path = tmp_path / "roster.csv"
        csv_path.write_text(csv_content)
        return csv_path

    def test_returns_participants_in_order(self, sample_csv: Path):
        participants, _ = load_roster_from_csv(str(sample_csv))
        assert [p.id for p in participants] == ["Ava", "Ben", "Cleo", "Dev"]

    def test_powers_are_parsed(self, sample_csv: Path):
        participants, _ = load_roster_from_csv(sample_csv)
        assert participants[0].powers == (6.0, 7.0)
        assert participants[2].powers == (6.0, 6.5, 7.0)

    def test_grouping_is_collected(self, sample_csv: Path):
        _, grouping = load_roster_from_csv(sample_csv)
        assert grouping == {"duo": ["Ben", "Cleo"]}

    def test_group_column_is_optional(self, tmp_path: Path):
        csv_path = tmp_path / "no_groups.csv"
        csv_path.write_text("name,powers\nAva,6\nBen,7\n")
        participants, grouping = load_roster_from_csv(csv_path)
        assert len(participants) == 2
        assert grouping == {}


class TestCSVValidation:
    def test_empty_csv_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            load_roster_from_csv(csv_path)

    def test_headers_only_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "headers_only.csv"
        csv_path.write_text("name,powers,group\n")

        with pytest.raises(ValueError, match="no data rows"):
            load_roster_from_csv(csv_path)

    def test_missing_column_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "no_powers.csv"
        csv_path.write_text("name,group\nAva,\n")

        with pytest.raises(ValueError, match="missing the 'powers' column"):
            load_roster_from_csv(csv_path)

    def test_duplicate_name_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "duplicate.csv"
        csv_path.write_text("name,powers\nAva,6\nAva,7\n")

        with pytest.raises(ValueError, match="Duplicate participant name 'Ava'"):
            load_roster_from_csv(csv_path)

    def test_blank_name_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "blank.csv"
        csv_path.write_text("name,powers\nAva,6\n,7\n")

        with pytest.raises(ValueError, match="Row 3 has no participant name"):
            load_roster_from_csv(csv_path)

    def test_missing_powers_raises_error(self, tmp_path: Path):
        csv_path = tmp_path / "no_selection.csv"
        csv_path.write_text("name,powers\nAva,6\nBen,\n")

        with pytest.raises(ValueError, match="No powers selected for participant 'Ben'"):
            load_roster_from_csv(csv_path)

    def test_bracket_mode_needs_brackets_column(self, tmp_path: Path):
        csv_path = tmp_path / "powers_only.csv"
        csv_path.write_text("name,powers\nAva,6\n")

        with pytest.raises(ValueError, match="missing the 'brackets' column"):
            load_roster_from_csv(csv_path, bracket_mode=True)
