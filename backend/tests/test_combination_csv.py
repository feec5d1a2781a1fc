"""
Tests for the official possibilities CSV parser.
"""

import logging
from pathlib import Path

import pytest

from wc26.services.bracket_slots import MatchupTemplate, runner_up, third_place, winner
from wc26.services.combination_csv import CSV_COLUMN_SLOTS, parse_combinations_csv, templates_for_row
from wc26.services.combination_table import CombinationTable, dump_combination_table, load_combination_table

FIXTURE = Path(__file__).parent / "fixtures" / "possibilities_sample.csv"


@pytest.fixture(name="parsed")
def parsed_fixture():
    return parse_combinations_csv(FIXTURE.read_text(encoding="utf-8"))


class TestParseSample:

    def test_entries_and_skips(self, parsed):
        assert sorted(parsed.entries) == ["ABCDEFGH", "CEFHIJKL"]
        reasons = {s.line_number: s.reason for s in parsed.skipped}
        assert reasons == {13: "7 advancing groups", 14: "duplicate ABCDEFGH"}

    def test_every_entry_has_16_matchups(self, parsed):
        for templates in parsed.entries.values():
            assert len(templates) == 16
            assert all(t.is_resolved for t in templates)

    def test_csv_columns_mapped_to_slots(self, parsed):
        t = parsed.entries["ABCDEFGH"]
        assert t[6] == MatchupTemplate(winner("D"), third_place("E"))    # 1B vs 3E
        assert t[0] == MatchupTemplate(winner("E"), third_place("F"))    # 1D vs 3F
        assert t[7] == MatchupTemplate(winner("G"), third_place("C"))    # 1E vs 3C
        assert t[1] == MatchupTemplate(winner("I"), third_place("A"))    # 1G vs 3A
        assert t[15] == MatchupTemplate(winner("K"), third_place("B"))   # 1I vs 3B
        assert t[12] == MatchupTemplate(winner("L"), third_place("D"))   # 1K vs 3D
        assert t[14] == MatchupTemplate(winner("J"), third_place("G"))   # 1L vs 3G

    def test_unmapped_slots_use_priority_rules(self, parsed):
        t = parsed.entries["ABCDEFGH"]
        assert t[8] == MatchupTemplate(winner("C"), third_place("C"))
        assert t[11] == MatchupTemplate(winner("A"), third_place("E"))

    def test_static_slots_copied(self, parsed):
        t = parsed.entries["CEFHIJKL"]
        assert t[2] == MatchupTemplate(runner_up("A"), runner_up("B"))
        assert t[13] == MatchupTemplate(runner_up("H"), runner_up("G"))

    def test_empty_or_non_advancing_cells_fall_back(self, parsed):
        t = parsed.entries["CEFHIJKL"]
        # "1I vs 3A": A is not advancing -> K's priority list D/E/I/J/L -> E
        assert t[15] == MatchupTemplate(winner("K"), third_place("E"))
        # "1L vs" empty -> J's priority list E/F/G/I/J -> E
        assert t[14] == MatchupTemplate(winner("J"), third_place("E"))
        assert t[12] == MatchupTemplate(winner("L"), third_place("K"))

    def test_skipped_rows_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="wc26.services.combination_csv"):
            parse_combinations_csv(FIXTURE.read_text(encoding="utf-8"))
        assert "expected 8 advancing groups" in caplog.text
        assert "duplicate combination ABCDEFGH" in caplog.text


class TestTemplatesForRow:

    def test_no_csv_cells_equals_priority_rules(self):
        from wc26.services.priority_rules import build_fallback_templates

        slots = templates_for_row(list("ABCDEFGH"), [])
        assert slots == build_fallback_templates(frozenset("ABCDEFGH"))

    def test_mapped_columns_target_third_place_slots(self):
        from wc26.services.priority_rules import THIRD_PLACE_SLOTS

        assert set(CSV_COLUMN_SLOTS.values()) <= set(THIRD_PLACE_SLOTS)

    def test_csv_cell_keeps_slot_winner(self):
        cells = [""] * 8
        cells[5] = "3H"     # 1I vs -> slot 15
        slots = templates_for_row(list("ABCDEFGH"), cells)
        assert slots[15] == MatchupTemplate(winner("K"), third_place("H"))

    def test_malformed_cell_ignored(self):
        slots = templates_for_row(list("ABCDEFGH"), ["", "E3", "", "", "", "", "", ""])
        # D's priority list B/E/F/I/J -> B
        assert slots[6] == MatchupTemplate(winner("D"), third_place("B"))


class TestHeadersOnly:

    def test_no_data_rows(self):
        text = "\n".join(["header"] * 10) + "\n"
        result = parse_combinations_csv(text)
        assert result.entries == {}
        assert result.skipped == []


class TestBuildTableFile:

    def test_parsed_entries_load_back(self, parsed, tmp_path):
        table = CombinationTable(parsed.entries, source=FIXTURE.name)
        out = tmp_path / "table.json"
        out.write_text(dump_combination_table(table), encoding="utf-8")

        loaded = load_combination_table(out)
        assert loaded.keys() == ["ABCDEFGH", "CEFHIJKL"]
        assert loaded.source == "possibilities_sample.csv"
        assert loaded.lookup("CEFHIJKL") == parsed.entries["CEFHIJKL"]
