"""Tests for writing the BOM tables and rendering the folded tree."""

import csv
import json

import openpyxl
import pytest

from bomfold.export import render_forest, write_tables
from bomfold.flatten import flatten
from bomfold.rows import FlatRow
from bomfold.schema import BOM_ENTRY_HEADERS, BOM_HEADERS
from bomfold.tree import build_forest


@pytest.fixture
def forest():
    rows = [
        FlatRow("A", "Assembly A", 1, 0, 0),
        FlatRow("B", "Part B", 2, 1, 1),
        FlatRow("C", "Part C", 1.5, 2, 2),
        FlatRow("D", "", 5, 1, 3),
        FlatRow("X", "Other", 1, 0, 4),
    ]
    return build_forest(rows)


@pytest.fixture
def tables(forest):
    return flatten(forest)


def read_csv(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


class TestWriteTables:

    def test_csv(self, tables, tmp_path):
        boms, entries = tables

        paths = write_tables(boms, entries, tmp_path / "out")

        assert [p.name for p in paths] == ["boms.csv", "bom_entries.csv"]
        bom_rows = read_csv(paths[0])
        entry_rows = read_csv(paths[1])
        assert list(bom_rows[0]) == BOM_HEADERS
        assert list(entry_rows[0]) == BOM_ENTRY_HEADERS
        assert [r["part_number"] for r in bom_rows] == ["A", "X"]
        assert [(r["parent_part_number"], r["child_part_number"], r["level"]) for r in entry_rows] == [
            ("A", "B", "1"),
            ("B", "C", "2"),
            ("A", "D", "1"),
        ]
        assert entry_rows[1]["quantity"] == "1.5"
        assert entry_rows[1]["entry_type"] == "part"
        assert entry_rows[0]["entry_type"] == "sub-bom"

    def test_json(self, tables, tmp_path):
        boms, entries = tables

        paths = write_tables(boms, entries, tmp_path, format="json")

        assert [p.name for p in paths] == ["boms.json", "bom_entries.json"]
        data = json.loads(paths[1].read_text(encoding="utf-8"))
        assert data[0] == {
            "root_part_number": "A",
            "parent_part_number": "A",
            "child_part_number": "B",
            "child_part_name": "Part B",
            "quantity": 2,
            "level": 1,
            "entry_type": "sub-bom",
        }

    def test_excel(self, tables, tmp_path):
        boms, entries = tables

        paths = write_tables(boms, entries, tmp_path, format="excel")

        assert [p.name for p in paths] == ["boms.xlsx", "bom_entries.xlsx"]
        wb = openpyxl.load_workbook(paths[1])
        ws = wb.active
        assert ws.title == "BOM Entries"
        values = list(ws.iter_rows(values_only=True))
        assert list(values[0]) == BOM_ENTRY_HEADERS
        assert len(values) == 4
        assert values[1][2] == "B"

    def test_empty_tables_still_write_headers(self, tmp_path):
        paths = write_tables([], [], tmp_path)

        assert paths[0].read_text(encoding="utf-8").strip() == ",".join(BOM_HEADERS)
        assert paths[1].read_text(encoding="utf-8").strip() == ",".join(BOM_ENTRY_HEADERS)

    def test_unknown_format_writes_nothing(self, tables, tmp_path):
        boms, entries = tables
        out = tmp_path / "out"

        with pytest.raises(ValueError):
            write_tables(boms, entries, out, format="parquet")

        assert not out.exists()


class TestRenderForest:

    def test_renders_indented_tree(self, forest):
        assert render_forest(forest).splitlines() == [
            "A - Assembly A",
            "  2 x B - Part B",
            "    1.5 x C - Part C",
            "  5 x D",
            "X - Other",
        ]

    def test_empty_forest(self):
        assert render_forest(build_forest([])) == "(empty forest)"
