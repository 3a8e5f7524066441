"""Tests for the bomfold command line entry point."""

import csv
import logging
import os

import pytest

from bomfold.cli import main


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run every test from an empty directory with no BOMFOLD_* variables set."""
    monkeypatch.chdir(tmp_path)
    for name in [n for n in os.environ if n.startswith("BOMFOLD_")]:
        monkeypatch.delenv(name)
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def bom_csv(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_text(
        "Part Number,Part Name,Quantity,level\n"
        "A,Assembly A,1,0\n"
        "B,Part B,3,1\n"
        "C,Part C,2,1\n",
        encoding="utf-8"
    )
    return path


def test_writes_tables_and_exits_zero(bom_csv, tmp_path):
    out = tmp_path / "out"

    assert main(["--input", str(bom_csv), "--output", str(out)]) == 0

    with open(out / "bom_entries.csv", newline="", encoding="utf-8") as f:
        entries = list(csv.DictReader(f))
    assert [(e["root_part_number"], e["child_part_number"], e["quantity"]) for e in entries] == [
        ("A", "B", "3.0"),
        ("A", "C", "2.0"),
    ]
    assert (out / "boms.csv").exists()


def test_prints_tree_without_output(bom_csv, capsys):
    assert main(["--input", str(bom_csv)]) == 0

    assert capsys.readouterr().out.splitlines() == [
        "A - Assembly A",
        "  3 x B - Part B",
        "  2 x C - Part C",
    ]


def test_json_format_flag(bom_csv, tmp_path):
    out = tmp_path / "out"

    assert main(["--input", str(bom_csv), "--output", str(out), "--format", "json"]) == 0

    assert (out / "boms.json").exists()
    assert (out / "bom_entries.json").exists()


def test_missing_input_flag_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 2
    assert "--input" in capsys.readouterr().err


def test_unreadable_input_exits_one(tmp_path, capsys):
    assert main(["--input", str(tmp_path / "missing.csv")]) == 1

    assert "missing.csv" in capsys.readouterr().err


def test_corrupt_workbook_exits_one(tmp_path, capsys):
    path = tmp_path / "bad.xlsx"
    path.write_bytes(b"not a zip")

    assert main(["--input", str(path)]) == 1

    assert "Could not read workbook" in capsys.readouterr().err


def test_malformed_hierarchy_exits_one(tmp_path, capsys):
    path = tmp_path / "bad.csv"
    path.write_text("Part Number,Part Name,Quantity,level\nA,A,1,0\nB,B,1,2\n", encoding="utf-8")
    out = tmp_path / "out"

    assert main(["--input", str(path), "--output", str(out)]) == 1

    err = capsys.readouterr().err
    assert "row 1" in err
    assert not out.exists()


def test_schema_error_exits_one(tmp_path, capsys):
    path = tmp_path / "bad.csv"
    path.write_text("Part Number,Quantity,level\nA,1,0\n", encoding="utf-8")

    assert main(["--input", str(path)]) == 1

    assert "Part Name" in capsys.readouterr().err


def test_root_level_flag(tmp_path, capsys):
    path = tmp_path / "bom.csv"
    path.write_text("Part Number,Part Name,Quantity,level\nA,A,1,1\nB,B,2,2\n", encoding="utf-8")

    assert main(["--input", str(path), "--root-level", "1"]) == 0

    assert capsys.readouterr().out.splitlines() == ["A - A", "  2 x B - B"]


def test_invalid_root_level_flag(bom_csv, capsys):
    assert main(["--input", str(bom_csv), "--root-level", "top"]) == 1

    assert "--root-level" in capsys.readouterr().err


def test_settings_from_env_file(bom_csv, tmp_path):
    (tmp_path / ".env").write_text("BOMFOLD_OUTPUT_FORMAT=json\n", encoding="utf-8")
    out = tmp_path / "out"

    assert main(["--input", str(bom_csv), "--output", str(out)]) == 0

    assert (out / "boms.json").exists()


def test_invalid_log_level_flag(bom_csv, capsys):
    assert main(["--input", str(bom_csv), "--log-level", "loud"]) == 1

    assert "--log-level" in capsys.readouterr().err
