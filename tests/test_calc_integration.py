"""Integration tests for eltab: load, evaluate, render and the CLI."""

from __future__ import annotations

import io
import sys

import pytest

from eltab import Grid, GridEvaluator, format_table, parse_grid, render_rows
from eltab.cli import main

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SAMPLE_TABLE = (
    "3\t4\n"
    "12\t=C2\t3\t'Sample\n"
    "=A1+B1*C1/5\t=A2*B1\t=B3-C3\t'Spread\n"
    "'Test\t=4-3\t5\t'Sheet\n"
)

SAMPLE_OUTPUT = (
    "12\t-4\t3\tSample\n"
    "4\t-16\t-4\tSpread\n"
    "Test\t1\t5\tSheet\n"
)


def _evaluate(text: str) -> tuple[Grid, GridEvaluator]:
    grid = parse_grid(io.StringIO(text))
    evaluator = GridEvaluator(grid)
    evaluator.run()
    return grid, evaluator


class TestSampleTable:
    def test_formula_values(self) -> None:
        grid = parse_grid(io.StringIO(SAMPLE_TABLE))
        results = GridEvaluator(grid).run()
        assert results == {
            "B1": "-4",
            "A2": "4",
            "B2": "-16",
            "C2": "-4",
            "B3": "1",
        }

    def test_rendered_rows(self) -> None:
        grid, ev = _evaluate(SAMPLE_TABLE)
        assert list(render_rows(grid, ev)) == [
            ["12", "-4", "3", "Sample"],
            ["4", "-16", "-4", "Spread"],
            ["Test", "1", "5", "Sheet"],
        ]

    def test_format_table(self) -> None:
        grid, ev = _evaluate(SAMPLE_TABLE)
        assert format_table(grid, ev) == SAMPLE_OUTPUT

    def test_value_at_referenced_literal(self) -> None:
        _, ev = _evaluate(SAMPLE_TABLE)
        assert ev.value_at((0, 2)) == "3"


class TestRendering:
    def test_malformed_cell_prints_unknown_marker(self) -> None:
        grid, ev = _evaluate("1 2\nabc\t=A1\n")
        assert format_table(grid, ev) == "#E_UNKNOWN\t#E_WRONG_REF\n"

    def test_literals_pass_through(self) -> None:
        grid, ev = _evaluate("1 4\n0042\t'it's\t\t=A1\n")
        assert list(render_rows(grid, ev)) == [["0042", "it's", "", "42"]]

    def test_padded_rows(self) -> None:
        grid, ev = _evaluate("2 2\n=1+1\n")
        assert format_table(grid, ev) == "2\t\n\t\n"


class TestCli:
    def test_reads_file(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:  # type: ignore[no-untyped-def]
        path = tmp_path / "sample.elt"
        path.write_text(SAMPLE_TABLE, encoding="utf-8")
        main([str(path)])
        assert capsys.readouterr().out == SAMPLE_OUTPUT

    def test_reads_stdin(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO(SAMPLE_TABLE))
        main([])
        assert capsys.readouterr().out == SAMPLE_OUTPUT

    def test_bad_header_exits(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO("0 0\n"))
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error: Incorrect table header")

    def test_missing_file_exits(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:  # type: ignore[no-untyped-def]
        with pytest.raises(SystemExit):
            main([str(tmp_path / "missing.elt")])
        assert "Error:" in capsys.readouterr().err

    def test_too_many_columns_exits(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO("1 53\n" + "1\t" * 52 + "1\n"))
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error: Too many columns: 53")

    def test_undecodable_file_exits(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:  # type: ignore[no-untyped-def]
        path = tmp_path / "latin1.elt"
        path.write_bytes(b"1 1\n\xff\xfe\n")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.err.startswith("Error:")
        assert "utf-8" in captured.err
        assert captured.out == ""
