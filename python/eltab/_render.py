"""Turn an evaluated grid back into printable rows."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from eltab._utils import STRING_MARKER, is_formula, is_string_literal

if TYPE_CHECKING:
    from eltab._grid import Grid
    from eltab.calc._protocol import CalcEngine


def display_value(grid: Grid, engine: CalcEngine, coord: tuple[int, int]) -> str:
    """Printed text of one cell.

    Formula cells come from the engine; string literals lose their marker;
    numbers, empty cells and error markers are printed as stored.
    """
    raw = grid.raw(coord)
    if is_formula(raw):
        return engine.value_at(coord)
    if is_string_literal(raw):
        return raw[len(STRING_MARKER):]
    return raw


def render_rows(grid: Grid, engine: CalcEngine) -> Iterator[list[str]]:
    for row in range(grid.n_rows):
        yield [display_value(grid, engine, (row, col)) for col in range(grid.n_cols)]


def format_table(grid: Grid, engine: CalcEngine) -> str:
    """Tab-delimited text of the evaluated grid, one line per row."""
    return "".join("\t".join(cells) + "\n" for cells in render_rows(grid, engine))
