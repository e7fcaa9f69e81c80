"""Grid: the immutable table of raw cell values handed to the evaluator.

Text format::

    3	4
    12	=C2	3	'Sample
    =A1+B1*C1/5	=A2*B1	=B3-C3	'Spread
    'Test	=4-3	5	'Sheet

The first line holds the row and column counts; each following line is one
tab-delimited row.  Rows and columns beyond the declared size are dropped,
missing ones are treated as empty cells.  At most 52 columns are allowed,
as many as there are column letters.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from eltab._utils import FORMULA_MARKER, MAX_COLUMNS, CellKind, classify_raw
from eltab.calc._token import CellError

logger = logging.getLogger(__name__)


class GridFormatError(ValueError):
    """The table text cannot be turned into a grid."""


def _check_dimensions(n_rows: int, n_cols: int) -> None:
    if n_rows <= 0 or n_cols <= 0:
        raise GridFormatError(
            f"Incorrect table header: rows={n_rows}, cols={n_cols}"
        )
    if n_cols > MAX_COLUMNS:
        raise GridFormatError(
            f"Too many columns: {n_cols} (at most {MAX_COLUMNS} can be labelled)"
        )


@dataclass(frozen=True)
class FormulaCell:
    """A formula cell: its coordinate and the body after the leading ``=``."""

    coord: tuple[int, int]
    body: str


@dataclass(frozen=True)
class Grid:
    """Rectangular table of raw cell strings plus its formula cells.

    ``formulas`` lists formula cells in row-major order.  Malformed raw
    values have already been replaced by the ``#E_UNKNOWN`` marker.
    """

    n_rows: int
    n_cols: int
    cells: tuple[tuple[str, ...], ...]
    formulas: tuple[FormulaCell, ...]

    def __post_init__(self) -> None:
        _check_dimensions(self.n_rows, self.n_cols)

    def raw(self, coord: tuple[int, int]) -> str:
        row, col = coord
        return self.cells[row][col]

    def kind(self, coord: tuple[int, int]) -> CellKind:
        return classify_raw(self.raw(coord))

    @classmethod
    def from_rows(
        cls,
        n_rows: int,
        n_cols: int,
        rows: Iterable[Sequence[str]],
        verbose: bool = False,
    ) -> Grid:
        """Build a grid of *n_rows* x *n_cols* from raw row values."""
        _check_dimensions(n_rows, n_cols)

        cells: list[list[str]] = []
        formulas: list[FormulaCell] = []

        for i, row in enumerate(rows):
            if i == n_rows:
                if verbose:
                    logger.warning(
                        "More lines than expected. Skipping the remaining lines"
                    )
                break
            if verbose and len(row) > n_cols:
                logger.warning(
                    "Extra columns detected in line #%d. Skipping...", i + 1
                )

            values: list[str] = []
            for j in range(n_cols):
                raw = row[j] if j < len(row) else ""
                kind = classify_raw(raw)
                if kind is CellKind.FORMULA:
                    formulas.append(
                        FormulaCell((i, j), raw[len(FORMULA_MARKER):])
                    )
                elif kind is CellKind.MALFORMED:
                    raw = CellError.UNKNOWN.code
                values.append(raw)
            cells.append(values)

        if verbose and len(cells) < n_rows:
            logger.warning(
                "Fewer lines than expected: %d of %d. Padding with empty cells",
                len(cells),
                n_rows,
            )
        while len(cells) < n_rows:
            cells.append([""] * n_cols)

        return cls(
            n_rows=n_rows,
            n_cols=n_cols,
            cells=tuple(tuple(r) for r in cells),
            formulas=tuple(formulas),
        )


def _parse_header(line: str) -> tuple[int, int]:
    parts = line.split()
    try:
        n_rows, n_cols = int(parts[0]), int(parts[1])
    except (IndexError, ValueError):
        raise GridFormatError(f"Incorrect table header: {line.strip()!r}") from None
    return n_rows, n_cols


def parse_grid(lines: Iterable[str], verbose: bool = False) -> Grid:
    """Build a grid from the lines of the table text format."""
    it = iter(lines)
    header = next(it, None)
    if header is None:
        raise GridFormatError("Missing table header")
    n_rows, n_cols = _parse_header(header)
    rows = (_split_row(line) for line in it)
    return Grid.from_rows(n_rows, n_cols, rows, verbose=verbose)


def _split_row(line: str) -> list[str]:
    line = line.rstrip("\r\n")
    if not line:
        return []
    return line.split("\t")


def load_grid(path: str | os.PathLike[str], verbose: bool = False) -> Grid:
    """Read a table file into a grid."""
    with open(path, encoding="utf-8") as f:
        return parse_grid(f, verbose=verbose)
