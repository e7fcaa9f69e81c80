"""eltab - evaluate flat spreadsheet-like tables of numbers, strings and formulas.

Usage::

    from eltab import GridEvaluator, format_table, load_grid

    grid = load_grid("table.elt")
    evaluator = GridEvaluator(grid)
    evaluator.run()
    print(format_table(grid, evaluator), end="")
"""

from eltab._grid import CellKind, FormulaCell, Grid, GridFormatError, load_grid, parse_grid
from eltab._render import display_value, format_table, render_rows
from eltab._utils import coord_to_label, is_reference_start, label_to_coord
from eltab.calc import CellError, GridEvaluator, Token

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CellError",
    "CellKind",
    "FormulaCell",
    "Grid",
    "GridEvaluator",
    "GridFormatError",
    "Token",
    "coord_to_label",
    "display_value",
    "format_table",
    "is_reference_start",
    "label_to_coord",
    "load_grid",
    "parse_grid",
    "render_rows",
]
