"""Cell label <-> (row, col) conversion helpers.

Columns 0-25 are labelled ``A``-``Z`` and columns 26-51 ``a``-``z``; rows are
1-based in labels and 0-based in coordinates.
"""

from __future__ import annotations

import enum

MAX_COLUMNS = 52

_UPPER_SPAN = 26

_DIGITS = frozenset("0123456789")

FORMULA_MARKER = "="
STRING_MARKER = "'"


def is_digit(ch: str) -> bool:
    return ch in _DIGITS


def is_number(text: str) -> bool:
    """True for a non-empty run of ASCII decimal digits."""
    return bool(text) and all(ch in _DIGITS for ch in text)


def is_formula(text: str) -> bool:
    return text.startswith(FORMULA_MARKER)


def is_string_literal(text: str) -> bool:
    return text.startswith(STRING_MARKER)


def column_letter(col: int) -> str:
    """Return the label letter for a 0-based column index."""
    if col < 0 or col >= MAX_COLUMNS:
        raise ValueError(f"Column index out of range: {col}")
    if col < _UPPER_SPAN:
        return chr(ord("A") + col)
    return chr(ord("a") + col - _UPPER_SPAN)


def column_index(char: str) -> int:
    """Return the 0-based column index for a label letter."""
    if len(char) == 1:
        if "A" <= char <= "Z":
            return ord(char) - ord("A")
        if "a" <= char <= "z":
            return ord(char) - ord("a") + _UPPER_SPAN
    raise ValueError(f"Invalid column letter: {char!r}")


def is_reference_start(char: str, n_cols: int) -> bool:
    """True if *char* names one of the first *n_cols* columns.

    Upper-case letters cover the first 26 columns, lower-case letters the
    next 26.  Columns past the 52nd cannot be referenced.
    """
    try:
        col = column_index(char)
    except ValueError:
        return False
    return col < min(n_cols, MAX_COLUMNS)


def coord_to_label(row: int, col: int) -> str:
    """``(1, 2)`` -> ``"C2"``."""
    if row < 0:
        raise ValueError(f"Row index out of range: {row}")
    return f"{column_letter(col)}{row + 1}"


def label_to_coord(label: str, n_rows: int, n_cols: int) -> tuple[int, int]:
    """``"C2"`` -> ``(1, 2)``, validated against the grid dimensions."""
    if len(label) < 2 or not is_reference_start(label[0], n_cols):
        raise ValueError(f"Invalid cell label: {label!r}")
    digits = label[1:]
    if not is_number(digits):
        raise ValueError(f"Invalid cell label: {label!r}")
    row = int(digits)
    if row < 1 or row > n_rows:
        raise ValueError(f"Row out of range in {label!r}: 1..{n_rows}")
    return row - 1, column_index(label[0])


class CellKind(enum.Enum):
    EMPTY = "empty"
    NUMBER = "number"
    STRING = "string"
    FORMULA = "formula"
    MALFORMED = "malformed"


def classify_raw(raw: str) -> CellKind:
    """Classify a raw cell value."""
    if not raw:
        return CellKind.EMPTY
    if is_formula(raw):
        return CellKind.FORMULA
    if is_number(raw):
        return CellKind.NUMBER
    if is_string_literal(raw):
        return CellKind.STRING
    return CellKind.MALFORMED
