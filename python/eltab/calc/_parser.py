"""Scanning primitives for formula bodies.

A formula body is a flat chain ``operand (op operand)*`` where an operand is
either a run of decimal digits or a cell reference (one column letter
followed by a run of digits).  There are no parentheses and no whitespace.
"""

from __future__ import annotations

import enum

from eltab._utils import column_index, is_digit

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class Operator(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


_OPERATORS: dict[str, Operator] = {op.value: op for op in Operator}


def get_operator(ch: str) -> Operator | None:
    """Return the operator spelled by *ch*, or None."""
    return _OPERATORS.get(ch)


def is_operator(ch: str) -> bool:
    return ch in _OPERATORS


# ---------------------------------------------------------------------------
# Operand scanning
# ---------------------------------------------------------------------------


def read_digit_run(text: str, pos: int) -> tuple[int | None, int]:
    """Read the decimal run starting at *text[pos]*.

    Returns ``(value, end)`` where *end* is the index just past the run.
    *value* is None when no digit is found at *pos*.
    """
    end = pos
    while end < len(text) and is_digit(text[end]):
        end += 1
    if end == pos:
        return None, pos
    return int(text[pos:end]), end


def read_reference(text: str, pos: int) -> tuple[int, int | None, int]:
    """Read a reference whose column letter is at *text[pos]*.

    Returns ``(col, row, end)`` with *col* 0-based and *row* the 1-based row
    number exactly as written (None when the letter is not followed by
    digits).  Bounds are left to the caller.
    """
    col = column_index(text[pos])
    row, end = read_digit_run(text, pos + 1)
    return col, row, end
