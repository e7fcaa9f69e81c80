"""GridEvaluator: lazy, memoized evaluator for flat grid formulas.

Formulas are chains of integer literals and cell references joined by
``+ - * /``.  There is no precedence and no parenthesization: the chain is
reduced strictly left to right, so ``=2+3*2`` is ``10``.  Every intermediate
result is truncated toward zero.

Resolving a reference may require evaluating another formula, which may in
turn reference further cells.  Instead of recursing, the evaluator keeps an
explicit stack of partially scanned formulas (:class:`_Frame`): a reference
to an unresolved formula cell suspends the current frame and pushes one for
the referenced cell, and the finished value is handed back to the frame
below.  Each cell is marked ``PENDING`` in the resolution cache while it is
being resolved; meeting that marker again means the reference chain loops
back on itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from eltab._utils import (
    FORMULA_MARKER,
    STRING_MARKER,
    CellKind,
    coord_to_label,
    is_digit,
    is_reference_start,
)
from eltab.calc._parser import Operator, get_operator, read_digit_run, read_reference
from eltab.calc._protocol import FormulaOutcome
from eltab.calc._token import EMPTY, PENDING, CellError, EvaluationError, Token

if TYPE_CHECKING:
    from eltab._grid import Grid

logger = logging.getLogger(__name__)


class EvaluatorStateError(RuntimeError):
    """The resolution cache is in a state the evaluator never produces."""


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _divide(a: int, b: int) -> int:
    # The quotient is non-finite (x/0 -> inf, 0/0 -> nan) exactly when the
    # IEEE quotient of the operand signs is; the magnitude is exact.
    with np.errstate(divide="ignore", invalid="ignore"):
        direction = np.float64(_sign(a)) / np.float64(_sign(b))
    if not np.isfinite(direction):
        raise EvaluationError(CellError.INFINITE, f"{a}/{b}")
    quotient = abs(a) // abs(b)
    return quotient if direction >= 0 else -quotient


def apply(left: Token, right: Token, op: Operator) -> Token:
    """Apply *op* to two numeric tokens, truncating the result toward zero."""
    if not left.is_number or not right.is_number:
        raise EvaluationError(CellError.UNEXP_EXPR)

    a, b = left.number, right.number
    if op is Operator.ADD:
        result = a + b
    elif op is Operator.SUB:
        result = a - b
    elif op is Operator.MUL:
        result = a * b
    elif op is Operator.DIV:
        result = _divide(a, b)
    else:
        raise EvaluationError(CellError.UNKNOWN_OP, str(op))
    return Token.of_number(result)


@dataclass
class _Frame:
    """A formula body being scanned.

    ``label`` is the formula cell the body belongs to, or None for a bare
    expression.  Scanning resumes at ``pos`` with the operand stack and the
    pending operator left as they were when the frame was suspended.
    """

    label: str | None
    text: str
    pos: int = 0
    operands: list[Token] = field(default_factory=list)
    pending_op: Operator | None = None

    def push(self, operand: Token) -> None:
        """Push an operand, reducing at once if an operator is waiting."""
        self.operands.append(operand)
        if self.pending_op is not None:
            right = self.operands.pop()
            left = self.operands.pop()
            self.operands.append(apply(left, right, self.pending_op))
            self.pending_op = None

    def result(self) -> Token:
        if self.pending_op is not None:
            raise EvaluationError(CellError.UNEXP_SYMBOL, "trailing operator")
        if not self.operands:
            return EMPTY
        return self.operands[0]


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


class GridEvaluator:
    """Resolves every formula cell of a :class:`~eltab.Grid`.

    Usage::

        evaluator = GridEvaluator(grid)
        results = evaluator.run()
        text = evaluator.value_at((0, 1))
    """

    def __init__(self, grid: Grid) -> None:
        self._grid = grid
        # label -> resolved token, PENDING while resolution is in progress
        self._cache: dict[str, Token] = {}

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def cache(self) -> dict[str, Token]:
        """Read-only view of the resolution cache (do not mutate)."""
        return self._cache

    def run(self) -> dict[str, str]:
        """Resolve all formula cells in declaration order.

        Never raises: a failing formula leaves an error marker (or, for an
        internal fault, an empty value) in its own cell only.

        Returns dict of label -> display text for formula cells.
        """
        for formula in self._grid.formulas:
            label = coord_to_label(*formula.coord)
            if label in self._cache:
                continue

            self._cache[label] = PENDING
            token = EMPTY
            try:
                token = self.evaluate_formula(formula.body).to_token()
            except Exception:
                logger.exception("Internal error while evaluating %s", label)
                self._drop_stale_pending()
            self._cache[label] = token

        return {
            coord_to_label(*f.coord): self.value_at(f.coord)
            for f in self._grid.formulas
        }

    def token_at(self, coord: tuple[int, int]) -> Token:
        """Resolved token of a visited cell; KeyError if never resolved."""
        return self._cache[coord_to_label(*coord)]

    def value_at(self, coord: tuple[int, int]) -> str:
        """Display text of a formula cell after :meth:`run`."""
        token = self.token_at(coord)
        if token.is_pending:
            raise EvaluatorStateError(f"{coord_to_label(*coord)} is still pending")
        return token.display()

    # ------------------------------------------------------------------
    # Formula evaluation
    # ------------------------------------------------------------------

    def evaluate_formula(self, body: str) -> FormulaOutcome:
        """Evaluate a formula body, turning domain errors into an outcome."""
        try:
            return FormulaOutcome(token=self.evaluate_expression(body))
        except EvaluationError as e:
            logger.debug("Formula %r failed: %s", body, e.error)
            return FormulaOutcome(error=e.error)

    def evaluate_expression(self, text: str) -> Token:
        """Scan *text* left to right, reducing each ``operand op operand``.

        Raises :class:`EvaluationError` on malformed input.
        """
        return self._evaluate(self._new_frame(None, text))

    def _evaluate(self, root: _Frame) -> Token:
        """Run *root* and every formula frame it spawns to completion.

        A frame belonging to a formula cell that fails gets the error marker
        as its value; only an unlabelled root lets the error propagate.
        """
        stack = [root]
        delivered: Token | None = None

        while True:
            frame = stack[-1]
            try:
                if delivered is not None:
                    operand, delivered = delivered, None
                    frame.push(operand)
                child = self._advance(frame)
                if child is not None:
                    stack.append(child)
                    continue
                token = frame.result()
            except EvaluationError as e:
                if frame.label is None:
                    raise
                logger.debug("Formula %s failed: %s", frame.label, e.error)
                token = Token.of_error(e.error)

            stack.pop()
            if frame.label is not None:
                self._cache[frame.label] = token
            if not stack:
                return token
            delivered = token

    def _advance(self, frame: _Frame) -> _Frame | None:
        """Scan *frame* to its end, or until a referenced formula needs a frame.

        Returns the frame for that referenced formula, or None when *frame*
        has been scanned completely.
        """
        text = frame.text
        n_cols = self._grid.n_cols

        while frame.pos < len(text):
            ch = text[frame.pos]
            op = get_operator(ch)

            if op is not None:
                if frame.pending_op is not None or not frame.operands:
                    raise EvaluationError(CellError.UNEXP_SYMBOL, f"{ch!r} at {frame.pos}")
                frame.pending_op = op
                frame.pos += 1
                continue

            is_literal = is_digit(ch)
            if not is_literal and not is_reference_start(ch, n_cols):
                raise EvaluationError(CellError.UNEXP_SYMB, f"{ch!r} at {frame.pos}")
            if frame.operands and frame.pending_op is None:
                # two operands in a row
                raise EvaluationError(CellError.UNEXP_SYMBOL, f"{ch!r} at {frame.pos}")

            if is_literal:
                value, frame.pos = read_digit_run(text, frame.pos)
                frame.push(Token.of_number(value))
                continue

            col, row, frame.pos = read_reference(text, frame.pos)
            if row is None or row < 1 or row > self._grid.n_rows:
                raise EvaluationError(CellError.INVALID_REF, text)
            operand = self._reference_operand((row - 1, col))
            if isinstance(operand, _Frame):
                return operand
            frame.push(operand)

        return None

    def _new_frame(self, label: str | None, text: str) -> _Frame:
        return _Frame(label, text)

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------

    def resolve_reference(self, coord: tuple[int, int]) -> Token:
        """Resolve the cell at *coord*, memoizing the result.

        Raises :class:`EvaluationError` with ``#E_CROSS_REF`` when the cell
        is already being resolved, and ``#E_WRONG_REF`` when its raw value is
        not a valid cell value.
        """
        operand = self._reference_operand(coord)
        if isinstance(operand, _Frame):
            return self._evaluate(operand)
        return operand

    def _reference_operand(self, coord: tuple[int, int]) -> Token | _Frame:
        """Cached or literal token for *coord*, or a new frame for its formula."""
        label = coord_to_label(*coord)
        cached = self._cache.get(label)
        if cached is not None:
            if cached.is_pending:
                raise EvaluationError(CellError.CROSS_REF, label)
            return cached

        raw = self._grid.raw(coord)
        kind = self._grid.kind(coord)
        if kind is CellKind.FORMULA:
            self._mark_pending(label)
            logger.debug("Resolving %s = %r", label, raw)
            return self._new_frame(label, raw[len(FORMULA_MARKER):])
        if kind is CellKind.NUMBER:
            token = Token.of_number(int(raw))
        elif kind is CellKind.STRING:
            token = Token.of_string(raw[len(STRING_MARKER):])
        elif kind is CellKind.EMPTY:
            token = EMPTY
        elif kind is CellKind.MALFORMED:
            raise EvaluationError(CellError.WRONG_REF, label)
        else:
            raise EvaluatorStateError(f"Unhandled cell kind: {kind}")

        self._mark_pending(label)
        self._cache[label] = token
        return token

    def _drop_stale_pending(self) -> None:
        # Between formulas nothing is in progress, so any PENDING entry was
        # abandoned by an aborted resolution.
        for label, token in self._cache.items():
            if token.is_pending:
                logger.warning("Abandoned resolution of %s", label)
                self._cache[label] = EMPTY

    def _mark_pending(self, label: str) -> None:
        if label in self._cache:
            raise EvaluatorStateError(f"{label} resolved twice")
        self._cache[label] = PENDING
