"""Resolved cell values and error markers."""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# CellError: error marker values shown in place of a failed cell
# ---------------------------------------------------------------------------


class CellError:
    """Error marker written into a cell whose formula cannot be resolved.

    Use ``CellError.of(code)`` to get a cached singleton for each marker.
    Markers compare equal to their display text (``CellError.CROSS_REF ==
    "#E_CROSS_REF"``).
    """

    __slots__ = ("code",)
    _cache: dict[str, CellError] = {}

    UNEXP_SYMBOL: CellError
    UNEXP_SYMB: CellError
    UNEXP_EXPR: CellError
    INVALID_REF: CellError
    WRONG_REF: CellError
    CROSS_REF: CellError
    INFINITE: CellError
    UNKNOWN_OP: CellError
    UNKNOWN: CellError

    def __init__(self, code: str) -> None:
        self.code = code

    @classmethod
    def of(cls, code: str) -> CellError:
        if code not in cls._cache:
            cls._cache[code] = cls(code)
        return cls._cache[code]

    def __repr__(self) -> str:
        return f"CellError({self.code!r})"

    def __str__(self) -> str:
        return self.code

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CellError):
            return self.code == other.code
        if isinstance(other, str):
            return self.code == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.code)


# Singletons
CellError.UNEXP_SYMBOL = CellError.of("#E_UNEXP_SYMBOL")  # misplaced operator
CellError.UNEXP_SYMB = CellError.of("#E_UNEXP_SYMB")  # character outside the grammar
CellError.UNEXP_EXPR = CellError.of("#E_UNEXP_EXPR")  # non-numeric operand
CellError.INVALID_REF = CellError.of("#E_INVALID_REF")
CellError.WRONG_REF = CellError.of("#E_WRONG_REF")
CellError.CROSS_REF = CellError.of("#E_CROSS_REF")
CellError.INFINITE = CellError.of("#E_INFINITE")
CellError.UNKNOWN_OP = CellError.of("#E_UNKNOWN_OP")
CellError.UNKNOWN = CellError.of("#E_UNKNOWN")  # set by the loader, never by the evaluator


class EvaluationError(Exception):
    """A formula failed for a reason attributable to the cell contents."""

    def __init__(self, error: CellError, detail: str = "") -> None:
        super().__init__(detail or error.code)
        self.error = error


# ---------------------------------------------------------------------------
# Token: result of resolving a cell
# ---------------------------------------------------------------------------


class TokenKind(enum.Enum):
    NUMBER = "number"
    STRING = "string"
    PENDING = "pending"


@dataclass(frozen=True)
class Token:
    """Tagged result of resolving a cell.

    ``PENDING`` only ever lives in the resolution cache while the cell is
    being resolved; it is never a final value.
    """

    kind: TokenKind
    number: int = 0
    text: str = ""

    @classmethod
    def of_number(cls, value: int) -> Token:
        return cls(TokenKind.NUMBER, number=value)

    @classmethod
    def of_string(cls, value: str) -> Token:
        return cls(TokenKind.STRING, text=value)

    @classmethod
    def of_error(cls, error: CellError) -> Token:
        return cls(TokenKind.STRING, text=error.code)

    @property
    def is_pending(self) -> bool:
        return self.kind is TokenKind.PENDING

    @property
    def is_number(self) -> bool:
        return self.kind is TokenKind.NUMBER

    def display(self) -> str:
        """Text shown for this token in the printed table."""
        if self.kind is TokenKind.NUMBER:
            return str(self.number)
        if self.kind is TokenKind.STRING:
            return self.text
        raise ValueError(f"{self.kind.name.title()} token has no display value")


PENDING = Token(TokenKind.PENDING)
EMPTY = Token.of_string("")
