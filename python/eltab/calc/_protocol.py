"""CalcEngine protocol and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from eltab.calc._token import CellError, Token


@dataclass(frozen=True)
class FormulaOutcome:
    """Result of evaluating one formula body: a token or an error marker."""

    token: Token | None = None
    error: CellError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_token(self) -> Token:
        """Final cache value for the formula cell."""
        if self.error is not None:
            return Token.of_error(self.error)
        if self.token is None:
            raise ValueError("Outcome carries neither a token nor an error")
        return self.token


@runtime_checkable
class CalcEngine(Protocol):
    """Protocol for grid evaluation engines."""

    def run(self) -> dict[str, str]:
        """Resolve every formula cell.

        Returns a dict of cell label -> display text for all formula cells.
        """
        ...

    def value_at(self, coord: tuple[int, int]) -> str:
        """Display text of a resolved cell."""
        ...
