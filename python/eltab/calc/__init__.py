"""eltab.calc - Formula evaluation engine for eltab grids."""

from eltab.calc._evaluator import EvaluatorStateError, GridEvaluator, apply
from eltab.calc._parser import Operator, get_operator, is_operator
from eltab.calc._protocol import CalcEngine, FormulaOutcome
from eltab.calc._token import CellError, EvaluationError, Token, TokenKind

__all__ = [
    "CalcEngine",
    "CellError",
    "EvaluationError",
    "EvaluatorStateError",
    "FormulaOutcome",
    "GridEvaluator",
    "Operator",
    "Token",
    "TokenKind",
    "apply",
    "get_operator",
    "is_operator",
]
