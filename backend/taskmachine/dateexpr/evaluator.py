"""
Expression Evaluator for date expressions.

Evaluates expression trees for a concrete date. Results are optional:
division or modulo by zero anywhere in an integer subexpression makes the
whole enclosing expression evaluate to None.
"""

from __future__ import annotations

import logging
import operator
from datetime import date
from typing import Callable, Dict, Optional

from . import dates
from .nodes import (
    Add,
    And,
    BoolExpr,
    BoolLiteral,
    Divide,
    Equal,
    Greater,
    IntExpr,
    IntLiteral,
    Less,
    Modulo,
    Multiply,
    Negate,
    Not,
    Or,
    Quantity,
    QuantityRef,
    Same,
    Statement,
    StatementRef,
    Subtract,
)

logger = logging.getLogger(__name__)

QUANTITIES: Dict[Quantity, Callable[[date], int]] = {
    Quantity.JULIAN: dates.modified_julian_day,
    Quantity.YEAR: lambda d: d.year,
    Quantity.MONTH: lambda d: d.month,
    Quantity.DAY: lambda d: d.day,
    Quantity.YEAR_DAY: dates.day_of_year,
    Quantity.WEEKDAY: dates.iso_weekday,
    Quantity.YEAR_COUNT: dates.year_count,
    Quantity.MONTH_COUNT: dates.month_count,
    Quantity.EASTER: dates.easter_offset,
}

STATEMENTS: Dict[Statement, Callable[[date], bool]] = {
    Statement.IS_LEAP_YEAR: lambda d: dates.is_leap_year(d.year),
    Statement.IS_WEEKEND: dates.is_weekend,
    Statement.IS_EASTER: dates.is_easter,
}

_TOTAL_INT_OPERATORS = {
    Add: operator.add,
    Subtract: operator.sub,
    Multiply: operator.mul,
}

# Python's // and % already floor and take the sign of the divisor.
_PARTIAL_INT_OPERATORS = {
    Divide: operator.floordiv,
    Modulo: operator.mod,
}

_BOOL_CONNECTIVES = {
    And: lambda a, b: a and b,
    Or: lambda a, b: a or b,
    Same: operator.eq,
}

_COMPARISONS = {
    Equal: operator.eq,
    Greater: operator.gt,
    Less: operator.lt,
}


class ExpressionEvaluator:
    """
    Evaluator for date expression trees.

    Evaluation is a pure fold over the tree. Both operands of a binary node
    are evaluated before the result is combined, and a None operand makes
    the node None.
    """

    def eval_int(self, expr: IntExpr, day: date) -> Optional[int]:
        """
        Evaluate an integer expression for a given day.

        Returns:
            The value, or None when a division or modulo by 0 occurs.
        """
        if isinstance(expr, IntLiteral):
            return expr.value

        if isinstance(expr, QuantityRef):
            return QUANTITIES[expr.quantity](day)

        if isinstance(expr, Negate):
            value = self.eval_int(expr.operand, day)
            return None if value is None else -value

        left = self.eval_int(expr.left, day)
        right = self.eval_int(expr.right, day)
        if left is None or right is None:
            return None

        op = _TOTAL_INT_OPERATORS.get(type(expr))
        if op is not None:
            return op(left, right)

        op = _PARTIAL_INT_OPERATORS.get(type(expr))
        if op is None:
            raise TypeError(f"Not an integer expression: {expr!r}")
        if right == 0:
            logger.debug("%s by zero on %s", type(expr).__name__, day)
            return None
        return op(left, right)

    def eval_bool(self, expr: BoolExpr, day: date) -> Optional[bool]:
        """
        Evaluate a boolean expression for a given day.

        Returns:
            The truth value, or None if any integer subexpression is None.
        """
        if isinstance(expr, BoolLiteral):
            return expr.value

        if isinstance(expr, StatementRef):
            return STATEMENTS[expr.statement](day)

        if isinstance(expr, Not):
            value = self.eval_bool(expr.operand, day)
            return None if value is None else not value

        op = _BOOL_CONNECTIVES.get(type(expr))
        if op is not None:
            left = self.eval_bool(expr.left, day)
            right = self.eval_bool(expr.right, day)
            if left is None or right is None:
                return None
            return op(left, right)

        op = _COMPARISONS.get(type(expr))
        if op is None:
            raise TypeError(f"Not a boolean expression: {expr!r}")
        left = self.eval_int(expr.left, day)
        right = self.eval_int(expr.right, day)
        if left is None or right is None:
            return None
        return op(left, right)

    def eval_bool_or_false(self, expr: BoolExpr, day: date) -> bool:
        """Like ``eval_bool``, but an undefined result counts as False."""
        return self.eval_bool(expr, day) is True


_evaluator = ExpressionEvaluator()


def eval_int(expr: IntExpr, day: date) -> Optional[int]:
    return _evaluator.eval_int(expr, day)


def eval_bool(expr: BoolExpr, day: date) -> Optional[bool]:
    return _evaluator.eval_bool(expr, day)


def eval_bool_or_false(expr: BoolExpr, day: date) -> bool:
    return _evaluator.eval_bool_or_false(expr, day)
