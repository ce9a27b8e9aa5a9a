"""
Expression tree for date expressions.

Two mutually recursive sorts: integer expressions, whose leaves are
literals and calendar quantities, and boolean expressions, which embed
integer expressions through comparisons. Every node is a frozen
dataclass, so a parsed tree is immutable and compares by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class Quantity(str, Enum):
    """Calendar quantities usable as integer leaves."""

    JULIAN = "julian"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    YEAR_DAY = "yearday"
    WEEKDAY = "weekday"
    YEAR_COUNT = "yearcount"
    MONTH_COUNT = "monthcount"
    EASTER = "easter"


class Statement(str, Enum):
    """Boolean facts about a date usable as boolean leaves."""

    IS_LEAP_YEAR = "isleapyear"
    IS_WEEKEND = "isweekend"
    IS_EASTER = "iseaster"


# Integer expressions

@dataclass(frozen=True)
class IntLiteral:
    value: int


@dataclass(frozen=True)
class QuantityRef:
    quantity: Quantity


@dataclass(frozen=True)
class Negate:
    operand: IntExpr


@dataclass(frozen=True)
class Add:
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Subtract:
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Multiply:
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Divide:
    """Floor division."""
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Modulo:
    """Modulo taking the sign of the divisor."""
    left: IntExpr
    right: IntExpr


IntExpr = Union[IntLiteral, QuantityRef, Negate, Add, Subtract, Multiply, Divide, Modulo]


# Boolean expressions

@dataclass(frozen=True)
class BoolLiteral:
    value: bool


@dataclass(frozen=True)
class StatementRef:
    statement: Statement


@dataclass(frozen=True)
class Not:
    operand: BoolExpr


@dataclass(frozen=True)
class And:
    left: BoolExpr
    right: BoolExpr


@dataclass(frozen=True)
class Or:
    left: BoolExpr
    right: BoolExpr


@dataclass(frozen=True)
class Same:
    """Both sides have the same truth value."""
    left: BoolExpr
    right: BoolExpr


@dataclass(frozen=True)
class Equal:
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Greater:
    left: IntExpr
    right: IntExpr


@dataclass(frozen=True)
class Less:
    left: IntExpr
    right: IntExpr


BoolExpr = Union[BoolLiteral, StatementRef, Not, And, Or, Same, Equal, Greater, Less]

Expr = Union[IntExpr, BoolExpr]

_INT_OPERATORS = {
    Add: "+",
    Subtract: "-",
    Multiply: "*",
    Divide: "/",
    Modulo: "%",
}

_BOOL_OPERATORS = {
    And: "&&",
    Or: "||",
    Same: "==",
    Equal: "==",
    Greater: ">",
    Less: "<",
}


def render(expr: Expr) -> str:
    """
    Render an expression tree back to source text.

    Binary nodes are fully parenthesised, so for any tree the parser
    produces, parsing the result yields an equal tree. A hand-built
    negative ``IntLiteral`` comes back as a ``Negate`` of the same value.
    """
    if isinstance(expr, IntLiteral):
        return str(expr.value)
    if isinstance(expr, QuantityRef):
        return expr.quantity.value
    if isinstance(expr, Negate):
        return f"-{_render_operand(expr.operand)}"
    if isinstance(expr, BoolLiteral):
        return "true" if expr.value else "false"
    if isinstance(expr, StatementRef):
        return expr.statement.value
    if isinstance(expr, Not):
        return f"!{_render_operand(expr.operand)}"
    if isinstance(expr, (Equal, Greater, Less)):
        # Comparisons are primaries; their operands are integer expressions.
        op = _BOOL_OPERATORS[type(expr)]
        return f"({render(expr.left)} {op} {render(expr.right)})"

    op = _INT_OPERATORS.get(type(expr)) or _BOOL_OPERATORS.get(type(expr))
    if op is None:
        raise TypeError(f"Not an expression node: {expr!r}")
    return f"({render(expr.left)} {op} {render(expr.right)})"


def _render_operand(expr: Expr) -> str:
    """Render the operand of a prefix operator."""
    text = render(expr)
    if isinstance(expr, (Negate, Not)):
        return f"({text})"
    return text



def depth(expr: Expr) -> int:
    """Number of nodes on the longest root-to-leaf path, computed without recursion."""
    deepest = 0
    stack = [(expr, 1)]
    while stack:
        node, level = stack.pop()
        deepest = max(deepest, level)
        if isinstance(node, (Negate, Not)):
            stack.append((node.operand, level + 1))
        elif isinstance(node, (IntLiteral, QuantityRef, BoolLiteral, StatementRef)):
            continue
        else:
            stack.append((node.left, level + 1))
            stack.append((node.right, level + 1))
    return deepest
