"""
Date expression engine.

Parses and evaluates expressions describing properties of calendar days,
and scans day ranges for matches.
"""

from .lexer import ExpressionSyntaxError
from .nodes import BoolExpr, IntExpr, Quantity, Statement, render
from .parser import ExpressionParser, ParseError, parse_bool, parse_int
from .evaluator import ExpressionEvaluator, eval_bool, eval_bool_or_false, eval_int
from .search import find_next, find_within

__all__ = [
    # Tree
    "BoolExpr",
    "IntExpr",
    "Quantity",
    "Statement",
    "render",
    # Parsing
    "ExpressionParser",
    "ExpressionSyntaxError",
    "ParseError",
    "parse_bool",
    "parse_int",
    # Evaluation
    "ExpressionEvaluator",
    "eval_bool",
    "eval_bool_or_false",
    "eval_int",
    # Range search
    "find_next",
    "find_within",
]
