"""
Expression Parser for date expressions.

Parses source text such as::

    "isweekend"
    "weekday == mon && monthcount == 1"
    "(julian - 3) % 14 == 0 || easter == 1"

into boolean or integer expression trees. Binary operators are resolved
by precedence climbing over the operator tables below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .lexer import (
    BOOL_LITERALS,
    END,
    KEYWORD,
    LPAREN,
    NUMBER,
    OPERATOR,
    QUANTITY_KEYWORDS,
    RPAREN,
    STATEMENT_KEYWORDS,
    WEEKDAY_NAMES,
    ExpressionSyntaxError,
    Token,
    tokenize,
)
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
    QuantityRef,
    Same,
    StatementRef,
    Subtract,
    depth,
)

logger = logging.getLogger(__name__)

LEFT = "left"

# Deepest tree handed out. Evaluation and rendering recurse once per level,
# and long operator chains such as "1 + 1 + ... + 1" nest one level per term.
MAX_DEPTH = 128


@dataclass
class ParseError:
    """Represents a parsing error."""
    message: str
    position: int
    expression: str


@dataclass(frozen=True)
class BinaryOperator:
    """An infix operator: higher precedence binds tighter."""
    symbol: str
    precedence: int
    associativity: str
    build: Callable


def _different(a: BoolExpr, b: BoolExpr) -> BoolExpr:
    return Not(Same(a, b))


INT_BINARY_OPERATORS: Dict[str, BinaryOperator] = {
    op.symbol: op for op in (
        BinaryOperator("+", 1, LEFT, Add),
        BinaryOperator("-", 1, LEFT, Subtract),
        BinaryOperator("*", 2, LEFT, Multiply),
        BinaryOperator("/", 2, LEFT, Divide),
        BinaryOperator("%", 2, LEFT, Modulo),
    )
}

BOOL_BINARY_OPERATORS: Dict[str, BinaryOperator] = {
    op.symbol: op for op in (
        BinaryOperator("==", 1, LEFT, Same),
        BinaryOperator("!=", 1, LEFT, _different),
        BinaryOperator("&&", 2, LEFT, And),
        BinaryOperator("||", 2, LEFT, Or),
    )
}

# Prefix operators bind tighter than any binary operator and apply at most
# once per operand.
INT_PREFIX_OPERATORS: Dict[str, Callable[[IntExpr], IntExpr]] = {
    "+": lambda operand: operand,
    "-": Negate,
}

BOOL_PREFIX_OPERATORS: Dict[str, Callable[[BoolExpr], BoolExpr]] = {
    "!": Not,
}

RELATIONS: Dict[str, Callable[[IntExpr, IntExpr], BoolExpr]] = {
    "==": Equal,
    "!=": lambda a, b: Not(Equal(a, b)),
    ">=": lambda a, b: Not(Less(a, b)),
    "<=": lambda a, b: Not(Greater(a, b)),
    ">": Greater,
    "<": Less,
}


class _TokenStream:
    """Cursor over a token list; the position can be saved and restored."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.position = 0

    def peek(self) -> Token:
        return self.tokens[self.position]

    def advance(self) -> Token:
        token = self.tokens[self.position]
        if token.kind != END:
            self.position += 1
        return token

    def expect(self, kind: str, description: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            raise _unexpected(token, description)
        return self.advance()


def _unexpected(token: Token, expected: str) -> ExpressionSyntaxError:
    found = "end of input" if token.kind == END else repr(token.text)
    return ExpressionSyntaxError(f"Expected {expected}, found {found}", token.position)


class ExpressionParser:
    """
    Parser for boolean and integer date expressions.

    The ``parse_*`` methods never raise: text that does not fully match the
    grammar yields ``None``. Use ``diagnose_*`` or ``validate`` to find out
    why.
    """

    def parse_bool(self, text: str) -> Optional[BoolExpr]:
        """Parse a boolean expression, or return None."""
        try:
            return self._parse(text, self._bool_expr)
        except ExpressionSyntaxError as e:
            logger.debug("Rejected boolean expression %r: %s", text, e)
            return None

    def parse_int(self, text: str) -> Optional[IntExpr]:
        """Parse an integer expression, or return None."""
        try:
            return self._parse(text, self._int_expr)
        except ExpressionSyntaxError as e:
            logger.debug("Rejected integer expression %r: %s", text, e)
            return None

    def diagnose_bool(self, text: str) -> Optional[ParseError]:
        """Explain why ``text`` is not a boolean expression (None if it is)."""
        return self._diagnose(text, self._bool_expr)

    def diagnose_int(self, text: str) -> Optional[ParseError]:
        """Explain why ``text`` is not an integer expression (None if it is)."""
        return self._diagnose(text, self._int_expr)

    def validate(self, text: str, kind: str = "bool") -> Tuple[bool, Optional[str]]:
        """
        Validate an expression.

        Args:
            text: Source text.
            kind: "bool" or "int".

        Returns:
            Tuple of (is_valid, error_message).
        """
        if kind == "bool":
            error = self.diagnose_bool(text)
        elif kind == "int":
            error = self.diagnose_int(text)
        else:
            raise ValueError(f"Unknown expression kind: {kind}")

        if error is None:
            return True, None
        return False, f"{error.message} (at position {error.position})"

    def _diagnose(self, text: str, rule) -> Optional[ParseError]:
        try:
            self._parse(text, rule)
        except ExpressionSyntaxError as e:
            return ParseError(message=e.message, position=e.position, expression=text)
        return None

    def _parse(self, text: str, rule):
        if not isinstance(text, str):
            raise ExpressionSyntaxError(f"Expected string expression, got {type(text).__name__}", 0)

        stream = _TokenStream(tokenize(text))
        try:
            result = rule(stream)
        except RecursionError:
            raise ExpressionSyntaxError("Expression is nested too deeply", stream.peek().position) from None
        stream.expect(END, "end of input")
        if depth(result) > MAX_DEPTH:
            raise ExpressionSyntaxError(
                f"Expression is nested too deeply (more than {MAX_DEPTH} levels)", 0
            )
        return result

    # Precedence climbing

    def _climb(
        self,
        stream: _TokenStream,
        operand: Callable[[_TokenStream], object],
        table: Dict[str, BinaryOperator],
        min_precedence: int = 1,
    ):
        left = operand(stream)

        while True:
            token = stream.peek()
            op = table.get(token.text) if token.kind == OPERATOR else None
            if op is None or op.precedence < min_precedence:
                return left

            stream.advance()
            next_min = op.precedence + 1 if op.associativity == LEFT else op.precedence
            right = self._climb(stream, operand, table, next_min)
            left = op.build(left, right)

    # Integer expressions

    def _int_expr(self, stream: _TokenStream) -> IntExpr:
        return self._climb(stream, self._int_unary, INT_BINARY_OPERATORS)

    def _int_unary(self, stream: _TokenStream) -> IntExpr:
        token = stream.peek()
        if token.kind == OPERATOR and token.text in INT_PREFIX_OPERATORS:
            stream.advance()
            return INT_PREFIX_OPERATORS[token.text](self._int_primary(stream))
        return self._int_primary(stream)

    def _int_primary(self, stream: _TokenStream) -> IntExpr:
        token = stream.peek()

        if token.kind == LPAREN:
            stream.advance()
            inner = self._int_expr(stream)
            stream.expect(RPAREN, "')'")
            return inner

        if token.kind == NUMBER:
            stream.advance()
            return IntLiteral(int(token.text))

        if token.kind == KEYWORD:
            if token.text in QUANTITY_KEYWORDS:
                stream.advance()
                return QuantityRef(QUANTITY_KEYWORDS[token.text])
            if token.text in WEEKDAY_NAMES:
                stream.advance()
                return IntLiteral(WEEKDAY_NAMES[token.text])

        raise _unexpected(token, "integer expression")

    # Boolean expressions

    def _bool_expr(self, stream: _TokenStream) -> BoolExpr:
        return self._climb(stream, self._bool_unary, BOOL_BINARY_OPERATORS)

    def _bool_unary(self, stream: _TokenStream) -> BoolExpr:
        token = stream.peek()
        if token.kind == OPERATOR and token.text in BOOL_PREFIX_OPERATORS:
            stream.advance()
            return BOOL_PREFIX_OPERATORS[token.text](self._bool_primary(stream))
        return self._bool_primary(stream)

    def _bool_primary(self, stream: _TokenStream) -> BoolExpr:
        token = stream.peek()

        if token.kind == LPAREN:
            # "(" opens either a boolean group or the left operand of a
            # comparison, e.g. "(day + 1) % 2 == 0". A failed group is parsed
            # again as an integer operand, so n nested parentheses cost O(n^2).
            mark = stream.position
            try:
                stream.advance()
                inner = self._bool_expr(stream)
                stream.expect(RPAREN, "')'")
                return inner
            except ExpressionSyntaxError:
                stream.position = mark

        if token.kind == KEYWORD:
            if token.text in BOOL_LITERALS:
                stream.advance()
                return BoolLiteral(BOOL_LITERALS[token.text])
            if token.text in STATEMENT_KEYWORDS:
                stream.advance()
                return StatementRef(STATEMENT_KEYWORDS[token.text])

        return self._relation(stream)

    def _relation(self, stream: _TokenStream) -> BoolExpr:
        left = self._int_expr(stream)
        token = stream.peek()
        if token.kind != OPERATOR or token.text not in RELATIONS:
            raise _unexpected(token, "integer comparison")
        stream.advance()
        right = self._int_expr(stream)
        return RELATIONS[token.text](left, right)


_parser = ExpressionParser()


def parse_bool(text: str) -> Optional[BoolExpr]:
    """Parse a boolean expression; None if ``text`` is not one."""
    return _parser.parse_bool(text)


def parse_int(text: str) -> Optional[IntExpr]:
    """Parse an integer expression; None if ``text`` is not one."""
    return _parser.parse_int(text)
