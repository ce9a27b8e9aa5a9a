"""
Tokenizer for date expressions.

Splits source text into numbers, keywords, operators and parentheses.
Whitespace between tokens is optional and discarded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .nodes import Quantity, Statement


class ExpressionSyntaxError(ValueError):
    """Raised when source text is not a valid expression."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (at position {position})")
        self.message = message
        self.position = position


# Token kinds
NUMBER = "number"
KEYWORD = "keyword"
OPERATOR = "operator"
LPAREN = "lparen"
RPAREN = "rparen"
END = "end"


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


WEEKDAY_NAMES: Dict[str, int] = {
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
    "sunday": 7, "sun": 7,
}

BOOL_LITERALS: Dict[str, bool] = {"true": True, "false": False}

# Matched first to last at every position, longest first. A keyword must
# come before any keyword that is a prefix of it ("monthcount" before
# "month" before "mon", "yearday" before "year"), otherwise the longer one
# could never be recognised.
KEYWORDS: Tuple[str, ...] = (
    "isleapyear", "monthcount",
    "wednesday", "isweekend", "yearcount",
    "thursday", "saturday", "iseaster",
    "tuesday", "weekday", "yearday",
    "monday", "friday", "sunday", "julian", "easter",
    "month", "false",
    "year", "true",
    "mon", "tue", "wed", "thu", "fri", "sat", "sun", "day",
)

# Same rule for operators: two-character symbols before their one-character
# prefixes.
OPERATORS: Tuple[str, ...] = (
    "&&", "||", "==", "!=", ">=", "<=",
    "+", "-", "*", "/", "%", "!", ">", "<",
)

QUANTITY_KEYWORDS: Dict[str, Quantity] = {q.value: q for q in Quantity}
STATEMENT_KEYWORDS: Dict[str, Statement] = {s.value: s for s in Statement}


def tokenize(text: str) -> List[Token]:
    """
    Split ``text`` into tokens, ending with an ``END`` token.

    Raises:
        ExpressionSyntaxError: On a character that starts no token.
    """
    tokens: List[Token] = []
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if char.isspace():
            i += 1
            continue

        if char == "(":
            tokens.append(Token(LPAREN, char, i))
            i += 1
            continue
        if char == ")":
            tokens.append(Token(RPAREN, char, i))
            i += 1
            continue

        if "0" <= char <= "9":
            start = i
            while i < length and "0" <= text[i] <= "9":
                i += 1
            tokens.append(Token(NUMBER, text[start:i], start))
            continue

        match = _match_prefix(text, i, KEYWORDS) or _match_prefix(text, i, OPERATORS)
        if match is None:
            raise ExpressionSyntaxError(f"Unexpected character {char!r}", i)

        kind = KEYWORD if match in KEYWORDS else OPERATOR
        tokens.append(Token(kind, match, i))
        i += len(match)

    tokens.append(Token(END, "", length))
    return tokens


def _match_prefix(text: str, position: int, candidates: Tuple[str, ...]):
    """Return the first candidate found at ``position``, if any."""
    for candidate in candidates:
        if text.startswith(candidate, position):
            return candidate
    return None
