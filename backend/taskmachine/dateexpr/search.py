"""
Range search over consecutive days.

Scans the window ``start, start + 1, ..., start + count - 1`` in order and
reports the days for which a boolean expression holds. Undefined results
(division by zero) count as not matching.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator, List, Optional

from .evaluator import eval_bool_or_false
from .nodes import BoolExpr


def window(start: date, count: int) -> Iterator[date]:
    """
    Yield the days of the window in ascending order.

    The window is cut short at ``date.max``; nothing is yielded when
    ``count <= 0``.
    """
    day = start
    for i in range(count):
        if i:
            if day == date.max:
                return
            day += timedelta(days=1)
        yield day


def find_next(start: date, count: int, expr: BoolExpr) -> Optional[date]:
    """
    Find the first day in the window where ``expr`` is true.

    Returns:
        The earliest matching day, or None if no day matches.
    """
    for day in window(start, count):
        if eval_bool_or_false(expr, day):
            return day
    return None


def find_within(start: date, count: int, expr: BoolExpr) -> List[date]:
    """Return every day in the window where ``expr`` is true, ascending."""
    return [day for day in window(start, count) if eval_bool_or_false(expr, day)]
