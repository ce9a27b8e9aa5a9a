"""
TaskMachine: date expressions for recurring tasks.

This package parses and evaluates expressions describing calendar days
(``weekday == mon && monthcount == 1``), searches day ranges for matches,
and evaluates named date rules loaded from YAML.
"""

from .config import EngineSettings, MatchStrategy
from .rules import DateRule, RuleEngine, RuleMatch, RuleSet

__version__ = "1.0.0"
__all__ = [
    "EngineSettings",
    "MatchStrategy",
    "DateRule",
    "RuleEngine",
    "RuleMatch",
    "RuleSet",
]
