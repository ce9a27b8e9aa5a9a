"""
Date rules.

Named boolean date expressions, loaded from YAML and evaluated together:
which rules apply on a given day, when a rule next applies, and an agenda
of matching days over a window.

Example rule file::

    settings:
      search_window_days: 90
      match_strategy: all_match
    rules:
      - id: water-plants
        when: weekday == sat || weekday == wed
      - id: pay-rent
        when: day == 1
        priority: 10
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from .config import EngineSettings, MatchStrategy, load_yaml_mapping
from .dateexpr import BoolExpr, ExpressionParser, eval_bool_or_false, find_next
from .dateexpr.search import window

logger = logging.getLogger(__name__)

_RULE_ID = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

_parser = ExpressionParser()


class DateRule(BaseModel):
    """A named boolean date expression."""

    id: str
    when: str
    priority: int = 0
    description: Optional[str] = None

    _expression: Optional[BoolExpr] = PrivateAttr(default=None)
    _expression_source: Optional[str] = PrivateAttr(default=None)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not _RULE_ID.match(v):
            raise ValueError(f"Rule id must be kebab-case: {v!r}")
        return v

    @field_validator("when")
    @classmethod
    def validate_when(cls, v: str) -> str:
        error = _parser.diagnose_bool(v)
        if error is not None:
            raise ValueError(
                f"Invalid date expression {v!r}: {error.message} "
                f"(at position {error.position})"
            )
        return v

    @property
    def expression(self) -> BoolExpr:
        """The parsed ``when`` expression, re-parsed whenever ``when`` changes."""
        if self._expression_source != self.when:
            self._expression = _parser.parse_bool(self.when)
            self._expression_source = self.when
        return self._expression

    def applies_on(self, day: date) -> bool:
        return eval_bool_or_false(self.expression, day)


class RuleSet(BaseModel):
    """Rules plus the settings they are evaluated with."""

    settings: EngineSettings = Field(default_factory=EngineSettings)
    rules: List[DateRule] = Field(default_factory=list)

    @field_validator("rules")
    @classmethod
    def validate_unique_ids(cls, v: List[DateRule]) -> List[DateRule]:
        seen = set()
        for rule in v:
            if rule.id in seen:
                raise ValueError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)
        return v

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "RuleSet":
        """Load a rule set from YAML content."""
        rule_set = cls.model_validate(load_yaml_mapping(yaml_content))
        logger.info("Loaded %d date rules", len(rule_set.rules))
        return rule_set

    @classmethod
    def from_file(cls, path: Path) -> "RuleSet":
        """Load a rule set from a file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())


@dataclass
class RuleMatch:
    """A rule that applies on a given day."""
    rule_id: str
    day: date
    priority: int = 0
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rule_id": self.rule_id,
            "day": self.day.isoformat(),
            "priority": self.priority,
            "description": self.description,
        }


class RuleEngine:
    """
    Evaluates a rule set against days.

    The match strategy decides what ``matches`` reports:
    - first_match: the first applicable rule in declaration order
    - priority: the applicable rule with the highest priority
    - all_match: every applicable rule, highest priority first
    """

    def __init__(self, rule_set: Optional[RuleSet] = None):
        """
        Initialize the rule engine.

        Args:
            rule_set: Rules and settings; an empty rule set by default.
        """
        self.rule_set = rule_set or RuleSet()
        self.settings = self.rule_set.settings
        self._rules_by_id = {rule.id: rule for rule in self.rule_set.rules}

    def get_rule(self, rule_id: str) -> DateRule:
        """
        Look up a rule by id.

        Raises:
            KeyError: If no rule has this id.
        """
        try:
            return self._rules_by_id[rule_id]
        except KeyError:
            raise KeyError(f"Unknown rule: {rule_id}") from None

    def matches(self, day: date) -> List[RuleMatch]:
        """
        Find the rules that apply on ``day``.

        Args:
            day: The day to evaluate.

        Returns:
            Matching rules according to the configured match strategy.
        """
        strategy = self.settings.match_strategy
        rules = self.rule_set.rules

        if strategy != MatchStrategy.FIRST_MATCH:
            # sorted() is stable, so equal priorities keep declaration order
            rules = sorted(rules, key=lambda r: r.priority, reverse=True)

        matched = []
        for rule in rules:
            if rule.applies_on(day):
                matched.append(RuleMatch(
                    rule_id=rule.id,
                    day=day,
                    priority=rule.priority,
                    description=rule.description,
                ))
                if strategy != MatchStrategy.ALL_MATCH:
                    break

        return matched

    def next_occurrence(
        self,
        rule_id: str,
        start: date,
        count: Optional[int] = None,
    ) -> Optional[date]:
        """
        Find the first day from ``start`` on which a rule applies.

        Args:
            rule_id: The rule to search for.
            start: First day of the window.
            count: Window length in days; defaults to ``search_window_days``.

        Returns:
            The earliest matching day, or None.
        """
        rule = self.get_rule(rule_id)
        if count is None:
            count = self.settings.search_window_days
        return find_next(start, count, rule.expression)

    def agenda(
        self,
        start: date,
        count: Optional[int] = None,
    ) -> List[Tuple[date, List[str]]]:
        """
        List the days in a window on which any rule applies.

        Returns:
            (day, rule ids) pairs in ascending day order; days without a
            match are omitted.
        """
        if count is None:
            count = self.settings.search_window_days

        entries = []
        for day in window(start, count):
            matched = self.matches(day)
            if matched:
                entries.append((day, [m.rule_id for m in matched]))

        logger.debug("Agenda from %s over %d days: %d entries", start, count, len(entries))
        return entries
