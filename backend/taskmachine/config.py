"""
Engine configuration.

Settings for rule evaluation and range search, loadable from YAML.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, ConfigDict, Field


class MatchStrategy(str, Enum):
    """How many rules ``RuleEngine.matches`` reports for a day."""

    FIRST_MATCH = "first_match"
    PRIORITY = "priority"
    ALL_MATCH = "all_match"


class EngineSettings(BaseModel):
    """Settings shared by the rule engine and range searches."""

    model_config = ConfigDict(extra="forbid")

    search_window_days: int = Field(
        default=365,
        gt=0,
        description="Number of days scanned when no explicit count is given",
    )
    match_strategy: MatchStrategy = MatchStrategy.ALL_MATCH

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "EngineSettings":
        """Load settings from YAML content (top level or under ``settings``)."""
        data = load_yaml_mapping(yaml_content)
        return cls.model_validate(data.get("settings", data))

    @classmethod
    def from_file(cls, path: Path) -> "EngineSettings":
        """Load settings from a file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())


def load_yaml_mapping(yaml_content: str) -> Dict[str, Any]:
    """
    Parse YAML content that must be a mapping.

    An empty document is an empty mapping.

    Raises:
        ValueError: If the content is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ValueError(f"YAML parse error: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data
