"""Resolver configuration: primary pattern, special rules and tie-break precedence."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .hierarchy.engine import MAX_DEPTH
from .hierarchy.rules import ConfigError, PrecedenceTable, PrefixMatcher, SpecialRuleSet

logger = logging.getLogger(__name__)


@dataclass
class HierarchyConfig:
    """Settings for :class:`~bomrollup.hierarchy.HierarchyResolver`.

    Example JSON::

        {
            "pattern": "45|43|64|X75|X66",
            "special_rules": [{"lv": 2, "prefix": "DCS"}],
            "precedence": ["X75", "45"],
            "max_depth": 20
        }
    """
    pattern: str
    special_rules: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = None
    precedence: List[str] = field(default_factory=list)
    max_depth: int = MAX_DEPTH
    strict_pattern: bool = False

    def __post_init__(self):
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 1:
            raise ConfigError(f"max_depth must be a positive integer, got {self.max_depth!r}")
        # Validate early so a bad file fails at load time, not mid-run
        SpecialRuleSet.from_config(self.special_rules)
        PrecedenceTable.from_config(self.precedence)
        if self.strict_pattern:
            PrefixMatcher.compile(self.pattern, strict=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HierarchyConfig":
        if not isinstance(data, Mapping):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")
        if "pattern" not in data:
            raise ConfigError("Configuration is missing 'pattern'")

        known = {"pattern", "special_rules", "precedence", "max_depth", "strict_pattern"}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        return cls(
            pattern=data["pattern"],
            special_rules=data.get("special_rules"),
            precedence=list(data.get("precedence") or []),
            max_depth=data.get("max_depth", MAX_DEPTH),
            strict_pattern=bool(data.get("strict_pattern", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern": self.pattern,
            "special_rules": self.special_rules,
            "precedence": list(self.precedence),
            "max_depth": self.max_depth,
            "strict_pattern": self.strict_pattern,
        }

    def resolver_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for HierarchyResolver."""
        return {
            "pattern": self.pattern,
            "special_rules": self.special_rules,
            "precedence": self.precedence or None,
            "max_depth": self.max_depth,
            "strict_pattern": self.strict_pattern,
        }


def load_config(path: Union[str, Path]) -> HierarchyConfig:
    """Load a HierarchyConfig from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigError: If the file is not valid JSON or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}")

    config = HierarchyConfig.from_dict(data)
    logger.info(f"Loaded configuration from {path}: pattern={config.pattern!r}")
    return config
