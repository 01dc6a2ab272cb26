"""Termination rules for the hierarchy walk.

Three kinds of rule decide where an upward walk stops:

- PrefixMatcher: the primary pattern, a pipe-delimited list of literal
  material prefixes (e.g. ``"45|43|64|X75|X66"``).
- SpecialRuleSet: secondary (level bound, prefixes) rules; a material with one
  of the prefixes terminates the walk only at or above the given level.
- PrecedenceTable: ordered prefix classes used to break ties when a primary
  match sits below a match of a more important class.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)

PREFIX_SEPARATOR = "|"


class PatternError(ValueError):
    """Raised for an unusable primary pattern when strict mode is on."""


class ConfigError(ValueError):
    """Raised for malformed rule configuration."""


def split_prefixes(config: Any) -> Tuple[List[str], List[str]]:
    """Split a pipe-delimited prefix string.

    Returns:
        (prefixes, problems) where problems lists why alternatives were dropped
    """
    if isinstance(config, (list, tuple)):
        parts = [str(part) for part in config]
    elif isinstance(config, str):
        parts = config.split(PREFIX_SEPARATOR)
    else:
        return [], [f"expected a string, got {type(config).__name__}"]

    prefixes = []
    problems = []
    for part in parts:
        prefix = part.strip()
        if not prefix:
            problems.append("empty alternative dropped")
            continue
        if prefix not in prefixes:
            prefixes.append(prefix)
    return prefixes, problems


def _compile_prefixes(prefixes: Iterable[str]) -> Pattern:
    alternation = "|".join(re.escape(prefix) for prefix in prefixes)
    return re.compile(f"^(?:{alternation})")


class PrefixMatcher:
    """Anchored matcher over a set of literal prefixes.

    An invalid configuration yields a matcher with ``valid == False`` that
    matches nothing, unless it was compiled with ``strict=True``.
    """

    def __init__(self, source: Any, prefixes: List[str], error: Optional[str] = None):
        self.source = source
        self.prefixes = prefixes
        self.error = error
        self._regex = _compile_prefixes(prefixes) if prefixes and error is None else None

    @classmethod
    def compile(cls, config: Any, strict: bool = False) -> "PrefixMatcher":
        """Compile a pipe-delimited prefix configuration.

        Args:
            config: e.g. ``"45|43|X75"``
            strict: raise PatternError instead of degrading to match-nothing

        Returns:
            PrefixMatcher
        """
        prefixes, problems = split_prefixes(config)
        error = None
        if not prefixes:
            error = "; ".join(problems) or "no prefixes given"
        elif problems:
            logger.warning(f"Pattern {config!r}: {'; '.join(problems)}")

        if error is not None:
            if strict:
                raise PatternError(f"Invalid pattern {config!r}: {error}")
            logger.error(f"Invalid pattern {config!r}: {error}; matching nothing")
            return cls(config, [], error)

        return cls(config, prefixes)

    @property
    def valid(self) -> bool:
        return self.error is None

    def matches(self, material: Any) -> bool:
        if self._regex is None or material is None:
            return False
        material_str = str(material)
        if not material_str:
            return False
        return self._regex.match(material_str) is not None

    def __repr__(self) -> str:
        return f"PrefixMatcher({PREFIX_SEPARATOR.join(self.prefixes)!r}, valid={self.valid})"


@dataclass(frozen=True)
class SpecialRule:
    """Terminate at a material with one of ``prefixes`` when level <= level_bound."""
    level_bound: int
    prefixes: Tuple[str, ...]

    @classmethod
    def from_config(cls, config: Any) -> "SpecialRule":
        """Build a rule from ``{"lv": 2, "prefix": "DCS"}`` or an equivalent mapping."""
        if isinstance(config, SpecialRule):
            return config
        if not isinstance(config, Mapping):
            raise ConfigError(f"Special rule must be a mapping, got {type(config).__name__}")

        bound = None
        for key in ("lv", "level", "level_bound", "levelBound"):
            if key in config:
                bound = config[key]
                break
        prefix_config = None
        for key in ("prefix", "prefixes"):
            if key in config:
                prefix_config = config[key]
                break

        if bound is None or isinstance(bound, bool):
            raise ConfigError(f"Special rule {dict(config)!r} has no level bound")
        try:
            level_bound = int(bound)
        except (TypeError, ValueError):
            raise ConfigError(f"Special rule level bound {bound!r} is not an integer")

        prefixes, _ = split_prefixes(prefix_config)
        if not prefixes:
            raise ConfigError(f"Special rule {dict(config)!r} has no prefixes")

        return cls(level_bound, tuple(prefixes))

    def matches(self, level: int, material: Any) -> bool:
        material_str = str(material or "").strip()
        if not any(material_str.startswith(prefix) for prefix in self.prefixes):
            return False
        return level <= self.level_bound

    def describe(self) -> str:
        return f"LV <= {self.level_bound} and prefix in {PREFIX_SEPARATOR.join(self.prefixes)!r}"


class SpecialRuleSet:
    """Ordered special rules; a pair matches if any rule matches."""

    def __init__(self, rules: Optional[List[SpecialRule]] = None):
        self.rules = list(rules or [])

    @classmethod
    def from_config(cls, config: Any) -> "SpecialRuleSet":
        """Accepts None, a single rule, or a list of rules."""
        if config is None:
            return cls()
        if isinstance(config, SpecialRuleSet):
            return config
        if isinstance(config, (SpecialRule, Mapping)):
            return cls([SpecialRule.from_config(config)])
        if isinstance(config, (list, tuple)):
            return cls([SpecialRule.from_config(rule) for rule in config])
        raise ConfigError(f"Unsupported special rule configuration: {config!r}")

    def __len__(self) -> int:
        return len(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)

    def __iter__(self):
        return iter(self.rules)

    def matches(self, level: int, material: Any) -> bool:
        return any(rule.matches(level, material) for rule in self.rules)


class PrecedenceTable:
    """Ordered prefix classes, lowest priority first.

    With classes ``["X75", "45"]`` a primary match on an ``X75`` material is
    superseded by a ``45`` material anywhere above it in the same chain.
    """

    def __init__(self, classes: Optional[List[PrefixMatcher]] = None):
        self.classes = list(classes or [])

    @classmethod
    def from_config(cls, config: Any) -> "PrecedenceTable":
        if config is None:
            return cls()
        if isinstance(config, PrecedenceTable):
            return config
        if not isinstance(config, (list, tuple)):
            raise ConfigError(f"Precedence must be a list of prefix classes, got {config!r}")

        classes = []
        for entry in config:
            matcher = entry if isinstance(entry, PrefixMatcher) else PrefixMatcher.compile(entry)
            if not matcher.valid:
                raise ConfigError(f"Invalid precedence class {entry!r}: {matcher.error}")
            classes.append(matcher)
        return cls(classes)

    def __len__(self) -> int:
        return len(self.classes)

    def rank(self, material: Any) -> Optional[int]:
        """Highest class index the material belongs to, or None."""
        found = None
        for index, matcher in enumerate(self.classes):
            if matcher.matches(material):
                found = index
        return found

    def can_be_superseded(self, rank: Optional[int]) -> bool:
        return rank is not None and rank < len(self.classes) - 1
