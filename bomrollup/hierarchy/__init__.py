"""SYS_CPN / Ttl. Usage resolution for flattened multi-level BOMs."""

from .index import MaterialIndex, renumber_sequence
from .rules import (
    PatternError,
    ConfigError,
    PrefixMatcher,
    SpecialRule,
    SpecialRuleSet,
    PrecedenceTable,
)
from .engine import (
    MAX_DEPTH,
    Diagnostic,
    HierarchyResolver,
    resolve_hierarchy,
)
from .statistics import HierarchyStatistics, compute_statistics

__all__ = [
    # Indexing
    "MaterialIndex",
    "renumber_sequence",
    # Termination rules
    "PatternError",
    "ConfigError",
    "PrefixMatcher",
    "SpecialRule",
    "SpecialRuleSet",
    "PrecedenceTable",
    # Resolution
    "MAX_DEPTH",
    "Diagnostic",
    "HierarchyResolver",
    "resolve_hierarchy",
    # Reporting
    "HierarchyStatistics",
    "compute_statistics",
]
