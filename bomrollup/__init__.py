from .parser import BomParser
from .normalizer import BomNormalizer, BomRow
from .unit_normalizer import UnitNormalizer
from .config import HierarchyConfig, load_config
from .hierarchy import HierarchyResolver, resolve_hierarchy, compute_statistics
from .consolidate import BomConsolidator, ConsolidationReport
from .schema import STANDARD_HEADERS, COLUMN_MAPPINGS

__all__ = [
    "BomParser", "BomNormalizer", "BomRow", "UnitNormalizer",
    "HierarchyConfig", "load_config",
    "HierarchyResolver", "resolve_hierarchy", "compute_statistics",
    "BomConsolidator", "ConsolidationReport",
    "STANDARD_HEADERS", "COLUMN_MAPPINGS",
]
