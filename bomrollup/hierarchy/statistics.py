"""Summary statistics over a resolved BOM table."""

import math
import statistics
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence

from ..normalizer import BomRow


@dataclass
class HierarchyStatistics:
    total_rows: int = 0
    changed: int = 0
    changed_percent: float = 0.0
    unchanged: int = 0
    unchanged_percent: float = 0.0
    usage_mean: float = 0.0
    usage_min: float = 0.0
    usage_max: float = 0.0
    usage_std: float = 0.0
    diagnostics: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Rounded view for display: percentages to 1 decimal, usage to 4."""
        data = asdict(self)
        for key in ("changed_percent", "unchanged_percent"):
            data[key] = round(data[key], 1)
        for key in ("usage_mean", "usage_min", "usage_max", "usage_std"):
            data[key] = round(data[key], 4)
        return data


def _usage_values(rows: Sequence[BomRow]) -> List[float]:
    values = []
    for row in rows:
        value = row.total_usage
        if value is None:
            value = 0.0
        try:
            value = float(value)
        except (TypeError, ValueError):
            continue
        if not math.isnan(value):
            values.append(value)
    return values


def compute_statistics(rows: Sequence[BomRow], diagnostics: Optional[Sequence[Any]] = None) -> HierarchyStatistics:
    """Count rolled-up rows and describe the Ttl. Usage distribution.

    Args:
        rows: resolved rows
        diagnostics: resolver diagnostics, counted into the result

    Returns:
        HierarchyStatistics; all zeros for an empty table
    """
    result = HierarchyStatistics(diagnostics=len(diagnostics or ()))
    total = len(rows)
    if total == 0:
        return result

    changed = sum(1 for row in rows if row.material != row.sys_component)
    result.total_rows = total
    result.changed = changed
    result.changed_percent = changed / total * 100
    result.unchanged = total - changed
    result.unchanged_percent = (total - changed) / total * 100

    usages = _usage_values(rows)
    if usages:
        result.usage_mean = statistics.mean(usages)
        result.usage_min = min(usages)
        result.usage_max = max(usages)
        result.usage_std = statistics.pstdev(usages)

    return result
