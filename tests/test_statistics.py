"""Tests for the resolution summary."""

import statistics

import pytest

from bomrollup import BomRow
from bomrollup.hierarchy import HierarchyResolver, compute_statistics
from bomrollup.hierarchy.engine import Diagnostic


def resolved_row(material, sys_component, total_usage):
    return BomRow(level=2, sequence=0, material=material,
                  sys_component=sys_component, total_usage=total_usage)


class TestComputeStatistics:
    def test_empty_table(self):
        stats = compute_statistics([])

        assert stats.total_rows == 0
        assert stats.changed == 0
        assert stats.usage_std == 0.0

    def test_counts_and_percentages(self):
        rows = [
            resolved_row("A", "A", 1.0),
            resolved_row("B", "45X", 2.0),
            resolved_row("C", "45X", 4.0),
            resolved_row("D", "D", 9.0),
        ]
        stats = compute_statistics(rows)

        assert stats.total_rows == 4
        assert stats.changed == 2
        assert stats.changed_percent == 50.0
        assert stats.unchanged == 2
        assert stats.unchanged_percent == 50.0

    def test_usage_distribution_is_population(self):
        usages = [1.0, 2.0, 4.0, 9.0]
        rows = [resolved_row(str(i), str(i), usage) for i, usage in enumerate(usages)]
        stats = compute_statistics(rows)

        assert stats.usage_mean == pytest.approx(4.0)
        assert stats.usage_min == 1.0
        assert stats.usage_max == 9.0
        assert stats.usage_std == pytest.approx(statistics.pstdev(usages))

    def test_to_dict_rounds(self):
        rows = [resolved_row("A", "B", 1.0), resolved_row("B", "B", 1.0), resolved_row("C", "C", 2.0)]
        data = compute_statistics(rows).to_dict()

        assert data["changed_percent"] == 33.3
        assert data["unchanged_percent"] == 66.7
        assert data["usage_mean"] == 1.3333
        assert data["usage_std"] == 0.4714

    def test_diagnostics_counted(self):
        diagnostics = [Diagnostic("cycle", "A", 3, "loop")]
        stats = compute_statistics([resolved_row("A", "A", 1.0)], diagnostics)

        assert stats.diagnostics == 1

    def test_on_resolved_table(self):
        rows = [
            BomRow(level=1, sequence=0, material="ROOT", unit_usage=1),
            BomRow(level=2, sequence=0, material="45ABC", parent_ref="ROOT", unit_usage=2),
            BomRow(level=3, sequence=0, material="X1", parent_ref="45ABC", unit_usage=5),
        ]
        resolved = HierarchyResolver(rows, "45").process()
        stats = compute_statistics(resolved)

        assert stats.changed == 1
        assert stats.usage_max == 10
        assert stats.usage_mean == pytest.approx(13 / 3)
