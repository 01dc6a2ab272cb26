"""
Hierarchy resolution for flattened multi-level BOM exports.

For every row the resolver derives two facts:

- SYS_CPN: the canonical system component the row rolls up to
- Ttl. Usage: the row's usage multiplied through its ancestors

Parents are found by walking strictly backward through the table. Each hop
looks up the parent code bounded by the current row's own sequence, so a
material reused further down the table can never be mistaken for its own
ancestor.

The resolver owns a deep copy of the input rows. Nothing is shared with the
caller and nothing about one row's resolution is kept for the next: the set of
materials on the current path travels down the recursion as a frozenset.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from ..normalizer import BomNormalizer, BomRow
from .index import MaterialIndex, renumber_sequence
from .rules import PrecedenceTable, PrefixMatcher, SpecialRuleSet

logger = logging.getLogger(__name__)

MAX_DEPTH = 20

Resolution = Tuple[str, float]


@dataclass(frozen=True)
class Diagnostic:
    """A data-quality finding raised while resolving a row."""
    kind: str            # "depth_exceeded", "cycle" or "error"
    material: str
    sequence: Optional[int]
    message: str


class HierarchyResolver:
    """Resolves SYS_CPN and Ttl. Usage for every row of a BOM table.

    Args:
        rows: BomRow objects or raw dict rows in physical order
        pattern: pipe-delimited primary prefixes, e.g. ``"45|43|64|X75|X66"``
        special_rules: None, ``{"lv": 2, "prefix": "DCS"}`` or a list of such rules
        precedence: prefix classes for the tie-break, lowest priority first,
            e.g. ``["X75", "45"]``
        max_depth: recursion cap; deeper chains stop and are reported
        strict_pattern: raise PatternError on an unusable pattern instead of
            matching nothing
    """

    def __init__(
        self,
        rows: Iterable[Union[BomRow, Dict[str, Any]]],
        pattern: Any,
        special_rules: Any = None,
        precedence: Any = None,
        max_depth: int = MAX_DEPTH,
        strict_pattern: bool = False,
    ):
        self.rows = self._snapshot(rows)
        self.pattern = pattern
        self.max_depth = max_depth

        renumber_sequence(self.rows)

        self.matcher = PrefixMatcher.compile(pattern, strict=strict_pattern)
        self.special_rules = SpecialRuleSet.from_config(special_rules)
        self.precedence = PrecedenceTable.from_config(precedence)

        self.index = MaterialIndex.build(self.rows)
        self.diagnostics: List[Diagnostic] = []

        self._log_stats()

    @staticmethod
    def _snapshot(rows: Iterable[Union[BomRow, Dict[str, Any]]]) -> List[BomRow]:
        snapshot = copy.deepcopy(list(rows))
        if any(not isinstance(row, BomRow) for row in snapshot):
            normalizer = BomNormalizer()
            snapshot = [
                row if isinstance(row, BomRow) else normalizer.normalize_row(row, index)
                for index, row in enumerate(snapshot, start=1)
            ]
        return snapshot

    def _log_stats(self) -> None:
        products = {row.product for row in self.rows}
        logger.info(
            f"Hierarchy resolver ready: {len(self.rows)} rows, "
            f"{len(self.index)} materials, {len(products)} products, pattern={self.pattern!r}"
        )
        for number, rule in enumerate(self.special_rules, start=1):
            logger.info(f"  special rule {number}: {rule.describe()}")
        if len(self.precedence):
            classes = " < ".join("|".join(matcher.prefixes) for matcher in self.precedence.classes)
            logger.info(f"  tie-break precedence: {classes}")

    def _report(self, kind: str, material: str, sequence: Optional[int], message: str) -> None:
        self.diagnostics.append(Diagnostic(kind, material, sequence, message))
        logger.warning(f"{kind} at material {material!r} (LN {sequence}): {message}")

    def traverse(
        self,
        start_material: str,
        accumulated_usage: float = 1.0,
        depth: int = 0,
        sequence_bound: Optional[int] = None,
        path: FrozenSet[str] = frozenset(),
    ) -> Resolution:
        """Walk upward from ``start_material`` and return (terminal, usage).

        Args:
            start_material: material to start from
            accumulated_usage: usage multiplied so far
            depth: current recursion depth
            sequence_bound: the start row is the latest occurrence of
                ``start_material`` with a sequence below this bound
            path: materials already visited in this top-level call

        Returns:
            (terminal material, cumulative usage); on any guard or failure the
            starting state is returned unchanged
        """
        if depth > self.max_depth:
            self._report(
                "depth_exceeded", start_material, sequence_bound,
                f"stopped after {self.max_depth} levels; indenture data may be malformed",
            )
            return start_material, accumulated_usage

        if start_material in path:
            self._report(
                "cycle", start_material, sequence_bound,
                "material already on the current path; parent references form a loop",
            )
            return start_material, accumulated_usage

        try:
            position = self.index.nearest_preceding(start_material, sequence_bound)
            if position is None:
                return start_material, accumulated_usage
            return self._climb(position, accumulated_usage, depth, path | {start_material})
        except Exception as e:
            self._report("error", start_material, sequence_bound, f"traversal failed: {e}")
            logger.exception(f"Error while traversing from material {start_material!r}")
            return start_material, accumulated_usage

    def _climb(self, position: int, accumulated_usage: float, depth: int, path: FrozenSet[str]) -> Resolution:
        row = self.rows[position]
        material = row.material

        if row.level <= 0 or not row.parent_ref:
            return material, accumulated_usage

        # Strict-upward: the parent must sit above this row
        parent_position = self.index.nearest_preceding(row.parent_ref, row.sequence)
        if parent_position is None:
            return material, accumulated_usage

        parent = self.rows[parent_position]
        new_usage = accumulated_usage * parent.unit_usage

        if self.matcher.matches(parent.material):
            _, final_usage = self.traverse(parent.material, new_usage, depth + 1, row.sequence, path)
            terminal = self._superseding_ancestor(parent_position) or parent.material
            return terminal, final_usage

        if self.special_rules.matches(parent.level, parent.material):
            return parent.material, new_usage

        return self.traverse(parent.material, new_usage, depth + 1, row.sequence, path)

    def _superseding_ancestor(self, position: int) -> Optional[str]:
        """Material of a higher-precedence ancestor of the row at ``position``.

        Returns the ancestor of the highest class above the row's own class,
        the nearest one when several share that class, or None.
        """
        rank = self.precedence.rank(self.rows[position].material)
        if not self.precedence.can_be_superseded(rank):
            return None

        best_rank = rank
        best_material = None
        seen = {self.rows[position].material}
        row = self.rows[position]

        for _ in range(self.max_depth):
            if row.level <= 0 or not row.parent_ref:
                break
            parent_position = self.index.nearest_preceding(row.parent_ref, row.sequence)
            if parent_position is None:
                break
            row = self.rows[parent_position]
            if row.material in seen:
                break
            seen.add(row.material)

            ancestor_rank = self.precedence.rank(row.material)
            if ancestor_rank is not None and ancestor_rank > best_rank:
                best_rank = ancestor_rank
                best_material = row.material

        return best_material

    def resolve_row(self, position: int) -> Resolution:
        """Resolve a single row by position without writing the result."""
        row = self.rows[position]
        material = row.material
        usage = row.unit_usage

        if row.level <= 1:
            return material, usage

        if self.matcher.matches(material) or self.special_rules.matches(row.level, material):
            _, total_usage = self._resolve_from(position)
            return material, total_usage

        if not row.parent_ref:
            return material, usage

        ref = row.parent_ref
        if self.index.nearest_preceding(ref, row.sequence) is None:
            # The reference escapes the table: it is the best terminal we have
            return ref, usage

        terminal, total_usage = self._resolve_from(position)
        return terminal or material, total_usage

    def _resolve_from(self, position: int) -> Resolution:
        # The walk starts at the parent reference: the row's own code is not on
        # the path, and the reference sits at depth 0
        row = self.rows[position]
        return self._climb(position, row.unit_usage, -1, frozenset())

    def process(self) -> List[BomRow]:
        """Resolve every row and write SYS_CPN / Ttl. Usage onto the snapshot.

        All rows are resolved before any result is written, so no resolution
        can observe another row's derived columns.

        Returns:
            The resolver's own rows with ``sys_component`` and ``total_usage`` set
        """
        logger.info(f"Resolving {len(self.rows)} rows")
        self.diagnostics = []

        results: List[Resolution] = []
        for position, row in enumerate(self.rows):
            try:
                results.append(self.resolve_row(position))
            except Exception as e:
                self._report("error", row.material, row.sequence, f"row resolution failed: {e}")
                logger.exception(f"Error while resolving row LN {row.sequence}")
                results.append((row.material, row.unit_usage))

        for row, (sys_component, total_usage) in zip(self.rows, results):
            row.sys_component = sys_component
            row.total_usage = total_usage

        changed = sum(1 for row in self.rows if row.sys_component != row.material)
        logger.info(f"Resolution complete: {changed} of {len(self.rows)} rows rolled up")
        if self.diagnostics:
            logger.warning(f"{len(self.diagnostics)} data-quality diagnostics raised")
        return self.rows

    def samples(self, limit: int = 20) -> List[BomRow]:
        """Resolved rows below the root whose SYS_CPN differs from their material."""
        return [
            row for row in self.rows
            if row.is_resolved and row.level > 1 and row.material != row.sys_component
        ][:limit]


def resolve_hierarchy(
    rows: Iterable[Union[BomRow, Dict[str, Any]]],
    pattern: Any,
    special_rules: Any = None,
    **kwargs: Any,
) -> List[BomRow]:
    """Convenience wrapper: build a resolver and process the rows."""
    return HierarchyResolver(rows, pattern, special_rules, **kwargs).process()
