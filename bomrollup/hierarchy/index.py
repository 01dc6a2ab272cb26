"""Row ordering and material lookup for a flattened BOM table.

A flattened export lists the BOM tree in depth-first pre-order, so a row's
parent is always somewhere above it. Material codes are reused at different
tree positions, which means "the row for material X" is only meaningful
relative to a position in the table: the parent of a row is the nearest
occurrence of its parent code strictly above that row.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ..normalizer import BomRow

logger = logging.getLogger(__name__)


def renumber_sequence(rows: Sequence[BomRow]) -> None:
    """Overwrite ``sequence`` with 1..N in physical order.

    Sequence numbers in source exports may be duplicated or out of order;
    every later lookup depends on them, so this runs unconditionally.
    """
    for sequence, row in enumerate(rows, start=1):
        row.sequence = sequence

    if rows:
        logger.info(f"Sequence renumbered: 1-{len(rows)}")


class MaterialIndex:
    """Material code -> row positions, ascending by sequence."""

    def __init__(self, rows: Sequence[BomRow], positions: Dict[str, List[int]]):
        self._rows = rows
        self._positions = positions

    @classmethod
    def build(cls, rows: Sequence[BomRow]) -> "MaterialIndex":
        """Build the index in one pass.

        Rows must already be renumbered, so list order equals sequence order.
        Blank materials are left out; they can never be a parent.
        """
        positions: Dict[str, List[int]] = {}
        for position, row in enumerate(rows):
            material = str(row.material or "").strip()
            if material:
                positions.setdefault(material, []).append(position)
        return cls(rows, positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, material: object) -> bool:
        return isinstance(material, str) and material.strip() in self._positions

    def positions(self, material: str) -> List[int]:
        return list(self._positions.get(str(material or "").strip(), ()))

    def nearest_preceding(self, material: str, sequence_bound: Optional[int] = None) -> Optional[int]:
        """Position of ``material``'s latest occurrence with sequence < bound.

        Args:
            material: Material code to look up
            sequence_bound: Exclusive upper bound on sequence; None searches
                the whole table

        Returns:
            Row position, or None if the material has no such occurrence
        """
        candidates = self._positions.get(str(material or "").strip())
        if not candidates:
            return None

        if sequence_bound is None:
            return candidates[-1]

        for position in reversed(candidates):
            if self._rows[position].sequence < sequence_bound:
                return position
        return None
