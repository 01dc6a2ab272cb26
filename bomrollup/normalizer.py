from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
import logging
import re
from .schema import (
    COLUMN_MAPPINGS,
    DERIVED_MAPPINGS,
    FIELD_HEADERS,
    SYS_CPN_HEADER,
    TTL_USAGE_HEADER,
)
from .unit_normalizer import UnitNormalizer

logger = logging.getLogger(__name__)


@dataclass
class BomRow:
    """
    One line of a flattened multi-level BOM export.

    - level: indenture depth (0/1 = absolute root)
    - sequence: physical row order, reassigned 1..N before resolution
    - material: the component code of this line
    - parent_ref: material code of the immediate parent (may be empty)
    - unit_usage: quantity consumed per one unit of the parent
    - product: grouping label, descriptive only
    - extra: unmapped source columns, kept for export
    - sys_component / total_usage: written by the hierarchy resolver
    """
    level: int
    sequence: int
    material: str
    parent_ref: str = ""
    unit_usage: float = 1.0
    product: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
    sys_component: Optional[str] = None
    total_usage: Optional[float] = None

    @property
    def is_resolved(self) -> bool:
        return self.sys_component is not None

    def to_record(self) -> Dict[str, Any]:
        """Flatten the row into an export dictionary using the SAP headers."""
        record = {
            FIELD_HEADERS["level"]: self.level,
            FIELD_HEADERS["sequence"]: self.sequence,
            FIELD_HEADERS["material"]: self.material,
            FIELD_HEADERS["parent_ref"]: self.parent_ref,
            FIELD_HEADERS["unit_usage"]: self.unit_usage,
            FIELD_HEADERS["product"]: self.product,
        }
        for key, value in self.extra.items():
            if key not in record:
                record[key] = value
        record[SYS_CPN_HEADER] = self.sys_component if self.sys_component is not None else ""
        record[TTL_USAGE_HEADER] = self.total_usage if self.total_usage is not None else ""
        return record


def _compact(name: str) -> str:
    return re.sub(r'[^a-z0-9]', '', name)


class BomNormalizer:
    """Maps raw rows from an adapter onto :class:`BomRow` objects.

    Column names are matched case-insensitively against ``COLUMN_MAPPINGS``,
    first after collapsing whitespace/underscores and then with all
    punctuation removed. Derived columns from a previous run are dropped;
    everything else lands in ``BomRow.extra``.
    """

    def __init__(self, unit_normalizer: Optional[UnitNormalizer] = None):
        """Initialize the normalizer with column mappings."""
        self.unit_normalizer = unit_normalizer or UnitNormalizer()

        # Forward lookup: variation -> field name
        self._variation_to_field = {}
        self._compact_to_field = {}
        for field_name, variations in COLUMN_MAPPINGS.items():
            for variation in variations:
                self._variation_to_field[variation.lower()] = field_name
                self._compact_to_field[_compact(variation.lower())] = field_name

        self._derived = {_compact(name) for name in DERIVED_MAPPINGS}

    def normalize_column_name(self, column_name: Any) -> Optional[str]:
        """Normalize a column name to a BomRow field.

        Args:
            column_name: The original column name from the export

        Returns:
            Field name if a match is found, None otherwise
        """
        if column_name is None:
            return None

        normalized_input = re.sub(r'[\s_\-]+', ' ', str(column_name).lower().strip())
        if not normalized_input:
            return None

        if normalized_input in self._variation_to_field:
            return self._variation_to_field[normalized_input]

        return self._compact_to_field.get(_compact(normalized_input))

    def is_derived_column(self, column_name: Any) -> bool:
        if column_name is None:
            return False
        return _compact(str(column_name).lower()) in self._derived

    @staticmethod
    def _to_text(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, float) and value.is_integer():
            # Spreadsheet readers hand numeric material codes back as floats
            return str(int(value))
        return str(value).strip()

    @staticmethod
    def _to_level(value: Any) -> int:
        if value is None or isinstance(value, bool):
            return 0
        try:
            level = int(float(str(value).strip()))
        except (ValueError, TypeError):
            return 0
        return max(level, 0)

    @staticmethod
    def _to_sequence(value: Any, default: int) -> int:
        try:
            return int(float(str(value).strip()))
        except (ValueError, TypeError):
            return default

    def normalize_row(self, row: Dict[str, Any], row_index: int = 0) -> BomRow:
        """Normalize a single raw row.

        Args:
            row: Dictionary representing a single export row
            row_index: 1-based physical position, used when the row has no LN

        Returns:
            BomRow with typed fields and unmapped columns in ``extra``
        """
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}

        for original_key, value in row.items():
            if original_key is None or self.is_derived_column(original_key):
                continue

            field_name = self.normalize_column_name(original_key)
            if field_name:
                # Keep the first non-empty value when several columns map to one field
                if field_name not in values or values[field_name] in (None, ""):
                    values[field_name] = value
            else:
                extra[str(original_key)] = value

        return BomRow(
            level=self._to_level(values.get("level")),
            sequence=self._to_sequence(values.get("sequence"), row_index),
            material=self._to_text(values.get("material")),
            parent_ref=self._to_text(values.get("parent_ref")),
            unit_usage=self.unit_normalizer.to_usage(values.get("unit_usage")),
            product=self._to_text(values.get("product")),
            extra=extra,
        )

    def normalize(self, raw_rows: List[Dict[str, Any]]) -> List[BomRow]:
        """Normalize a list of raw rows.

        Args:
            raw_rows: List of dictionaries representing export rows

        Returns:
            List of BomRow objects in the same physical order
        """
        return [self.normalize_row(row, index) for index, row in enumerate(raw_rows, start=1)]

    def get_mapping_report(self, raw_rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Generate a report of column mappings for debugging.

        Args:
            raw_rows: List of dictionaries representing export rows

        Returns:
            Dictionary with mapped, unmapped, derived and missing fields
        """
        if not raw_rows:
            return {"mapped": {}, "unmapped": [], "derived": [], "missing": list(COLUMN_MAPPINGS)}

        # Keep first-seen column order
        all_columns: List[Any] = []
        for row in raw_rows:
            for column in row.keys():
                if column not in all_columns:
                    all_columns.append(column)

        mapped: Dict[str, List[Any]] = {}
        unmapped = []
        derived = []

        for column in all_columns:
            if column is None:
                continue
            if self.is_derived_column(column):
                derived.append(column)
                continue
            field_name = self.normalize_column_name(column)
            if field_name:
                mapped.setdefault(field_name, []).append(column)
            else:
                unmapped.append(column)

        missing = [name for name in COLUMN_MAPPINGS if name not in mapped]
        if "material" in missing:
            logger.warning(f"No material column found among {len(all_columns)} columns")

        return {
            "mapped": mapped,
            "unmapped": unmapped,
            "derived": derived,
            "missing": missing,
        }
