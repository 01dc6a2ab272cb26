"""Usage value coercion using Pint to recognise quantities written with a unit."""

import math
import re
from typing import Any, Optional, Tuple
from pint import UnitRegistry
from pint.errors import PintError

# Initialize Pint unit registry
ureg = UnitRegistry()

DEFAULT_USAGE = 1.0


class UnitNormalizer:
    """Turns raw ``Unit Usg`` cells into float multipliers.

    SAP exports carry plain numbers most of the time, but hand-edited files
    contain values such as ``"2 PC"`` or ``"0.5 m"``. The magnitude is what
    matters for usage roll-up; the unit is only used to decide whether the cell
    is a quantity at all. Anything unusable becomes ``DEFAULT_USAGE``.
    """

    # Piece-count aliases; checked before Pint because "pc" is a parsec there
    PIECE_ALIASES = {
        "pc", "pcs", "pce", "piece", "pieces", "ea", "each", "st", "unit", "units"
    }

    QUANTITY_PATTERN = re.compile(
        r'^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([A-Za-zµ][\w\.µ]*)$'
    )

    def __init__(self, default: float = DEFAULT_USAGE):
        """Initialize the unit normalizer.

        Args:
            default: Value returned for missing or non-numeric usage (default: 1.0)
        """
        self.ureg = ureg
        self.default = default

    def split_quantity(self, value: Any) -> Tuple[Optional[float], Optional[str]]:
        """Split a value into (magnitude, unit).

        Examples:
            split_quantity(2) -> (2.0, None)
            split_quantity("2 PC") -> (2.0, "PC")
            split_quantity("0.5m") -> (0.5, "m")
            split_quantity("abc") -> (None, None)
        """
        if value is None or isinstance(value, bool):
            return None, None

        if isinstance(value, (int, float)):
            return float(value), None

        value_str = str(value).strip()
        if not value_str:
            return None, None

        try:
            return float(value_str), None
        except ValueError:
            pass

        match = self.QUANTITY_PATTERN.match(value_str)
        if not match:
            return None, None

        unit_str = match.group(2)
        if not self._is_known_unit(unit_str):
            return None, None

        return float(match.group(1)), unit_str

    def _is_known_unit(self, unit_str: str) -> bool:
        if unit_str.lower().rstrip('.') in self.PIECE_ALIASES:
            return True
        try:
            self.ureg.parse_units(unit_str)
            return True
        except (PintError, AttributeError, ValueError, TypeError):
            return False

    def to_usage(self, value: Any) -> float:
        """Coerce a raw usage cell to a float.

        Zero is kept as a real quantity; missing, non-numeric, NaN and infinite
        values fall back to the default.
        """
        magnitude, _ = self.split_quantity(value)
        if magnitude is None or not math.isfinite(magnitude):
            return self.default
        return magnitude

