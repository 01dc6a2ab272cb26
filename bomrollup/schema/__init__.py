"""BOM schema definitions for SAP-style multi-level exports and column mappings."""

from typing import Dict, List

# Standard export headers in order (SAP ZSDR392 layout)
STANDARD_HEADERS = [
    "LV",
    "LN",
    "Material",
    "Part Number",
    "Unit Usg",
    "Product",
]

# Columns written by the hierarchy resolver
SYS_CPN_HEADER = "SYS_CPN"
TTL_USAGE_HEADER = "Ttl. Usage"
DERIVED_HEADERS = [SYS_CPN_HEADER, TTL_USAGE_HEADER]

# BomRow field name -> standard export header
FIELD_HEADERS: Dict[str, str] = {
    "level": "LV",
    "sequence": "LN",
    "material": "Material",
    "parent_ref": "Part Number",
    "unit_usage": "Unit Usg",
    "product": "Product",
}

# Mapping of common column name variations to BomRow fields.
# "Part Number" in the SAP export names the parent material, not the row's own code.
COLUMN_MAPPINGS: Dict[str, List[str]] = {
    "level": [
        "lv", "lvl", "level", "bom level", "bom_level", "indenture",
        "indenture level", "explosion level"
    ],
    "sequence": [
        "ln", "line", "line no", "line_no", "line number", "line_number",
        "seq", "sequence", "seq no", "item no", "row"
    ],
    "material": [
        "material", "material number", "material_number", "material no",
        "component", "component number", "component_number", "cpn"
    ],
    "parent_ref": [
        "part number", "part_number", "partnumber", "parent", "parent material",
        "parent_material", "parent ref", "parent_ref", "parent part",
        "higher level material", "assembly"
    ],
    "unit_usage": [
        "unit usg", "unit usg.", "unit usage", "unit_usage", "usage",
        "comp qty", "component quantity", "qty per", "qty_per", "quantity per"
    ],
    "product": [
        "product", "model", "product name", "product_name", "project"
    ],
}

# Derived columns from a previous run; ignored when reading input
DERIVED_MAPPINGS: List[str] = [
    "sys_cpn", "sys cpn", "system component", "ttl. usage", "ttl usage",
    "total usage", "total_usage"
]

__all__ = [
    "STANDARD_HEADERS",
    "SYS_CPN_HEADER",
    "TTL_USAGE_HEADER",
    "DERIVED_HEADERS",
    "FIELD_HEADERS",
    "COLUMN_MAPPINGS",
    "DERIVED_MAPPINGS",
]
