"""BOM schema definitions for the flat input columns and the two output tables."""

from typing import Dict, List

# Default input headers, matched exactly and case-sensitively
PART_NUMBER_HEADER = "Part Number"
PART_NAME_HEADER = "Part Name"
QUANTITY_HEADER = "Quantity"
LEVEL_HEADER = "level"

REQUIRED_HEADERS = [
    PART_NUMBER_HEADER,
    PART_NAME_HEADER,
    QUANTITY_HEADER,
    LEVEL_HEADER,
]

# "BOMs" table columns in order
BOM_HEADERS = [
    "part_number",
    "part_name",
    "direct_entries",
    "total_entries",
]

# "BOM Entries" table columns in order
BOM_ENTRY_HEADERS = [
    "root_part_number",
    "parent_part_number",
    "child_part_number",
    "child_part_name",
    "quantity",
    "level",
    "entry_type",
]

# Entry types, following the ItemSync convention
ENTRY_TYPE_PART = "part"
ENTRY_TYPE_SUB_BOM = "sub-bom"

# Output file stems and sheet titles per table
TABLES: Dict[str, Dict[str, object]] = {
    "boms": {"title": "BOMs", "headers": BOM_HEADERS},
    "bom_entries": {"title": "BOM Entries", "headers": BOM_ENTRY_HEADERS},
}

OUTPUT_FORMATS: List[str] = ["csv", "excel", "json"]

__all__ = [
    "PART_NUMBER_HEADER",
    "PART_NAME_HEADER",
    "QUANTITY_HEADER",
    "LEVEL_HEADER",
    "REQUIRED_HEADERS",
    "BOM_HEADERS",
    "BOM_ENTRY_HEADERS",
    "ENTRY_TYPE_PART",
    "ENTRY_TYPE_SUB_BOM",
    "TABLES",
    "OUTPUT_FORMATS",
]
