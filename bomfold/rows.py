"""Typed flat BOM rows and their conversion from raw adapter records."""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import FoldRules
from .exceptions import SchemaError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlatRow:
    """
    One data line of a level-annotated BOM file.

    The level is the only structural signal: a row at the root level starts a
    new top-level assembly, a row one level deeper than its predecessor is
    that predecessor's child.
    """
    part_number: str
    part_name: str
    quantity: float
    level: int
    row_index: int = 0


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_quantity(value: Any, row_index: int, column: str) -> float:
    """Parse a quantity cell. Empty cells read as 0.0."""
    text = _cell_text(value)
    if not text:
        return 0.0
    try:
        quantity = float(text)
    except ValueError:
        raise SchemaError(
            f"Row {row_index}: column '{column}' is not a number: {text!r}",
            row_index=row_index,
            column=column,
            value=text
        )
    if quantity < 0 or not math.isfinite(quantity):
        raise SchemaError(
            f"Row {row_index}: column '{column}' must be a non-negative number, got {text!r}",
            row_index=row_index,
            column=column,
            value=text
        )
    return quantity


def parse_level(value: Any, row_index: int, column: str) -> int:
    """Parse a level cell into a non-negative integer ("2" and "2.0" both read as 2)."""
    text = _cell_text(value)
    try:
        number = float(text)
    except ValueError:
        number = None
    if number is None or not number.is_integer() or number < 0:
        raise SchemaError(
            f"Row {row_index}: column '{column}' must be a non-negative integer, got {text!r}",
            row_index=row_index,
            column=column,
            value=text
        )
    return int(number)


def check_headers(record: Dict[str, Any], rules: FoldRules, row_index: int) -> None:
    """Raise SchemaError if the record lacks any required field.

    A field is missing when its header is absent or its cell is None (a short
    CSV row). An empty string is present.
    """
    missing = [key for key in rules.required_headers() if record.get(key) is None]
    if missing:
        raise SchemaError(
            f"Row {row_index}: missing required column(s): {', '.join(missing)}",
            missing=missing,
            row_index=row_index
        )


def read_rows(records: List[Dict[str, Any]], rules: Optional[FoldRules] = None) -> List[FlatRow]:
    """Convert raw records (header -> cell) into FlatRows.

    Args:
        records: Rows as returned by an adapter
        rules: Column names to read (defaults to FoldRules())

    Returns:
        One FlatRow per record, in order

    Raises:
        SchemaError: If a required column is missing or a cell cannot be typed
    """
    rules = rules or FoldRules()
    rows = []
    for row_index, record in enumerate(records):
        check_headers(record, rules, row_index)

        part_number = _cell_text(record[rules.id_key])
        if not part_number:
            raise SchemaError(
                f"Row {row_index}: column '{rules.id_key}' is empty",
                row_index=row_index,
                column=rules.id_key,
                value=""
            )

        rows.append(FlatRow(
            part_number=part_number,
            part_name=_cell_text(record[rules.name_key]),
            quantity=parse_quantity(record[rules.quantity_key], row_index, rules.quantity_key),
            level=parse_level(record[rules.level_key], row_index, rules.level_key),
            row_index=row_index
        ))

    logger.debug(f"Read {len(rows)} rows")
    return rows


def check_table_headers(headers: List[str], rules: Optional[FoldRules] = None) -> None:
    """Raise SchemaError if a file's header row lacks any required column."""
    rules = rules or FoldRules()
    missing = [key for key in rules.required_headers() if key not in headers]
    if missing:
        raise SchemaError(
            f"Input is missing required column(s): {', '.join(missing)}",
            missing=missing
        )
