"""Writers for the flattened tables and a text renderer for the folded forest."""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import openpyxl

from .flatten import BomEntryRecord, BomRecord
from .schema import OUTPUT_FORMATS, TABLES
from .tree import BomNode, Forest

logger = logging.getLogger(__name__)

FORMAT_SUFFIXES = {
    "csv": ".csv",
    "excel": ".xlsx",
    "json": ".json",
}


def _export_csv(data: List[Dict[str, Any]], output_path: Path, headers: List[str]) -> None:
    """Export data to CSV file."""
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore')
        writer.writeheader()
        for row in data:
            writer.writerow({header: row.get(header, '') for header in headers})


def _export_excel(data: List[Dict[str, Any]], output_path: Path, headers: List[str], title: str) -> None:
    """Export data to a single-sheet Excel workbook."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = title

    for col_idx, header in enumerate(headers, start=1):
        ws.cell(row=1, column=col_idx, value=header)

    for row_idx, row_data in enumerate(data, start=2):
        for col_idx, header in enumerate(headers, start=1):
            ws.cell(row=row_idx, column=col_idx, value=row_data.get(header, ''))

    wb.save(output_path)


def _export_json(data: List[Dict[str, Any]], output_path: Path) -> None:
    """Export data to JSON file."""
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def write_table(
    data: List[Dict[str, Any]],
    output_path: Union[str, Path],
    headers: List[str],
    format: str = "csv",
    title: str = "Sheet"
) -> Path:
    """Write one table in the given format.

    Raises:
        ValueError: If format is not supported
    """
    output_path = Path(output_path)
    format = format.lower()
    if format == 'csv':
        _export_csv(data, output_path, headers)
    elif format == 'excel':
        _export_excel(data, output_path, headers, title)
    elif format == 'json':
        _export_json(data, output_path)
    else:
        raise ValueError(f"Unsupported export format: {format}. Supported formats: {', '.join(OUTPUT_FORMATS)}")
    return output_path


def write_tables(
    boms: Sequence[BomRecord],
    entries: Sequence[BomEntryRecord],
    output_dir: Union[str, Path],
    format: str = "csv"
) -> List[Path]:
    """Write the BOMs and BOM Entries tables into output_dir.

    Args:
        boms: Records for the "BOMs" table
        entries: Records for the "BOM Entries" table
        output_dir: Directory to write into (created if missing)
        format: 'csv', 'excel' or 'json'

    Returns:
        Paths of the written files: [boms, bom_entries]

    Raises:
        ValueError: If format is not supported
    """
    format = format.lower()
    if format not in FORMAT_SUFFIXES:
        raise ValueError(f"Unsupported export format: {format}. Supported formats: {', '.join(OUTPUT_FORMATS)}")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for stem, records in (("boms", boms), ("bom_entries", entries)):
        table = TABLES[stem]
        path = output_dir / f"{stem}{FORMAT_SUFFIXES[format]}"
        write_table(
            [record.to_dict() for record in records],
            path,
            headers=table["headers"],
            format=format,
            title=table["title"]
        )
        logger.info(f"Wrote {len(records)} record(s) to {path}")
        written.append(path)
    return written


def _format_quantity(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:g}"


def render_forest(forest: Forest) -> str:
    """Render a Forest as an indented text tree, one line per node."""
    if not len(forest):
        return "(empty forest)"

    lines = []
    for root in forest:
        stack = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            lines.append(_render_node(node, depth))
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


def _render_node(node: BomNode, depth: int) -> str:
    label = f"{node.part_number} - {node.part_name}" if node.part_name else node.part_number
    if depth == 0:
        return label
    return f"{'  ' * depth}{_format_quantity(node.quantity_in_parent)} x {label}"
