"""
Table flattener: turns a Forest back into the two ItemSync import tables.

- BOMs: one record per top-level assembly (and, on request, per nested
  sub-assembly).
- BOM Entries: one record per parent -> child edge anywhere in the forest,
  emitted in pre-order so each root's entries follow the original file order.

Quantities are per immediate parent. Nothing is multiplied up the tree.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .rows import FlatRow
from .schema import ENTRY_TYPE_PART, ENTRY_TYPE_SUB_BOM
from .tree import BomNode, Forest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BomRecord:
    """A row of the "BOMs" table."""
    part_number: str
    part_name: str
    direct_entries: int
    total_entries: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "part_number": self.part_number,
            "part_name": self.part_name,
            "direct_entries": self.direct_entries,
            "total_entries": self.total_entries,
        }


@dataclass(frozen=True)
class BomEntryRecord:
    """A row of the "BOM Entries" table: one parent -> child edge."""
    root_part_number: str
    parent_part_number: str
    child_part_number: str
    child_part_name: str
    quantity: float
    level: int
    entry_type: str = ENTRY_TYPE_PART

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root_part_number": self.root_part_number,
            "parent_part_number": self.parent_part_number,
            "child_part_number": self.child_part_number,
            "child_part_name": self.child_part_name,
            "quantity": self.quantity,
            "level": self.level,
            "entry_type": self.entry_type,
        }


def _bom_record(node: BomNode) -> BomRecord:
    return BomRecord(
        part_number=node.part_number,
        part_name=node.part_name,
        direct_entries=len(node.children),
        total_entries=node.descendant_count()
    )


def flatten(forest: Forest, include_sub_boms: bool = False) -> Tuple[List[BomRecord], List[BomEntryRecord]]:
    """Flatten a Forest into BOM and BOM entry records.

    Args:
        forest: Forest produced by the tree builder (not modified)
        include_sub_boms: Also emit a BomRecord for every nested node that has
            children, right after its root's record in pre-order

    Returns:
        Tuple of (boms, bom_entries)
    """
    boms: List[BomRecord] = []
    entries: List[BomEntryRecord] = []

    for root in forest:
        boms.append(_bom_record(root))

        # (node, parent) pairs, depth-first in stored child order
        stack = [(child, root) for child in reversed(root.children)]
        while stack:
            node, parent = stack.pop()
            entries.append(BomEntryRecord(
                root_part_number=root.part_number,
                parent_part_number=parent.part_number,
                child_part_number=node.part_number,
                child_part_name=node.part_name,
                quantity=node.quantity_in_parent,
                level=node.level,
                entry_type=ENTRY_TYPE_PART if node.is_leaf else ENTRY_TYPE_SUB_BOM
            ))
            if include_sub_boms and not node.is_leaf:
                boms.append(_bom_record(node))
            stack.extend((child, node) for child in reversed(node.children))

    logger.info(f"Flattened forest into {len(boms)} BOM(s) and {len(entries)} entr(ies)")
    return boms, entries


def entries_to_rows(
    boms: List[BomRecord],
    entries: List[BomEntryRecord],
    root_level: int = 0
) -> List[FlatRow]:
    """Rebuild level-annotated rows from root-only flattened tables.

    Each BOM becomes a row at ``root_level`` (quantity 1.0) followed by the
    next ``total_entries`` entries, which must all belong to it. An entry's
    position in the rebuilt tree comes from its stored level, never from
    matching part numbers, since the same part may appear more than once
    under one root.

    Args:
        boms: BOM records, one per root
        entries: BOM entry records in the order flatten() emitted them
        root_level: Level the tables were folded with

    Raises:
        ValueError: If the entries do not line up with the BOM totals, e.g.
            when the tables were flattened with include_sub_boms, or if an
            entry's level cannot hang off the entries before it
    """
    rows: List[FlatRow] = []
    cursor = 0
    for bom in boms:
        rows.append(FlatRow(
            part_number=bom.part_number,
            part_name=bom.part_name,
            quantity=1.0,
            level=root_level,
            row_index=len(rows)
        ))

        root_entries = entries[cursor:cursor + bom.total_entries]
        if len(root_entries) != bom.total_entries or any(
            entry.root_part_number != bom.part_number for entry in root_entries
        ):
            raise ValueError(
                f"BOM '{bom.part_number}' expects {bom.total_entries} entries "
                f"starting at entry {cursor}, which the entries table does not hold"
            )

        # Open path from the root down to the last entry; its length is the depth of the next child
        path = [bom.part_number]
        for offset, entry in enumerate(root_entries):
            depth = entry.level - root_level
            if depth < 1 or depth > len(path):
                raise ValueError(
                    f"Entry {cursor + offset} ('{entry.child_part_number}') has level {entry.level}, "
                    f"expected {root_level + 1} to {root_level + len(path)}"
                )
            del path[depth:]
            if path[-1] != entry.parent_part_number:
                raise ValueError(
                    f"Entry {cursor + offset} ('{entry.child_part_number}') names parent "
                    f"'{entry.parent_part_number}' but its level places it under '{path[-1]}'"
                )
            rows.append(FlatRow(
                part_number=entry.child_part_number,
                part_name=entry.child_part_name,
                quantity=entry.quantity,
                level=entry.level,
                row_index=len(rows)
            ))
            path.append(entry.child_part_number)
        cursor += bom.total_entries

    if cursor != len(entries):
        raise ValueError(f"{len(entries) - cursor} entries do not belong to any listed BOM")
    return rows
