"""
Tree builder for level-annotated BOM rows.

Folds an ordered sequence of FlatRows into a Forest: one BomNode tree per
top-level assembly in the file. The fold is a single left-to-right pass over
an explicit ancestor stack of (level, node) pairs whose levels strictly
increase from bottom to top. The stack is the open path from the current
root down to the most recently added node.

A row at the root level closes the current tree and starts a new one. Any
other row first closes every open branch at its own level or deeper; the
remaining top of the stack must then sit exactly one level above the row, and
becomes its parent. Anything else is a MalformedHierarchyError, and no
partial forest is returned.
"""

import logging
from dataclasses import dataclass, field
from collections.abc import Sequence
from typing import Iterable, Iterator, List, Optional, Tuple

from .exceptions import MalformedHierarchyError
from .rows import FlatRow

logger = logging.getLogger(__name__)


@dataclass
class BomNode:
    """A part or sub-assembly in a BOM tree. Children keep file order."""
    part_number: str
    part_name: str
    quantity_in_parent: float
    level: int
    row_index: int = 0
    children: List["BomNode"] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: FlatRow) -> "BomNode":
        return cls(
            part_number=row.part_number,
            part_name=row.part_name,
            quantity_in_parent=row.quantity,
            level=row.level,
            row_index=row.row_index
        )

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_preorder(self) -> Iterator["BomNode"]:
        """Yield this node and then its descendants, depth-first in file order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendant_count(self) -> int:
        return sum(1 for _ in self.iter_preorder()) - 1

    def depth(self) -> int:
        """Number of levels below this node (0 for a leaf)."""
        deepest = 0
        stack = [(self, 0)]
        while stack:
            node, offset = stack.pop()
            deepest = max(deepest, offset)
            stack.extend((child, offset + 1) for child in node.children)
        return deepest


class Forest(Sequence):
    """Ordered, read-only collection of root BomNodes, one per top-level assembly."""

    def __init__(self, roots: Iterable[BomNode] = ()):
        self._roots: Tuple[BomNode, ...] = tuple(roots)

    @property
    def roots(self) -> Tuple[BomNode, ...]:
        return self._roots

    def __getitem__(self, index):
        return self._roots[index]

    def __len__(self) -> int:
        return len(self._roots)

    def __iter__(self) -> Iterator[BomNode]:
        return iter(self._roots)

    def __eq__(self, other) -> bool:
        if isinstance(other, Forest):
            return self._roots == other._roots
        return NotImplemented

    def __repr__(self) -> str:
        return f"Forest({[root.part_number for root in self._roots]!r})"

    def node_count(self) -> int:
        return sum(1 + root.descendant_count() for root in self._roots)

    def max_depth(self) -> int:
        return max((root.depth() for root in self._roots), default=0)


class TreeBuilder:
    """Builds a Forest from FlatRows using an ancestor stack."""

    def __init__(self, root_level: int = 0):
        """Initialize the builder.

        Args:
            root_level: Level value that marks the start of a top-level assembly
        """
        self.root_level = root_level

    def build(self, rows: Iterable[FlatRow]) -> Forest:
        """Fold rows into a Forest.

        Args:
            rows: Rows in file order

        Returns:
            Forest with one root per root-level row, in file order.
            Zero rows yield an empty Forest.

        Raises:
            MalformedHierarchyError: If a row's level cannot be attached to the
                open ancestor path (no open root, a level gap, or a level
                below the root level)
        """
        roots: List[BomNode] = []
        stack: List[Tuple[int, BomNode]] = []
        current_root: Optional[BomNode] = None

        for position, row in enumerate(rows):
            if row.level == self.root_level:
                if current_root is not None:
                    roots.append(current_root)
                current_root = BomNode.from_row(row)
                stack = [(row.level, current_root)]
                logger.debug(f"Root assembly '{row.part_number}' at row {position}")
                continue

            if row.level < self.root_level:
                raise MalformedHierarchyError(
                    row_index=position,
                    part_number=row.part_number,
                    observed_level=row.level,
                    expected_level=self.root_level,
                    expected_root=True
                )

            while stack and stack[-1][0] >= row.level:
                stack.pop()

            if not stack:
                raise MalformedHierarchyError(
                    row_index=position,
                    part_number=row.part_number,
                    observed_level=row.level,
                    expected_level=self.root_level,
                    expected_root=True
                )

            parent_level, parent = stack[-1]
            if parent_level != row.level - 1:
                raise MalformedHierarchyError(
                    row_index=position,
                    part_number=row.part_number,
                    observed_level=row.level,
                    expected_level=parent_level + 1
                )

            node = BomNode.from_row(row)
            parent.children.append(node)
            stack.append((row.level, node))

        if current_root is not None:
            roots.append(current_root)

        forest = Forest(roots)
        logger.info(
            f"Built forest: {len(forest)} root(s), {forest.node_count()} node(s), "
            f"max depth {forest.max_depth()}"
        )
        return forest


def build_forest(rows: Iterable[FlatRow], root_level: int = 0) -> Forest:
    """Fold rows into a Forest. See TreeBuilder.build."""
    return TreeBuilder(root_level=root_level).build(rows)
