import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .adapters import CsvAdapter, ExcelAdapter
from .config import FoldRules
from .export import render_forest, write_tables
from .flatten import BomEntryRecord, BomRecord, flatten
from .rows import FlatRow, check_table_headers, read_rows
from .tree import Forest, TreeBuilder

logger = logging.getLogger(__name__)


@dataclass
class FoldResult:
    """Everything one conversion run produces."""
    forest: Forest
    boms: List[BomRecord]
    bom_entries: List[BomEntryRecord]


class BomFolder:
    """Folds level-annotated BOM files into ItemSync BOM tables."""

    def __init__(self, rules: Optional[FoldRules] = None, register_defaults: bool = True):
        """Initialize the folder.

        Args:
            rules: Column names and level settings (default: FoldRules())
            register_defaults: If True, register the CSV and Excel adapters
        """
        self.rules = rules or FoldRules()
        self.adapters = []
        if register_defaults:
            self.register_adapter(CsvAdapter())
            self.register_adapter(ExcelAdapter())

    def register_adapter(self, adapter):
        """Register a file adapter for parsing.

        Args:
            adapter: Adapter instance with can_handle() and read_table() methods
        """
        self.adapters.append(adapter)

    def _find_adapter(self, file_path: str):
        for a in self.adapters:
            if a.can_handle(file_path):
                return a
        raise ValueError(f"No adapter found for {file_path}")

    def parse(self, file_path: Union[str, Path]) -> List[FlatRow]:
        """Read a BOM file into typed rows.

        Args:
            file_path: Path to the BOM file

        Returns:
            FlatRows in file order

        Raises:
            ValueError: If no adapter is found for the file or it cannot be parsed
            FileNotFoundError: If the file does not exist
            SchemaError: If required columns are missing or cells cannot be typed
        """
        file_path = str(file_path)
        adapter = self._find_adapter(file_path)
        headers, records = adapter.read_table(file_path)
        if headers or records:
            check_table_headers(headers, self.rules)
        rows = read_rows(records, self.rules)
        logger.info(f"Parsed {len(rows)} rows from {file_path}")
        return rows

    def fold(self, rows: List[FlatRow]) -> FoldResult:
        """Build the forest and flatten it.

        Raises:
            MalformedHierarchyError: If the rows do not nest properly
        """
        forest = TreeBuilder(root_level=self.rules.root_level).build(rows)
        boms, entries = flatten(forest, include_sub_boms=self.rules.include_sub_boms)
        return FoldResult(forest=forest, boms=boms, bom_entries=entries)

    def fold_file(self, file_path: Union[str, Path]) -> FoldResult:
        """Parse and fold a BOM file."""
        return self.fold(self.parse(file_path))

    def convert(
        self,
        input_path: Union[str, Path],
        output_dir: Optional[Union[str, Path]] = None,
        format: str = "csv"
    ) -> Union[List[Path], str]:
        """Fold a BOM file and either write the tables or render the tree.

        Folding completes before anything is written, so a failing input
        leaves no partial output behind.

        Args:
            input_path: Path to the flat BOM file
            output_dir: Directory for the two tables. If None, the folded
                forest is rendered as text instead.
            format: Output format for the tables ('csv', 'excel' or 'json')

        Returns:
            Paths of the written files, or the rendered tree when no
            output_dir is given
        """
        result = self.fold_file(input_path)
        if output_dir is None:
            return render_forest(result.forest)
        return write_tables(result.boms, result.bom_entries, output_dir, format=format)
