from .folder import BomFolder, FoldResult
from .config import FoldRules, Settings, load_settings
from .rows import FlatRow, read_rows
from .tree import BomNode, Forest, TreeBuilder, build_forest
from .flatten import BomRecord, BomEntryRecord, flatten, entries_to_rows
from .export import write_tables, render_forest
from .exceptions import BomFoldError, ConfigurationError, SchemaError, MalformedHierarchyError

__all__ = [
    "BomFolder",
    "FoldResult",
    "FoldRules",
    "Settings",
    "load_settings",
    "FlatRow",
    "read_rows",
    "BomNode",
    "Forest",
    "TreeBuilder",
    "build_forest",
    "BomRecord",
    "BomEntryRecord",
    "flatten",
    "entries_to_rows",
    "write_tables",
    "render_forest",
    "BomFoldError",
    "ConfigurationError",
    "SchemaError",
    "MalformedHierarchyError",
]
