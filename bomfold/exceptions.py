"""
Custom exceptions for bomfold.
Every failure of a conversion run is one of these, raised before any output is written.
"""

from typing import Optional, Sequence


class BomFoldError(Exception):
    """Base exception for all bomfold errors."""
    pass


class ConfigurationError(BomFoldError):
    """Raised when configuration is invalid."""
    def __init__(self, message: str, field: str = None, value: str = None):
        super().__init__(message)
        self.field = field
        self.value = value


class SchemaError(BomFoldError):
    """Raised when the input records lack required columns or hold untypeable cells."""
    def __init__(
        self,
        message: str,
        missing: Sequence[str] = (),
        row_index: Optional[int] = None,
        column: Optional[str] = None,
        value: Optional[str] = None
    ):
        super().__init__(message)
        self.missing = tuple(missing)
        self.row_index = row_index
        self.column = column
        self.value = value


class MalformedHierarchyError(BomFoldError):
    """Raised when a row's level cannot be attached to the open ancestor path."""
    def __init__(
        self,
        row_index: int,
        part_number: str,
        observed_level: int,
        expected_level: int,
        expected_root: bool = False
    ):
        if expected_root:
            expectation = f"expected root level {expected_level}"
        else:
            expectation = f"expected level {expected_level} or a shallower open level"
        message = (
            f"Malformed hierarchy at row {row_index} (part '{part_number}'): "
            f"level {observed_level}, {expectation}"
        )
        super().__init__(message)
        self.row_index = row_index
        self.part_number = part_number
        self.observed_level = observed_level
        self.expected_level = expected_level
        self.expected_root = expected_root
