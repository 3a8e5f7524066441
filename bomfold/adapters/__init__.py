"""File adapters that read flat BOM files into raw records."""

from .csv_adapter import CsvAdapter
from .excel_adapter import ExcelAdapter

__all__ = ["CsvAdapter", "ExcelAdapter"]
