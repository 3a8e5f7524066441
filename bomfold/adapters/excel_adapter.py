import logging
import zipfile
import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from pathlib import Path

logger = logging.getLogger(__name__)


class ExcelAdapter:
    """Reads the active sheet of an .xlsx workbook; the first row holds the headers."""

    def can_handle(self, file_path):
        return Path(file_path).suffix.lower() in [".xlsx", ".xlsm"]

    def read_table(self, file_path):
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        except (zipfile.BadZipFile, InvalidFileException, KeyError) as e:
            raise ValueError(f"Could not read workbook {file_path}: {e}")

        try:
            ws = wb.active
            sheet_rows = ws.iter_rows(values_only=True)
            header_row = next(sheet_rows, None)
            if header_row is None:
                return [], []
            headers = ["" if cell is None else str(cell).strip() for cell in header_row]

            rows = []
            for values in sheet_rows:
                if all(value is None or str(value).strip() == "" for value in values):
                    continue
                values = list(values) + [None] * (len(headers) - len(values))
                rows.append({
                    header: "" if value is None else _excel_cell_text(value)
                    for header, value in zip(headers, values)
                    if header
                })
        finally:
            wb.close()

        logger.debug(f"Read {len(rows)} rows from {file_path}")
        return [header for header in headers if header], rows

    def read(self, file_path):
        return self.read_table(file_path)[1]


def _excel_cell_text(value):
    # Whole-number floats come back from numeric cells, e.g. a level of 1 as 1.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
