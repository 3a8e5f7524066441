import csv
import io
import logging
import chardet
from pathlib import Path
from typing import List, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class CsvAdapter:
    """CSV adapter for reading level-annotated BOM exports.

    Handles:
    - Multiple encodings (UTF-8, UTF-8-BOM, Windows-1252, ISO-8859-1, etc.)
    - Different delimiters (comma, semicolon, tab)
    - Short rows: cells past the end of a row read as None so the row
      reader can report the missing columns
    """

    FALLBACK_ENCODINGS = ['latin-1', 'cp1252', 'iso-8859-1']

    def can_handle(self, file_path: str) -> bool:
        """Check if this adapter can handle the given file."""
        return Path(file_path).suffix.lower() in [".csv", ".tsv"]

    def _detect_encoding(self, raw_data: bytes) -> str:
        """Detect encoding from the first bytes of a file."""
        if raw_data.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        encoding = chardet.detect(raw_data).get('encoding') or 'utf-8'

        encoding_lower = encoding.lower()
        if 'utf-8' in encoding_lower or 'utf8' in encoding_lower or encoding_lower == 'ascii':
            return 'utf-8'
        return encoding

    def _detect_delimiter(self, file_path: str, sample: str) -> str:
        """Pick the delimiter: tab for .tsv, otherwise sniff the sample."""
        if Path(file_path).suffix.lower() == '.tsv':
            return '\t'

        try:
            return csv.Sniffer().sniff(sample, delimiters=',;\t').delimiter
        except csv.Error:
            pass

        # Count occurrences on the header line
        first_line = sample.splitlines()[0] if sample else ''
        comma_count = first_line.count(',')
        semicolon_count = first_line.count(';')
        tab_count = first_line.count('\t')
        if tab_count > comma_count and tab_count > semicolon_count:
            return '\t'
        elif semicolon_count > comma_count:
            return ';'
        return ','

    def _decode(self, file_path: str, raw: bytes) -> str:
        encoding = self._detect_encoding(raw[:10000])
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(f"Decoding {file_path} as {encoding} failed, trying fallbacks")
            for fallback_encoding in self.FALLBACK_ENCODINGS:
                try:
                    return raw.decode(fallback_encoding)
                except UnicodeDecodeError:
                    continue
            raise ValueError(f"Could not decode file {file_path}: {e}")

    def read_table(self, file_path: str) -> Tuple[List[str], List[Dict[str, Optional[str]]]]:
        """Read a CSV file into its header list and data rows.

        Args:
            file_path: Path to the CSV/TSV file

        Returns:
            Tuple of (headers, rows). Each row maps header -> cell text, or
            None for cells missing from a short row. An empty file yields
            ([], []).

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file cannot be decoded or parsed
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        raw = path.read_bytes()
        if not raw.strip():
            return [], []

        text = self._decode(file_path, raw)
        delimiter = self._detect_delimiter(file_path, text[:1024])

        rows = []
        try:
            reader = csv.DictReader(io.StringIO(text, newline=''), delimiter=delimiter)
            headers = [header.strip() for header in (reader.fieldnames or [])]
            reader.fieldnames = headers
            for row in reader:
                # Extra cells beyond the header land under the None key
                row.pop(None, None)
                rows.append({
                    key: value.strip() if value is not None else None
                    for key, value in row.items()
                })
        except csv.Error as e:
            raise ValueError(f"Error parsing CSV file {file_path}: {e}")

        logger.debug(f"Read {len(rows)} rows from {file_path} (delimiter {delimiter!r})")
        return headers, rows

    def read(self, file_path: str) -> List[Dict[str, Optional[str]]]:
        """Read CSV file and return raw rows as list of dictionaries."""
        return self.read_table(file_path)[1]
