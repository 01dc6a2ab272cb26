import csv
import io
import chardet
from pathlib import Path
from typing import List, Dict, Any


class CsvAdapter:
    """CSV adapter for BOM exports saved as CSV or TSV.

    Handles:
    - Multiple encodings (UTF-8, UTF-8-BOM, Big5, Windows-1252, ...)
    - Different delimiters (comma, semicolon, tab)
    - Blank lines and short rows
    """

    SUFFIXES = (".csv", ".tsv", ".txt")

    def can_handle(self, file_path: str) -> bool:
        """Check if this adapter can handle the given file."""
        return Path(file_path).suffix.lower() in self.SUFFIXES

    @staticmethod
    def detect_encoding(raw_data: bytes) -> str:
        """Detect the encoding of a byte sample using chardet."""
        if raw_data.startswith(b'\xef\xbb\xbf'):
            return 'utf-8-sig'

        encoding = chardet.detect(raw_data[:10000]).get('encoding') or 'utf-8'
        encoding_lower = encoding.lower()
        if 'utf-8' in encoding_lower or 'utf8' in encoding_lower or encoding_lower == 'ascii':
            return 'utf-8'
        return encoding

    @staticmethod
    def detect_delimiter(text: str, suffix: str = "") -> str:
        """Pick the delimiter from the header line."""
        if suffix == '.tsv':
            return '\t'

        sample = text[:4096]
        try:
            return csv.Sniffer().sniff(sample, delimiters=',;\t').delimiter
        except csv.Error:
            pass

        first_line = sample.splitlines()[0] if sample else ""
        counts = {
            '\t': first_line.count('\t'),
            ';': first_line.count(';'),
            ',': first_line.count(','),
        }
        best = max(counts, key=counts.get)
        return best if counts[best] else ','

    def _decode(self, raw_data: bytes, name: str) -> str:
        encoding = self.detect_encoding(raw_data)
        try:
            return raw_data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            pass

        for fallback_encoding in ('utf-8', 'cp1252', 'latin-1'):
            try:
                return raw_data.decode(fallback_encoding)
            except UnicodeDecodeError:
                continue
        raise ValueError(f"Could not decode file {name}")

    def read_bytes(self, raw_data: bytes, name: str = "<bytes>") -> List[Dict[str, Any]]:
        """Parse CSV content already in memory (e.g. extracted from an archive).

        Args:
            raw_data: File content
            name: File name, used for the delimiter hint and error messages

        Returns:
            List of dictionaries keyed by header; fully blank rows are skipped

        Raises:
            ValueError: If the content cannot be decoded or parsed
        """
        if not raw_data.strip():
            return []

        text = self._decode(raw_data, name)
        delimiter = self.detect_delimiter(text, Path(name).suffix.lower())

        rows = []
        try:
            reader = csv.DictReader(io.StringIO(text, newline=''), delimiter=delimiter)
            for row in reader:
                cleaned_row = {
                    key.strip() if isinstance(key, str) else key: value.strip() if isinstance(value, str) else ''
                    for key, value in row.items()
                    if key is not None
                }
                if any(cleaned_row.values()):
                    rows.append(cleaned_row)
        except csv.Error as e:
            raise ValueError(f"Error parsing CSV file {name}: {e}")

        return rows

    def read(self, file_path: str) -> List[Dict[str, Any]]:
        """Read a CSV file and return raw rows as list of dictionaries.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file cannot be decoded or parsed
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        return self.read_bytes(path.read_bytes(), path.name)
