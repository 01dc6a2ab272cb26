import xlrd
from pathlib import Path

from .excel_adapter import rows_to_dicts


class XlsAdapter:
    """Legacy binary XLS adapter (the format SAP ZSDR392 downloads come in)."""

    def can_handle(self, file_path):
        # ".xlsx" is a different format even though it starts with ".xls"
        return Path(file_path).suffix.lower() == ".xls"

    def read(self, file_path):
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            book = xlrd.open_workbook(str(path), on_demand=True)
        except xlrd.XLRDError as e:
            raise ValueError(f"Could not read XLS file {file_path}: {e}")

        try:
            sheet = book.sheet_by_index(0)
            if sheet.nrows == 0:
                return []
            header = sheet.row_values(0)
            data_rows = (sheet.row_values(index) for index in range(1, sheet.nrows))
            return rows_to_dicts(header, data_rows)
        finally:
            book.release_resources()
