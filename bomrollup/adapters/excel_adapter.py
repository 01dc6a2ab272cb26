import openpyxl
from pathlib import Path


def rows_to_dicts(header, data_rows):
    """Zip spreadsheet rows with the header, skipping blank rows and columns."""
    header = [str(cell).strip() if cell is not None else None for cell in header]
    rows = []
    for values in data_rows:
        if values is None or all(value is None or str(value).strip() == "" for value in values):
            continue
        row = {}
        for key, value in zip(header, values):
            if key:
                row[key] = value
        rows.append(row)
    return rows


class ExcelAdapter:
    """XLSX/XLSM adapter; reads the first worksheet with the header in row 1."""

    def can_handle(self, file_path):
        return Path(file_path).suffix.lower() in [".xlsx", ".xlsm"]

    def read(self, file_path):
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
        try:
            ws = wb.active
            row_iter = ws.iter_rows(values_only=True)
            header = next(row_iter, None)
            if header is None:
                return []
            return rows_to_dicts(header, row_iter)
        finally:
            wb.close()
