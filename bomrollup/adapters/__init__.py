"""File adapters producing raw dict rows from BOM exports."""

from .csv_adapter import CsvAdapter
from .excel_adapter import ExcelAdapter
from .xls_adapter import XlsAdapter

__all__ = ["CsvAdapter", "ExcelAdapter", "XlsAdapter", "default_adapters"]


def default_adapters():
    """One instance of every built-in adapter."""
    return [XlsAdapter(), ExcelAdapter(), CsvAdapter()]
