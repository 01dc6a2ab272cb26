from .normalizer import BomNormalizer, BomRow
from .schema import STANDARD_HEADERS, DERIVED_HEADERS
from .hierarchy import HierarchyResolver, compute_statistics
from typing import List, Dict, Any, Optional, Tuple
from pathlib import Path
import csv
import json
import logging
import openpyxl

logger = logging.getLogger(__name__)


class BomParser:
    """Parser for flattened multi-level BOM exports."""

    def __init__(self, normalizer: Optional[BomNormalizer] = None):
        """Initialize the BOM parser.

        Args:
            normalizer: Column normalizer (default: a new BomNormalizer)
        """
        self.adapters = []
        self.normalizer = normalizer or BomNormalizer()

    def register_adapter(self, adapter):
        """Register a file adapter for parsing.

        Args:
            adapter: Adapter instance with can_handle() and read() methods
        """
        self.adapters.append(adapter)

    def find_adapter(self, file_path: str):
        """Return the first registered adapter that handles the file, or None."""
        for adapter in self.adapters:
            if adapter.can_handle(file_path):
                return adapter
        return None

    def can_parse(self, file_path: str) -> bool:
        return self.find_adapter(file_path) is not None

    def read_raw(self, file_path: str) -> List[Dict[str, Any]]:
        """Read raw rows with original column names.

        Raises:
            ValueError: If no adapter is found for the file
        """
        adapter = self.find_adapter(file_path)
        if adapter is None:
            raise ValueError(f"No adapter found for {file_path}")
        return adapter.read(file_path)

    def parse(self, file_path: str) -> List[BomRow]:
        """Parse a BOM file into BomRow objects in physical order.

        Args:
            file_path: Path to the BOM file

        Returns:
            List of BomRow

        Raises:
            ValueError: If no adapter is found for the file
        """
        raw_rows = self.read_raw(file_path)
        rows = self.normalizer.normalize(raw_rows)
        logger.info(f"Parsed {len(rows)} rows from {file_path}")
        return rows

    def get_mapping_report(self, file_path: str) -> Dict[str, Any]:
        """Get a report of how columns from a file map to BomRow fields.

        Args:
            file_path: Path to the BOM file

        Returns:
            Dictionary with mapped, unmapped, derived and missing columns
        """
        return self.normalizer.get_mapping_report(self.read_raw(file_path))

    def resolve(self, file_path: str, pattern: Any, special_rules: Any = None,
                **kwargs: Any) -> Tuple[List[BomRow], HierarchyResolver]:
        """Parse a file and resolve SYS_CPN / Ttl. Usage.

        Returns:
            (resolved rows, the resolver) so callers can read diagnostics
        """
        resolver = HierarchyResolver(self.parse(file_path), pattern, special_rules, **kwargs)
        return resolver.process(), resolver

    def export(self, data: List[BomRow], output_path: str, format: Optional[str] = None) -> str:
        """Export resolved BOM rows to a file.

        Args:
            data: List of BomRow
            output_path: Path where the file should be saved
            format: Output format ('csv', 'excel', 'json', or None for auto-detect from extension)

        Returns:
            Path to the exported file

        Raises:
            ValueError: If format is not supported or data is empty
        """
        if not data:
            raise ValueError("Cannot export empty data")

        output_path = Path(output_path)

        # Auto-detect format from extension if not provided
        if format is None:
            suffix = output_path.suffix.lower()
            if suffix in ['.csv', '.tsv']:
                format = 'csv'
            elif suffix in ['.xlsx', '.xlsm']:
                format = 'excel'
            elif suffix == '.json':
                format = 'json'
            else:
                format = 'csv'
                output_path = output_path.with_suffix('.csv')

        format = format.lower()

        records = [row.to_record() for row in data]
        headers = self._headers(records)

        if format == 'csv':
            self._export_csv(records, output_path, headers)
        elif format == 'excel':
            self._export_excel(records, output_path, headers)
        elif format == 'json':
            self._export_json(records, output_path)
        else:
            raise ValueError(f"Unsupported export format: {format}. Supported formats: csv, excel, json")

        logger.info(f"Exported {len(records)} rows to {output_path}")
        return str(output_path)

    @staticmethod
    def _headers(records: List[Dict[str, Any]]) -> List[str]:
        """Standard headers, then extra columns in first-seen order, then derived."""
        headers = list(STANDARD_HEADERS)
        for record in records:
            for key in record:
                if key not in headers and key not in DERIVED_HEADERS:
                    headers.append(key)
        return headers + DERIVED_HEADERS

    def _export_csv(self, records: List[Dict[str, Any]], output_path: Path, headers: List[str]) -> None:
        """Export records to CSV file."""
        delimiter = '\t' if output_path.suffix.lower() == '.tsv' else ','
        # utf-8-sig so Excel opens non-ASCII product names correctly
        with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
            writer = csv.DictWriter(f, fieldnames=headers, extrasaction='ignore', delimiter=delimiter)
            writer.writeheader()
            for record in records:
                writer.writerow({header: record.get(header, '') for header in headers})

    def _export_excel(self, records: List[Dict[str, Any]], output_path: Path, headers: List[str]) -> None:
        """Export records to Excel file."""
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "BOM"

        ws.append(headers)
        for record in records:
            ws.append([record.get(header, '') for header in headers])

        wb.save(output_path)

    def _export_json(self, records: List[Dict[str, Any]], output_path: Path) -> None:
        """Export records to JSON file."""
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2, ensure_ascii=False, default=str)

    def resolve_and_export(self, input_path: str, output_path: str, pattern: Any,
                           special_rules: Any = None, format: Optional[str] = None,
                           **kwargs: Any) -> Dict[str, Any]:
        """Parse, resolve and export in one call.

        Returns:
            Dictionary with the output path and rounded statistics
        """
        rows, resolver = self.resolve(input_path, pattern, special_rules, **kwargs)
        path = self.export(rows, output_path, format=format)
        stats = compute_statistics(rows, resolver.diagnostics)
        return {"output_path": path, "statistics": stats.to_dict()}
