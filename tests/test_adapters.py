"""Tests for CSV, XLSX and XLS adapters."""

import openpyxl
import pytest

from bomrollup.adapters import CsvAdapter, ExcelAdapter, XlsAdapter, default_adapters


SAP_CSV = (
    "LV,LN,Material,Part Number,Unit Usg,Product\n"
    "1,1,ROOT,,1,NB-15\n"
    "2,2,45ABC,ROOT,2,NB-15\n"
    ",,,,,\n"
    "3,3,X1,45ABC,5,NB-15\n"
)


class TestCsvAdapter:
    def test_can_handle(self):
        adapter = CsvAdapter()

        assert adapter.can_handle("bom.csv")
        assert adapter.can_handle("BOM.TSV")
        assert not adapter.can_handle("bom.xlsx")

    def test_read_skips_blank_rows(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_text(SAP_CSV, encoding="utf-8")

        rows = CsvAdapter().read(str(path))

        assert len(rows) == 3
        assert rows[1] == {
            "LV": "2", "LN": "2", "Material": "45ABC",
            "Part Number": "ROOT", "Unit Usg": "2", "Product": "NB-15",
        }

    def test_semicolon_and_bom(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(b"\xef\xbb\xbf" + "LV;Material;Part Number\n1;ROOT;\n2;CHILD;ROOT\n".encode("utf-8"))

        rows = CsvAdapter().read(str(path))

        assert rows[0]["LV"] == "1"
        assert rows[1]["Part Number"] == "ROOT"

    def test_tsv(self, tmp_path):
        path = tmp_path / "bom.tsv"
        path.write_text("LV\tMaterial\n1\tROOT\n", encoding="utf-8")

        assert CsvAdapter().read(str(path)) == [{"LV": "1", "Material": "ROOT"}]

    def test_read_bytes(self):
        rows = CsvAdapter().read_bytes(SAP_CSV.encode("utf-8"), "bom.csv")

        assert [row["Material"] for row in rows] == ["ROOT", "45ABC", "X1"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_bytes(b"")

        assert CsvAdapter().read(str(path)) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CsvAdapter().read(str(tmp_path / "nope.csv"))


class TestExcelAdapter:
    def test_read_first_sheet(self, tmp_path):
        path = tmp_path / "bom.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["LV", "Material", "Part Number", "Unit Usg", None])
        ws.append([1, "ROOT", None, 1, None])
        ws.append([None, None, None, None, None])
        ws.append([2, "45ABC", "ROOT", 2.5, "ignored"])
        wb.save(path)

        rows = ExcelAdapter().read(str(path))

        assert rows == [
            {"LV": 1, "Material": "ROOT", "Part Number": None, "Unit Usg": 1},
            {"LV": 2, "Material": "45ABC", "Part Number": "ROOT", "Unit Usg": 2.5},
        ]

    def test_can_handle(self):
        adapter = ExcelAdapter()

        assert adapter.can_handle("a.xlsx")
        assert not adapter.can_handle("a.xls")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExcelAdapter().read(str(tmp_path / "nope.xlsx"))


class TestXlsAdapter:
    def test_can_handle_only_legacy_suffix(self):
        adapter = XlsAdapter()

        assert adapter.can_handle("ZSDR392.XLS")
        assert not adapter.can_handle("bom.xlsx")
        assert not adapter.can_handle("bom.xls.bak")

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bad.xls"
        path.write_bytes(b"this is not a workbook")

        with pytest.raises(ValueError):
            XlsAdapter().read(str(path))


def test_default_adapters_cover_all_formats():
    adapters = default_adapters()

    for name in ("a.xls", "a.xlsx", "a.csv"):
        assert sum(adapter.can_handle(name) for adapter in adapters) == 1
