"""Tests for spreadsheet extraction from ZIP archives."""

import zipfile

import pytest

from bomrollup.archive import is_archive, list_members, open_archive, suffix_matches


@pytest.fixture
def bom_zip(tmp_path):
    path = tmp_path / "exports.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("NB-15.xls", b"a")
        zf.writestr("nested/NB-16.XLS", b"b")
        zf.writestr("other/NB-15.xls", b"c")
        zf.writestr("summary.xlsx", b"d")
        zf.writestr("notes.xls.txt", b"e")
        zf.writestr("empty_dir/", b"")
    return path


class TestSuffixMatching:
    @pytest.mark.parametrize("name, expected", [
        ("a.xls", True),
        ("dir/A.XLS", True),
        ("a.xlsx", False),
        ("a.xlsm", False),
        ("a.xls.txt", False),
        ("xls", False),
    ])
    def test_suffix_matches(self, name, expected):
        assert suffix_matches(name, ".xls") is expected

    def test_is_archive(self):
        assert is_archive("exports.ZIP")
        assert not is_archive("exports.xls")


class TestArchive:
    def test_list_members(self, bom_zip):
        assert list_members(bom_zip) == ["NB-15.xls", "nested/NB-16.XLS", "other/NB-15.xls"]

    def test_other_suffix(self, bom_zip):
        assert list_members(bom_zip, ".xlsx") == ["summary.xlsx"]

    def test_open_archive_extracts_and_cleans_up(self, bom_zip):
        with open_archive(bom_zip) as paths:
            assert [p.read_bytes() for p in paths] == [b"a", b"b", b"c"]
            # Same file name in two folders stays apart
            assert paths[0] != paths[2]
            extracted_dir = paths[0].parent

        assert not extracted_dir.exists()

    def test_missing_archive(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list_members(tmp_path / "missing.zip")

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / "broken.zip"
        path.write_bytes(b"not a zip")

        with pytest.raises(ValueError):
            list_members(path)
