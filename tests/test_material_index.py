"""Tests for sequence renumbering and nearest-preceding lookup."""

from bomrollup import BomRow
from bomrollup.hierarchy import MaterialIndex, renumber_sequence


def make_table(materials):
    rows = [BomRow(level=2, sequence=99, material=material) for material in materials]
    renumber_sequence(rows)
    return rows


def test_renumber_overwrites_sequence():
    rows = [BomRow(level=1, sequence=s, material="M") for s in (7, 7, 3, 0)]
    renumber_sequence(rows)

    assert [row.sequence for row in rows] == [1, 2, 3, 4]


def test_renumber_empty_table():
    rows = []
    renumber_sequence(rows)

    assert rows == []


def test_index_positions_in_order():
    rows = make_table(["A", "B", "A", " A ", "C"])
    index = MaterialIndex.build(rows)

    assert index.positions("A") == [0, 2, 3]
    assert len(index) == 3
    assert "B" in index
    assert "Z" not in index


def test_blank_materials_excluded():
    rows = make_table(["A", "", "   ", "B"])
    index = MaterialIndex.build(rows)

    assert sorted(index) == ["A", "B"]
    assert index.nearest_preceding("", 10) is None


def test_nearest_preceding_is_strict():
    rows = make_table(["A", "X", "A", "Y", "A"])
    index = MaterialIndex.build(rows)

    assert index.nearest_preceding("A", 5) == 2
    assert index.nearest_preceding("A", 6) == 4
    assert index.nearest_preceding("A", 3) == 0
    assert index.nearest_preceding("A", 1) is None


def test_nearest_preceding_unbounded():
    rows = make_table(["A", "X", "A"])
    index = MaterialIndex.build(rows)

    assert index.nearest_preceding("A") == 2
    assert index.nearest_preceding("missing") is None


def test_lookup_key_is_trimmed():
    rows = make_table(["A"])
    index = MaterialIndex.build(rows)

    assert index.nearest_preceding(" A ", 5) == 0
