"""Tests for prefix matching, special rules and precedence."""

import pytest

from bomrollup.hierarchy import (
    ConfigError,
    PatternError,
    PrecedenceTable,
    PrefixMatcher,
    SpecialRule,
    SpecialRuleSet,
)
from bomrollup.hierarchy.rules import split_prefixes


class TestPrefixMatcher:
    """Tests for the primary pattern."""

    def test_matches_any_prefix(self):
        matcher = PrefixMatcher.compile("45|43|64|X75|X66")

        assert matcher.valid
        assert matcher.matches("45ABC")
        assert matcher.matches("X75-001")
        assert not matcher.matches("A45")
        assert not matcher.matches("")
        assert not matcher.matches(None)

    def test_prefixes_are_literal(self):
        """Regex metacharacters in a prefix are matched literally."""
        matcher = PrefixMatcher.compile("A.B|C+")

        assert matcher.matches("A.B-1")
        assert not matcher.matches("AXB-1")
        assert matcher.matches("C+2")
        assert not matcher.matches("CC2")

    def test_whitespace_and_empty_alternatives(self):
        matcher = PrefixMatcher.compile(" 45 || 43 ")

        assert matcher.valid
        assert matcher.prefixes == ["45", "43"]
        assert not matcher.matches("99")

    @pytest.mark.parametrize("config", ["", "|", "   ", None, 45])
    def test_invalid_degrades_to_match_nothing(self, config):
        matcher = PrefixMatcher.compile(config)

        assert not matcher.valid
        assert matcher.error
        assert not matcher.matches("45ABC")
        assert not matcher.matches("anything")

    def test_invalid_strict_raises(self):
        with pytest.raises(PatternError):
            PrefixMatcher.compile("", strict=True)

    def test_numeric_material(self):
        assert PrefixMatcher.compile("45").matches(45123)


class TestSplitPrefixes:
    def test_list_input(self):
        prefixes, problems = split_prefixes(["A", " B ", "A"])

        assert prefixes == ["A", "B"]
        assert problems == []

    def test_reports_empty_parts(self):
        prefixes, problems = split_prefixes("A||B")

        assert prefixes == ["A", "B"]
        assert problems == ["empty alternative dropped"]


class TestSpecialRule:
    """Tests for (level bound, prefixes) rules."""

    def test_from_legacy_mapping(self):
        rule = SpecialRule.from_config({"lv": 2, "prefix": "DCS"})

        assert rule == SpecialRule(2, ("DCS",))

    def test_alternate_keys_and_multiple_prefixes(self):
        rule = SpecialRule.from_config({"level_bound": "3", "prefixes": "DCS|XYZ"})

        assert rule.level_bound == 3
        assert rule.prefixes == ("DCS", "XYZ")

    def test_bound_is_inclusive(self):
        rule = SpecialRule(2, ("DCS",))

        assert rule.matches(1, "DCS-100")
        assert rule.matches(2, "DCS-100")
        assert not rule.matches(3, "DCS-100")
        assert not rule.matches(2, "XDCS")

    def test_material_is_trimmed(self):
        assert SpecialRule(2, ("DCS",)).matches(2, "  DCS-1 ")

    @pytest.mark.parametrize("config", [
        {"prefix": "DCS"},
        {"lv": 2},
        {"lv": "two", "prefix": "DCS"},
        {"lv": 2, "prefix": "|"},
        {"lv": True, "prefix": "DCS"},
        "DCS",
    ])
    def test_malformed_rule(self, config):
        with pytest.raises(ConfigError):
            SpecialRule.from_config(config)


class TestSpecialRuleSet:
    def test_none(self):
        rules = SpecialRuleSet.from_config(None)

        assert len(rules) == 0
        assert not rules.matches(1, "DCS")

    def test_single_and_list(self):
        single = SpecialRuleSet.from_config({"lv": 2, "prefix": "DCS"})
        several = SpecialRuleSet.from_config([{"lv": 2, "prefix": "DCS"}, {"lv": 4, "prefix": "XYZ"}])

        assert len(single) == 1
        assert len(several) == 2
        assert several.matches(4, "XYZ-9")
        assert not several.matches(3, "DCS-1")

    def test_unsupported(self):
        with pytest.raises(ConfigError):
            SpecialRuleSet.from_config(42)


class TestPrecedenceTable:
    def test_rank(self):
        table = PrecedenceTable.from_config(["X75", "45"])

        assert table.rank("X75-A") == 0
        assert table.rank("45-B") == 1
        assert table.rank("64-C") is None

    def test_can_be_superseded(self):
        table = PrecedenceTable.from_config(["X75|X66", "45"])

        assert table.can_be_superseded(0)
        assert not table.can_be_superseded(1)
        assert not table.can_be_superseded(None)

    def test_empty(self):
        table = PrecedenceTable.from_config(None)

        assert len(table) == 0
        assert table.rank("45") is None

    def test_invalid_class(self):
        with pytest.raises(ConfigError):
            PrecedenceTable.from_config(["X75", ""])

    def test_not_a_list(self):
        with pytest.raises(ConfigError):
            PrecedenceTable.from_config("X75|45")
