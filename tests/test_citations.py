"""
Tests for the citation and rule-number grammars.

Run with: pytest tests/test_citations.py -v
"""

import pytest

from walaw.citations import (
    CitationError,
    canonical_rule_number,
    chapter_of,
    citation_sort_key,
    parse_citation,
    parse_rule_filename,
    rule_sort_key,
    strip_family_prefix,
    title_of,
)
from walaw.citations.dotted import segment_sort_key
from walaw.citations.rules import parse_rule_anchor, rule_display_name
from walaw.models import Family, RuleSet


class TestDottedCitations:
    """RCW / WAC citation parsing."""

    def test_section_has_chapter_and_title(self):
        """A three-segment cite knows its chapter and title."""
        citation = parse_citation("46.61.502")

        assert citation.depth == 3
        assert citation.title == "46"
        assert citation.chapter == "46.61"
        assert citation.section_num == "502"
        assert str(citation) == "46.61.502"

    @pytest.mark.parametrize("cite", ["46.61.502", "9A.44.010", "43.21C.030", "1.04.010"])
    def test_chapter_and_title_helpers(self, cite):
        """chapter(A.B.C) == A.B and title(A.B.C) == A."""
        a, b, _ = cite.split(".")
        assert chapter_of(cite) == f"{a}.{b}"
        assert title_of(cite) == a

    def test_wac_separator(self):
        """WAC cites use dashes."""
        citation = parse_citation("296-24-001", separator="-")

        assert citation.chapter == "296-24"
        assert citation.title == "296"

    def test_letter_suffix_uppercased(self):
        """Letter suffixes are normalized to upper case."""
        assert str(parse_citation("9a.44.010")) == "9A.44.010"
        assert str(parse_citation(" 43.21c ")) == "43.21C"

    @pytest.mark.parametrize("raw", ["", "   ", "46..502", "46.61.502.1", "RCW46", "46.61.abc"])
    def test_malformed_rejected(self, raw):
        """Anything outside the grammar raises CitationError."""
        with pytest.raises(CitationError):
            parse_citation(raw)

    def test_strip_family_prefix(self):
        """A leading family tag is dropped."""
        assert strip_family_prefix("RCW 46.61.502", Family.RCW) == "46.61.502"
        assert strip_family_prefix("wac  296-24-001", Family.WAC) == "296-24-001"
        assert strip_family_prefix("46.61.502", Family.RCW) == "46.61.502"


class TestNumericOrdering:
    """Sort keys compare integers, not strings."""

    def test_titles(self):
        """9 < 9A < 10 < 46."""
        assert sorted(["46", "10", "9A", "9"], key=segment_sort_key) == ["9", "9A", "10", "46"]

    def test_chapters(self):
        """Chapter 9 sorts before chapter 46 within a title."""
        chapters = ["46.61", "46.9", "46.100"]
        assert sorted(chapters, key=citation_sort_key) == ["46.9", "46.61", "46.100"]

    def test_malformed_sort_last(self):
        """Cites that do not parse go to the end."""
        assert sorted(["bogus", "46.61", "9.41"], key=citation_sort_key) == ["9.41", "46.61", "bogus"]


class TestRuleFilenames:
    """Fixed-width rule PDF filenames."""

    def test_zero_sub_part_has_no_suffix(self):
        """CRLJ (1, 1, 0) is rule 1.1."""
        assert str(parse_rule_filename("CLJ_CRLJ_01_01_00.pdf", RuleSet.CRLJ)) == "1.1"

    def test_equivalent_filenames_normalize_identically(self):
        """Padding and case differences do not change the canonical number."""
        forms = [
            "CLJ_CRLJ_01_01_00.pdf",
            "CLJ_CRLJ_1_1_0.pdf",
            "clj_crlj_001_01_000.PDF",
            "https://www.courts.wa.gov/court_rules/pdf/CRLJ/CLJ_CRLJ_01_01_00.pdf",
        ]
        assert {str(parse_rule_filename(f, "CRLJ")) for f in forms} == {"1.1"}

    def test_decimal_sub_part(self):
        """Decimal rule sets render a non-zero sub-part as a third number."""
        assert str(parse_rule_filename("CLJ_RALJ_02_07_03.pdf", RuleSet.RALJ)) == "2.7.3"

    def test_letter_sub_part(self):
        """RPC renders a non-zero sub-part as a letter."""
        assert str(parse_rule_filename("GA_RPC_01_07_00.pdf", RuleSet.RPC)) == "1.7"
        assert str(parse_rule_filename("GA_RPC_01_08_01.pdf", RuleSet.RPC)) == "1.8a"

    def test_other_rule_set_rejected(self):
        """A filename for another rule set is not accepted."""
        with pytest.raises(CitationError):
            parse_rule_filename("CLJ_RALJ_01_01_00.pdf", RuleSet.CRLJ)

    def test_not_a_filename(self):
        with pytest.raises(CitationError):
            parse_rule_filename("rules.pdf", RuleSet.CRLJ)


class TestRuleNumbers:
    """Page-derived rule numbers."""

    def test_bare_major_gets_zero_minor(self):
        """60 becomes 60.0."""
        assert canonical_rule_number("60", "CRLJ") == "60.0"

    def test_dotted_number_kept(self):
        assert canonical_rule_number("1.1", "CRLJ") == "1.1"
        assert canonical_rule_number("1.1.2", "RALJ") == "1.1.2"

    def test_letter_suffix_lowercased(self):
        assert canonical_rule_number("1.8A", "RPC") == "1.8a"

    def test_unknown_rule_set(self):
        with pytest.raises(CitationError):
            canonical_rule_number("1.1", "XYZ")

    def test_sort_key(self):
        """Rules sort by major, minor, sub as integers."""
        numbers = ["10.0", "2.0", "1.1.2", "1.1", "1.10"]
        assert sorted(numbers, key=rule_sort_key) == ["1.1", "1.1.2", "1.10", "2.0", "10.0"]

    def test_anchor_text(self):
        """Anchor text splits into number and name."""
        number, name = parse_rule_anchor("CRLJ 60 Relief From Judgment or Order", RuleSet.CRLJ)
        assert str(number) == "60.0"
        assert name == "Relief From Judgment or Order"

        number, name = parse_rule_anchor("RPC 1.7 - Conflict of Interest: Current Clients", "RPC")
        assert str(number) == "1.7"
        assert name == "Conflict of Interest: Current Clients"

    def test_display_name_defaults(self):
        """Links without a usable name fall back to 'Rule <number>'."""
        assert rule_display_name("PDF", RuleSet.CRLJ, "60.0") == "Rule 60.0"
        assert rule_display_name("CLJ_CRLJ_60_00_00.pdf", RuleSet.CRLJ, "60.0") == "Rule 60.0"
        assert rule_display_name("CRLJ 60 Relief", RuleSet.CRLJ, "60.0") == "Relief"
