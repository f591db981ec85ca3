"""
Tests for the read-only query engine.

Run with: pytest tests/test_query_engine.py -v
"""

import pytest

from conftest import make_section
from walaw.models import Family, RuleDocument
from walaw.retrieval import QueryEngine, quote_fts_query


@pytest.fixture
def engine(store):
    """A small corpus across all three families."""
    sections = [
        make_section("9.41.040", "A person is guilty of unlawful firearm possession in the first degree.",
                     title_name="Crimes and punishments", chapter_name="Firearms and dangerous weapons",
                     section_name="Unlawful possession of firearms."),
        make_section("9.41.010", "Definitions. Firearm means a weapon from which a projectile may be fired.",
                     title_name="Crimes and punishments", chapter_name="Firearms and dangerous weapons"),
        make_section("10.99.020", "Domestic violence definitions. Firearm possession may be restricted by the court.",
                     title_name="Criminal procedure", chapter_name="Domestic violence"),
        make_section("46.61.502", "Driving under the influence of intoxicating liquor.",
                     title_name="Motor vehicles", chapter_name="Rules of the road"),
        make_section("46.61.100", "Keep right except when passing.",
                     title_name="Motor vehicles", chapter_name="Rules of the road"),
        make_section("46.61.20", "Another section used for ordering.",
                     title_name="Motor vehicles", chapter_name="Rules of the road"),
        make_section("46.9.010", "Ordering of chapters by integer value.",
                     title_name="Motor vehicles", chapter_name="Chapter nine"),
        make_section("9A.44.010", "Sex offenses definitions.",
                     title_name="Washington criminal code", chapter_name="Sex offenses"),
    ]
    for section in sections:
        store.upsert_section(Family.RCW, section)
    store.upsert_section(Family.WAC, make_section(
        "296-24-001", "Safety standards for general industry.", separator="-",
        title_name="Labor and industries", chapter_name="General safety",
    ))

    rules = [
        RuleDocument(rule_set="CRLJ", rule_number="60.0", rule_name="Relief From Judgment",
                     full_text="CRLJ 60 Relief from judgment or order."),
        RuleDocument(rule_set="CRLJ", rule_number="10.0", rule_name="Form of Pleadings",
                     full_text="CRLJ 10 Form of pleadings."),
        RuleDocument(rule_set="CRLJ", rule_number="2.0", rule_name="One Form of Action",
                     full_text="CRLJ 2 There shall be one form of action."),
        RuleDocument(rule_set="CRLJ", rule_number="1.1.0", rule_name="Odd",
                     full_text="Stored with an explicit zero sub-part."),
        RuleDocument(rule_set="IRLJ", rule_number="1.1", rule_name="Scope",
                     full_text="IRLJ 1.1 Scope. Firearm possession is not an infraction."),
        RuleDocument(rule_set="RPC", rule_number="1.8a", rule_name="Conflict",
                     full_text="RPC 1.8a Conflict of interest."),
    ]
    for rule in rules:
        store.upsert_rule(rule)
    return QueryEngine(store)


class TestLookup:
    """Exact lookup by citation."""

    def test_section(self, engine):
        section = engine.get_section(Family.RCW, "9.41.040")
        assert section.section_name == "Unlawful possession of firearms."
        assert section.chapter_num == "9.41"

    def test_section_with_prefix_and_lowercase_suffix(self, engine):
        assert engine.get_section(Family.RCW, "RCW 9.41.040").citation == "9.41.040"
        assert engine.get_section(Family.RCW, "9a.44.010").citation == "9A.44.010"

    def test_section_not_found(self, engine):
        assert engine.get_section(Family.RCW, "99.99.999") is None
        assert engine.get_section(Family.RCW, "not a cite") is None
        assert engine.get_section(Family.WAC, "9.41.040") is None

    def test_rule_exact(self, engine):
        assert engine.get_rule("CRLJ", "60.0").rule_name == "Relief From Judgment"
        assert engine.get_rule("rpc", "1.8a").rule_name == "Conflict"

    def test_rule_zero_minor_fallback(self, engine):
        """A bare number finds '<number>.0'."""
        assert engine.get_rule("CRLJ", "60").rule_number == "60.0"

    def test_rule_fallback_applies_once(self, engine):
        """'1.1' is not widened to '1.1.0'; only dot-less numbers fall back."""
        assert engine.get_rule("CRLJ", "1.1") is None
        assert engine.get_rule("CRLJ", "1.1.0") is not None

    def test_rule_number_normalized(self, engine):
        """Lookups go through the same grammar as ingestion."""
        assert engine.get_rule("RPC", "1.8A").rule_number == "1.8a"
        assert engine.get_rule("RPC", "1.8.1").rule_number == "1.8a"
        assert engine.get_rule("CRLJ", "60.00").rule_number == "60.0"
        assert engine.get_rule("CRLJ", " 010 ").rule_number == "10.0"

    def test_section_keeps_last_amended(self, engine, store):
        section = make_section("46.61.504", "Physical control of vehicle under the influence.")
        section.last_amended = "2013"
        store.upsert_section(Family.RCW, section)

        assert engine.get_section(Family.RCW, "46.61.504").last_amended == "2013"

    def test_rule_not_found(self, engine):
        assert engine.get_rule("CRLJ", "61") is None
        assert engine.get_rule("RALJ", "60") is None

    def test_get_by_citation(self, engine):
        assert engine.get_by_citation(Family.COURT_RULES, "CRLJ 60").rule_number == "60.0"
        assert engine.get_by_citation(Family.RCW, "46.61.502").citation == "46.61.502"
        assert engine.get_by_citation(Family.COURT_RULES, "CRLJ") is None


class TestHierarchy:
    """Browse listings in numeric order."""

    def test_titles(self, engine):
        titles = engine.list_hierarchy(Family.RCW)

        assert [t.number for t in titles] == ["9", "9A", "10", "46"]
        assert titles[0].name == "Crimes and punishments"
        assert titles[0].count == 2
        assert titles[-1].count == 4

    def test_chapters(self, engine):
        """Chapter 46.9 sorts before 46.61."""
        chapters = engine.list_hierarchy(Family.RCW, "46")

        assert [c.number for c in chapters] == ["46.9", "46.61"]
        assert chapters[1].name == "Rules of the road"
        assert chapters[1].count == 3

    def test_sections(self, engine):
        sections = engine.list_hierarchy(Family.RCW, "46.61")
        assert [s.number for s in sections] == ["46.61.20", "46.61.100", "46.61.502"]

    def test_wac(self, engine):
        assert [t.number for t in engine.list_hierarchy(Family.WAC)] == ["296"]
        assert [c.number for c in engine.list_hierarchy(Family.WAC, "296")] == ["296-24"]

    def test_malformed_parent(self, engine):
        assert engine.list_hierarchy(Family.RCW, "abc") == []
        assert engine.list_hierarchy(Family.RCW, "46.61.502") == []

    def test_rules(self, engine):
        """Rule sets in fixed order, rules numerically within each set."""
        rules = engine.list_hierarchy(Family.COURT_RULES)
        assert [(r.parent, r.number) for r in rules] == [
            ("IRLJ", "1.1"),
            ("CRLJ", "1.1.0"),
            ("CRLJ", "2.0"),
            ("CRLJ", "10.0"),
            ("CRLJ", "60.0"),
            ("RPC", "1.8a"),
        ]

    def test_rules_for_one_set(self, engine):
        assert [r.number for r in engine.list_hierarchy(Family.COURT_RULES, "RPC")] == ["1.8a"]


class TestSearch:
    """Merged ranked search."""

    def test_union_when_families_have_few_hits(self, engine):
        """limit=6: every family gets two slots and short families are not padded or cut."""
        results = engine.search("firearm possession", limit=6)

        assert {(r.family, r.citation) for r in results} == {
            ("RCW", "9.41.040"),
            ("RCW", "10.99.020"),
            ("COURT_RULES", "IRLJ 1.1"),
        }

    def test_never_exceeds_limit(self, engine):
        for limit in (1, 2, 3, 4, 7):
            assert len(engine.search("firearm", limit=limit)) <= limit

    def test_sorted_by_score_descending(self, engine):
        results = engine.search("firearm", limit=20)
        scores = [r.score for r in results]

        assert results
        assert scores == sorted(scores, reverse=True)
        assert all(score >= 0 for score in scores)

    def test_snippet_highlights(self, engine):
        result = engine.search("intoxicating", limit=3)[0]
        assert result.citation == "46.61.502"
        assert "<b>intoxicating</b>" in result.snippet
        assert result.title_name == "Motor vehicles"

    def test_rule_hits_carry_rule_name(self, engine):
        result = engine.search("pleadings", limit=3)[0]
        assert result.family == "COURT_RULES"
        assert result.citation == "CRLJ 10.0"
        assert result.section_name == "Form of Pleadings"

    def test_bad_syntax_retried_as_terms(self, engine):
        results = engine.search('firearm "possession', limit=6)
        assert {r.citation for r in results} >= {"9.41.040"}

    def test_empty_and_zero_limit(self, engine):
        assert engine.search("", limit=5) == []
        assert engine.search("   ", limit=5) == []
        assert engine.search("firearm", limit=0) == []

    def test_column_filter_valid_everywhere(self, engine):
        """full_text exists in every index, so the filter is used as given."""
        results = engine.search("full_text:pleadings", limit=6)
        assert [r.citation for r in results] == ["CRLJ 10.0"]

    def test_column_filter_missing_in_one_index(self, engine):
        """section_name is not a court rules column: every family searches the quoted terms."""
        assert engine.search("section_name:unlawful", limit=6) == []

    def test_nothing_searchable(self, engine):
        assert engine.search('"', limit=5) == []

    def test_quote_fts_query(self):
        assert quote_fts_query('firearm "possession') == '"firearm" "possession"'


class TestStatistics:
    def test_counts(self, engine):
        stats = engine.get_statistics()

        assert stats.rcw_count == 8
        assert stats.wac_count == 1
        assert stats.court_rules_count == 6
        assert stats.rule_set_counts == {"CRLJ": 4, "IRLJ": 1, "RPC": 1}
        assert stats.version == "2"

    def test_last_update_unknown_until_stamped(self, engine, store):
        assert engine.get_statistics().last_update == "Unknown"
        store.stamp_last_update()
        assert engine.get_statistics().last_update != "Unknown"
