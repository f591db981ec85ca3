"""
Tests for listing-page discovery.

Run with: pytest tests/test_discovery.py -v
"""

from walaw.citations import find_chapters, find_rule_candidates, find_sections, find_titles
from walaw.citations.discovery import cite_param, dedupe_first, extract_links
from walaw.models import RuleSet

RCW_BASE = "https://app.leg.wa.gov/RCW/"
RULES_LISTING = "https://www.courts.wa.gov/court_rules/?fa=court_rules.list&group=clj&set=CRLJ"


RCW_INDEX = """
<html><body><table>
<tr><td><a href="default.aspx?cite=46">Title 46</a></td><td>Motor vehicles</td></tr>
<tr><td><a href="default.aspx?cite=9">Title 9</a></td><td>Crimes and punishments</td></tr>
<tr><td><a href="default.aspx?cite=9A">Title 9A</a></td><td>Washington criminal code</td></tr>
<tr><td><a href="default.aspx?cite=46">Title 46</a></td><td>Duplicate row</td></tr>
<tr><td><a href="default.aspx?cite=46&amp;pdf=true">PDF</a></td><td></td></tr>
<tr><td><a href="default.aspx?cite=46.61">46.61</a></td><td>Rules of the road</td></tr>
<tr><td><a href="/about">About</a></td><td></td></tr>
</table></body></html>
"""

CHAPTER_PAGE = """
<html><body><table>
<tr><td><a href="default.aspx?cite=46.61.502">46.61.502</a></td><td>Driving under the influence.</td></tr>
<tr><td><a href="default.aspx?cite=46.61.100">46.61.100</a></td><td>Keep right except when passing, etc.</td></tr>
<tr><td><a href="default.aspx?cite=46.62.010">46.62.010</a></td><td>Other chapter</td></tr>
<tr><td><a href="default.aspx?cite=46.61">Chapter 46.61</a></td><td>Self link</td></tr>
<tr><td><a href="default.aspx?cite=46.61.abc">broken</a></td><td></td></tr>
<tr><td><a href="default.aspx?cite=46.61.502&amp;pdf=true">PDF</a></td><td></td></tr>
</table></body></html>
"""


class TestCiteParam:
    """The cite query parameter."""

    def test_reads_cite(self):
        assert cite_param("https://app.leg.wa.gov/RCW/default.aspx?cite=46.61") == "46.61"

    def test_case_insensitive_key(self):
        assert cite_param("https://app.leg.wa.gov/RCW/default.aspx?Cite=46.61") == "46.61"

    def test_pdf_view_excluded(self):
        assert cite_param("https://app.leg.wa.gov/RCW/default.aspx?cite=46&pdf=true") is None

    def test_missing(self):
        assert cite_param("https://app.leg.wa.gov/RCW/") is None


class TestStatuteDiscovery:
    """Titles, chapters and sections from cite= anchors."""

    def test_titles_in_page_order_first_wins(self):
        """Duplicates are dropped, first occurrence kept, page order preserved."""
        titles = find_titles(RCW_INDEX, RCW_BASE)

        assert [str(t.citation) for t in titles] == ["46", "9", "9A"]
        assert titles[0].name == "Motor vehicles"
        assert titles[0].url == "https://app.leg.wa.gov/RCW/default.aspx?cite=46"

    def test_chapters_restricted_to_title(self):
        chapters = find_chapters(RCW_INDEX, RCW_BASE, "46")

        assert [str(c.citation) for c in chapters] == ["46.61"]
        assert chapters[0].name == "Rules of the road"

    def test_sections_restricted_to_chapter(self):
        """Only depth-3 cites under the chapter survive; malformed ones are skipped."""
        url = "https://app.leg.wa.gov/RCW/default.aspx?cite=46.61"
        sections = find_sections(CHAPTER_PAGE, url, "46.61")

        assert [str(s.citation) for s in sections] == ["46.61.502", "46.61.100"]
        assert sections[0].name == "Driving under the influence."

    def test_wac_separator(self):
        html = '<a href="default.aspx?cite=296-24-001">WAC 296-24-001 Purpose.</a>'
        sections = find_sections(html, "https://app.leg.wa.gov/WAC/", "296-24", separator="-")

        assert [str(s.citation) for s in sections] == ["296-24-001"]
        assert sections[0].name == "Purpose."

    def test_empty_page(self):
        assert find_titles("", RCW_BASE) == []

    def test_malformed_href_skipped(self):
        """An href urljoin cannot parse is dropped; the rest of the page still counts."""
        html = (
            '<a href="http://[bad">Broken</a>'
            '<a href="default.aspx?cite=46">Title 46</a>'
        )
        assert [link.url for link in extract_links(html, RCW_BASE)] == [
            "https://app.leg.wa.gov/RCW/default.aspx?cite=46"
        ]
        assert [str(t.citation) for t in find_titles(html, RCW_BASE)] == ["46"]


class TestRuleDiscovery:
    """Rule documents on a rule-set listing."""

    LISTING = """
    <html><body><ul>
    <li><a href="/court_rules/pdf/CRLJ/CLJ_CRLJ_01_01_00.pdf">CRLJ 1.1 Scope of Rules</a></li>
    <li><a href="/court_rules/pdf/CRLJ/CLJ_CRLJ_60_00_00.pdf">PDF</a></li>
    <li><a href="/court_rules/pdf/CRLJ/CLJ_CRLJ_01_01_00.pdf">duplicate</a></li>
    <li><a href="/court_rules/pdf/RALJ/CLJ_RALJ_01_01_00.pdf">RALJ 1.1</a></li>
    <li><a href="/court_rules/?fa=court_rules.display&amp;group=clj&amp;set=CRLJ&amp;ruleid=clcrlj03">CRLJ 3 Commencement of Action</a></li>
    <li><a href="/court_rules/?fa=court_rules.display&amp;group=clj&amp;set=CRLJ&amp;ruleid=clcrlj04">Process</a></li>
    <li><a href="/index.cfm">Home</a></li>
    </ul></body></html>
    """

    def test_candidates(self):
        candidates = find_rule_candidates(self.LISTING, RULES_LISTING, RuleSet.CRLJ)

        assert [c.rule_number for c in candidates] == ["1.1", "60.0", "3.0", "4.0"]
        assert [c.format for c in candidates] == ["pdf", "pdf", "html", "html"]

    def test_names(self):
        """Names come from anchor text, else 'Rule <number>'."""
        candidates = {c.rule_number: c for c in find_rule_candidates(self.LISTING, RULES_LISTING, RuleSet.CRLJ)}

        assert candidates["1.1"].name == "Scope of Rules"
        assert candidates["60.0"].name == "Rule 60.0"
        assert candidates["3.0"].name == "Commencement of Action"
        assert candidates["4.0"].name == "Process"

    def test_urls_resolved(self):
        candidates = find_rule_candidates(self.LISTING, RULES_LISTING, RuleSet.CRLJ)
        assert candidates[0].url == "https://www.courts.wa.gov/court_rules/pdf/CRLJ/CLJ_CRLJ_01_01_00.pdf"

    def test_letter_scheme_listing(self):
        html = '<a href="/court_rules/pdf/RPC/GA_RPC_01_08_01.pdf">RPC 1.8A</a>'
        url = "https://www.courts.wa.gov/court_rules/?fa=court_rules.list&group=ga&set=RPC"
        candidates = find_rule_candidates(html, url, RuleSet.RPC)

        assert [c.rule_number for c in candidates] == ["1.8a"]


class TestDedupe:
    def test_first_wins(self):
        items = [("a", 1), ("b", 2), ("a", 3)]
        assert dedupe_first(items, key=lambda i: i[0]) == [("a", 1), ("b", 2)]
