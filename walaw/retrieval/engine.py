"""
Read-only query engine over the document store.

Operations:
- Exact lookup by citation (RCW/WAC) or (rule set, rule number)
- Hierarchical browse: titles -> chapters -> sections, rules by rule set
- Merged ranked full-text search across all three family indexes
- Corpus statistics

Lookup misses return None (or an empty list); they are never exceptions.
"""

import logging
import re
import sqlite3
from typing import Optional, Union

from ..citations import (
    CitationError,
    canonical_rule_number,
    citation_sort_key,
    parse_citation,
    rule_sort_key,
    separator_for,
    strip_family_prefix,
)
from ..citations.dotted import segment_sort_key
from ..models import (
    CorpusStatistics,
    Family,
    HierarchyEntry,
    LegalSection,
    RuleDocument,
    RuleSet,
    SearchResult,
)
from ..storage import DocumentStore, SNIPPET_COLUMN

logger = logging.getLogger(__name__)

SNIPPET_TOKENS = 64

_TOKEN_PATTERN = re.compile(r"\w+", re.UNICODE)


def quote_fts_query(query: str) -> str:
    """Turn free text into an FTS5 query of quoted terms (implicit AND)."""
    return " ".join(f'"{token}"' for token in _TOKEN_PATTERN.findall(query))


class QueryEngine:
    """Read-only access to the law corpus."""

    def __init__(self, store: DocumentStore):
        """Initialize the engine.

        Args:
            store: An open DocumentStore (normally opened read-only)
        """
        self.store = store

    @property
    def conn(self) -> sqlite3.Connection:
        return self.store.conn

    # ------------------------------------------------------------------
    # Exact lookup
    # ------------------------------------------------------------------

    def get_section(self, family: Family, citation: str) -> Optional[LegalSection]:
        """Look up one RCW/WAC section by citation ("46.61.502", "RCW 46.61.502")."""
        if not family.is_statute:
            raise ValueError(f"{family.value} has no sections")
        raw = strip_family_prefix(citation or "", family)
        try:
            key = str(parse_citation(raw, separator_for(family)))
        except CitationError:
            key = raw
        row = self.conn.execute(
            f"SELECT * FROM {family.table} WHERE citation = ?", (key,)
        ).fetchone()
        return LegalSection.from_row(row) if row else None

    def get_rule(self, rule_set: Union[RuleSet, str], rule_number: str) -> Optional[RuleDocument]:
        """Look up one court rule.

        The number is first put in the rule set's canonical form (``"1.7A"``
        finds ``"1.7a"``), then tried as given. When it has no ``.``,
        ``<number>.0`` is tried once (``"60"`` finds ``"60.0"``).
        """
        set_name = str(getattr(rule_set, "value", rule_set)).strip().upper()
        number = (rule_number or "").strip()
        if not number:
            return None

        candidates = []
        try:
            candidates.append(canonical_rule_number(number, set_name))
        except CitationError as e:
            logger.debug(f"[QUERY] {set_name} {number!r} is not canonical: {e}")
        candidates.append(number)
        if "." not in number:
            candidates.append(f"{number}.0")

        sql = "SELECT * FROM court_rules WHERE rule_set = ? AND rule_number = ?"
        for candidate in dict.fromkeys(candidates):
            row = self.conn.execute(sql, (set_name, candidate)).fetchone()
            if row is not None:
                return RuleDocument.from_row(row)
        return None

    def get_by_citation(
        self, family: Family, citation: str
    ) -> Optional[Union[LegalSection, RuleDocument]]:
        """Look up any record; court rules are cited as ``"<SET> <number>"``."""
        if family.is_statute:
            return self.get_section(family, citation)
        parts = (citation or "").split()
        if len(parts) != 2:
            return None
        return self.get_rule(parts[0], parts[1])

    # ------------------------------------------------------------------
    # Hierarchical browse
    # ------------------------------------------------------------------

    def list_titles(self, family: Family) -> list[HierarchyEntry]:
        rows = self.conn.execute(
            f"""
            SELECT title_num, MAX(title_name) AS name, COUNT(*) AS count
            FROM {family.table}
            GROUP BY title_num
            """
        ).fetchall()
        entries = [HierarchyEntry(number=r["title_num"], name=r["name"], count=r["count"]) for r in rows]
        entries.sort(key=lambda e: segment_sort_key(e.number))
        return entries

    def list_chapters(self, family: Family, title_num: str) -> list[HierarchyEntry]:
        separator = separator_for(family)
        rows = self.conn.execute(
            f"""
            SELECT chapter_num, MAX(chapter_name) AS name, COUNT(*) AS count
            FROM {family.table}
            WHERE title_num = ?
            GROUP BY chapter_num
            """,
            (title_num.strip().upper(),),
        ).fetchall()
        entries = [
            HierarchyEntry(number=r["chapter_num"], name=r["name"], count=r["count"], parent=title_num)
            for r in rows
        ]
        entries.sort(key=lambda e: citation_sort_key(e.number, separator))
        return entries

    def list_sections(self, family: Family, chapter_num: str) -> list[HierarchyEntry]:
        separator = separator_for(family)
        rows = self.conn.execute(
            f"SELECT citation, section_name FROM {family.table} WHERE chapter_num = ?",
            (chapter_num.strip().upper(),),
        ).fetchall()
        entries = [
            HierarchyEntry(number=r["citation"], name=r["section_name"], count=1, parent=chapter_num)
            for r in rows
        ]
        entries.sort(key=lambda e: citation_sort_key(e.number, separator))
        return entries

    def list_rules(self, rule_set: Optional[Union[RuleSet, str]] = None) -> list[HierarchyEntry]:
        """Rules of one set (or all sets), in numeric order within each set."""
        sql = "SELECT rule_set, rule_number, rule_name FROM court_rules"
        params: tuple = ()
        if rule_set:
            sql += " WHERE rule_set = ?"
            params = (str(getattr(rule_set, "value", rule_set)).upper(),)
        rows = self.conn.execute(sql, params).fetchall()

        set_order = {s.value: i for i, s in enumerate(RuleSet)}
        entries = [
            HierarchyEntry(number=r["rule_number"], name=r["rule_name"], count=1, parent=r["rule_set"])
            for r in rows
        ]
        entries.sort(key=lambda e: (set_order.get(e.parent, len(set_order)), e.parent, rule_sort_key(e.number)))
        return entries

    def list_hierarchy(self, family: Family, parent_key: Optional[str] = None) -> list[HierarchyEntry]:
        """Children of ``parent_key`` in numeric order.

        Statutes: no parent -> titles, a title -> its chapters, a chapter ->
        its sections. Court rules: parent is an optional rule set.
        """
        if not family.is_statute:
            return self.list_rules(parent_key)
        if not parent_key:
            return self.list_titles(family)
        try:
            parent = parse_citation(strip_family_prefix(parent_key, family), separator_for(family))
        except CitationError:
            logger.debug(f"[QUERY] Malformed parent key {parent_key!r} for {family.value}")
            return []
        if parent.depth == 1:
            return self.list_chapters(family, parent.title)
        if parent.depth == 2:
            return self.list_sections(family, parent.chapter)
        return []

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _search_family(self, family: Family, fts_query: str, limit: int) -> list[SearchResult]:
        fts = family.fts_table
        snippet = f"snippet({fts}, {SNIPPET_COLUMN[fts]}, '<b>', '</b>', '...', {SNIPPET_TOKENS})"
        if family.is_statute:
            sql = f"""
                SELECT t.citation AS citation, t.title_name, t.chapter_name, t.section_name,
                       {snippet} AS snippet, bm25({fts}) AS bm25_score
                FROM {fts}
                JOIN {family.table} t ON {fts}.rowid = t.id
                WHERE {fts} MATCH ?
                ORDER BY bm25_score
                LIMIT ?
            """
        else:
            sql = f"""
                SELECT t.rule_set || ' ' || t.rule_number AS citation,
                       t.rule_set AS title_name, NULL AS chapter_name, t.rule_name AS section_name,
                       {snippet} AS snippet, bm25({fts}) AS bm25_score
                FROM {fts}
                JOIN court_rules t ON {fts}.rowid = t.id
                WHERE {fts} MATCH ?
                ORDER BY bm25_score
                LIMIT ?
            """
        rows = self.conn.execute(sql, (fts_query, limit)).fetchall()
        return [
            SearchResult(
                family=family.value,
                citation=r["citation"],
                title_name=r["title_name"],
                chapter_name=r["chapter_name"],
                section_name=r["section_name"],
                snippet=r["snippet"],
                score=abs(r["bm25_score"]),
            )
            for r in rows
        ]

    def _resolve_fts_query(self, query: str, families: list[Family]) -> str:
        """The query as given if every family's index accepts it, else quoted terms.

        Column filters differ between indexes (``section_name:`` exists for
        statutes only), so the form is chosen once for all families.
        """
        try:
            for family in families:
                fts = family.fts_table
                self.conn.execute(
                    f"SELECT rowid FROM {fts} WHERE {fts} MATCH ? LIMIT 1", (query,)
                ).fetchone()
        except sqlite3.OperationalError as e:
            quoted = quote_fts_query(query)
            logger.debug(f"[QUERY] Searching {query!r} as quoted terms {quoted!r}: {e}")
            return quoted
        return query

    def search(self, query: str, limit: int = 20) -> list[SearchResult]:
        """Ranked search across RCW, WAC and court rules.

        Each family is capped at ``limit // 3`` (at least 1); the merged hits
        are sorted by score descending and truncated to ``limit``.

        Args:
            query: FTS5 query; free text with stray syntax is retried as quoted terms
            limit: Maximum number of results

        Returns:
            List of SearchResult, best first
        """
        if not query or not query.strip() or limit <= 0:
            return []

        families = [Family.RCW, Family.WAC, Family.COURT_RULES]
        per_family = max(1, limit // len(families))

        fts_query = self._resolve_fts_query(query, families)
        if not fts_query:
            logger.debug(f"[QUERY] Nothing searchable in {query!r}")
            return []

        results: list[SearchResult] = []
        for family in families:
            results.extend(self._search_family(family, fts_query, per_family))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.info(f"[QUERY] search {query!r}: {len(results)} hits, returning {min(len(results), limit)}")
        return results[:limit]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self) -> CorpusStatistics:
        counts = {
            r["rule_set"]: r["n"]
            for r in self.conn.execute(
                "SELECT rule_set, COUNT(*) AS n FROM court_rules GROUP BY rule_set"
            )
        }
        return CorpusStatistics(
            rcw_count=self.store.count(Family.RCW.table),
            wac_count=self.store.count(Family.WAC.table),
            court_rules_count=self.store.count(Family.COURT_RULES.table),
            rule_set_counts=counts,
            last_update=self.store.get_metadata("last_update") or "Unknown",
            version=self.store.get_metadata("version"),
        )
