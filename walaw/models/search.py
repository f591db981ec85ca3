"""
Query result models.

This module defines the shapes returned by the query engine.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SearchResult:
    """A ranked full-text hit from one family's search index."""
    family: str
    citation: str
    snippet: str
    score: float
    title_name: Optional[str] = None
    chapter_name: Optional[str] = None
    section_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "citation": self.citation,
            "title_name": self.title_name,
            "chapter_name": self.chapter_name,
            "section_name": self.section_name,
            "snippet": self.snippet,
            "score": self.score,
        }


@dataclass
class HierarchyEntry:
    """One child in a browse listing (title, chapter, section or rule)."""
    number: str
    name: Optional[str] = None
    count: int = 0
    parent: Optional[str] = None


@dataclass
class CorpusStatistics:
    """Per-family counts and the last update marker."""
    rcw_count: int = 0
    wac_count: int = 0
    court_rules_count: int = 0
    rule_set_counts: dict[str, int] = field(default_factory=dict)
    last_update: str = "Unknown"
    version: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "rcw_count": self.rcw_count,
            "wac_count": self.wac_count,
            "court_rules_count": self.court_rules_count,
            "rule_set_counts": dict(self.rule_set_counts),
            "last_update": self.last_update,
            "version": self.version,
        }
