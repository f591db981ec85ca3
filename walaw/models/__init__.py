"""
Data models for the Washington law corpus.

This package contains all data models organized by domain:
- legal: Persisted records (LegalSection, RuleDocument, CrawlProgress) and family enums
- search: Query result models
"""

from .legal import (
    Family,
    RuleSet,
    CrawlStatus,
    LegalSection,
    RuleDocument,
    CrawlProgress,
)

from .search import SearchResult, HierarchyEntry, CorpusStatistics

__all__ = [
    # Families
    "Family",
    "RuleSet",
    "CrawlStatus",
    # Records
    "LegalSection",
    "RuleDocument",
    "CrawlProgress",
    # Query results
    "SearchResult",
    "HierarchyEntry",
    "CorpusStatistics",
]
