"""
Query components for the law corpus.

This package contains:
- engine: Read-only lookup, browse, search and statistics over the store
"""

from .engine import QueryEngine, quote_fts_query

__all__ = [
    "QueryEngine",
    "quote_fts_query",
]
