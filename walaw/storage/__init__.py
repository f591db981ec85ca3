"""
Persistent storage for the law corpus.

- schema: SQLite DDL (primary tables, FTS5 projections, progress, metadata)
- store: DocumentStore handle with transactional upserts
"""

from .schema import SCHEMA_VERSION, SNIPPET_COLUMN
from .store import DocumentStore, StoreConstraintError, StoreUnavailableError

__all__ = [
    "DocumentStore",
    "StoreConstraintError",
    "StoreUnavailableError",
    "SCHEMA_VERSION",
    "SNIPPET_COLUMN",
]
