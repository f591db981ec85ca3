"""
walaw - Offline Washington State Law Mirror

Crawls the Revised Code of Washington (RCW), the Washington Administrative
Code (WAC) and selected court rules into one SQLite file, then serves exact
lookup, hierarchical browse and ranked full-text search from it with no
network access.

Packages:
    - models: Persisted records and query result models
    - citations: Citation / rule-number grammars and listing discovery
    - sources: Rate-limited HTTP client
    - parsers: HTML and PDF text extraction
    - storage: SQLite store with FTS5 search indexes
    - crawl: Per-family strategies and the crawl orchestrator
    - retrieval: Read-only query engine
    - server: FastAPI wrapper
"""

__version__ = "1.0.0"
__author__ = "walaw"

# Core models
from .models import (
    Family,
    RuleSet,
    CrawlStatus,
    LegalSection,
    RuleDocument,
    CrawlProgress,
    SearchResult,
    HierarchyEntry,
    CorpusStatistics,
)

# Citations
from .citations import (
    CitationError,
    parse_citation,
    canonical_rule_number,
)

# Storage
from .storage import DocumentStore, StoreConstraintError, StoreUnavailableError

# Crawling
from .sources import SourceClient, FetchError
from .parsers import ExtractionError
from .crawl import CrawlOrchestrator, CrawlReport, StatuteFamily, RuleSetFamily

# Query
from .retrieval import QueryEngine

__all__ = [
    # Version
    "__version__",
    # Models
    "Family",
    "RuleSet",
    "CrawlStatus",
    "LegalSection",
    "RuleDocument",
    "CrawlProgress",
    "SearchResult",
    "HierarchyEntry",
    "CorpusStatistics",
    # Citations
    "CitationError",
    "parse_citation",
    "canonical_rule_number",
    # Storage
    "DocumentStore",
    "StoreConstraintError",
    "StoreUnavailableError",
    # Crawling
    "SourceClient",
    "FetchError",
    "ExtractionError",
    "CrawlOrchestrator",
    "CrawlReport",
    "StatuteFamily",
    "RuleSetFamily",
    # Query
    "QueryEngine",
]
