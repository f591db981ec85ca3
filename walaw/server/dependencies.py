"""
Dependency injection for FastAPI.

Holds the read-only store and the query engine built on it for the lifetime
of the app.
"""

import logging
from typing import Optional

from ..config import get_settings
from ..retrieval import QueryEngine
from ..storage import DocumentStore

logger = logging.getLogger(__name__)

# Global singleton instances
_store: Optional[DocumentStore] = None
_engine: Optional[QueryEngine] = None


def _init_engine() -> QueryEngine:
    """Open the store read-only and build the query engine (singleton)."""
    global _store, _engine

    if _engine is not None:
        return _engine

    settings = get_settings()
    logger.info(f"Opening law store at {settings.db_path}")

    # StoreUnavailableError propagates: a missing store is fatal at startup
    _store = DocumentStore.open(settings.db_path, read_only=True)
    _engine = QueryEngine(_store)
    return _engine


def get_engine() -> QueryEngine:
    """
    Get the singleton query engine.

    This is the main dependency for API endpoints.
    """
    if _engine is None:
        _init_engine()
    assert _engine is not None, "Query engine failed to initialize"
    return _engine


def is_loaded() -> bool:
    return _engine is not None


def startup_load() -> None:
    """Open the store on server startup."""
    logger.info("Opening store on startup...")
    _init_engine()
    logger.info("Startup complete")


def shutdown_close() -> None:
    """Close the store on shutdown."""
    global _store, _engine
    if _store is not None:
        _store.close()
    _store = None
    _engine = None
