"""
FastAPI Server for the Washington law corpus.

This package provides a thin HTTP wrapper around the QueryEngine.
"""

from .main import app, create_app
from .schemas import (
    SectionResponse,
    RuleResponse,
    HierarchyResponse,
    SearchResponse,
    StatsResponse,
)

__all__ = [
    "app",
    "create_app",
    # Schemas
    "SectionResponse",
    "RuleResponse",
    "HierarchyResponse",
    "SearchResponse",
    "StatsResponse",
]
