"""
Response schemas for the Washington Law API.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..models import Family


# ============================================================================
# Path enums
# ============================================================================

class StatuteParam(str, Enum):
    """Statute families addressable in URLs."""
    RCW = "rcw"
    WAC = "wac"

    @property
    def family(self) -> Family:
        return Family(self.value.upper())


# ============================================================================
# Records
# ============================================================================

class SectionResponse(BaseModel):
    """One RCW or WAC section."""

    family: str = Field(..., description="RCW or WAC")
    citation: str = Field(..., description="Canonical citation (e.g. '46.61.502')")
    title_num: str
    chapter_num: str
    section_num: str
    title_name: Optional[str] = None
    chapter_name: Optional[str] = None
    section_name: Optional[str] = None
    full_text: str
    effective_date: Optional[str] = Field(None, description="Session-law annotation")
    last_amended: Optional[str] = None
    updated_at: Optional[str] = None


class RuleResponse(BaseModel):
    """One court rule."""

    rule_set: str = Field(..., description="Rule set (IRLJ, CRLJ, RALJ, RPC)")
    rule_number: str = Field(..., description="Canonical rule number (e.g. '60.0', '1.7a')")
    citation: str
    rule_name: Optional[str] = None
    full_text: str
    effective_date: Optional[str] = None
    updated_at: Optional[str] = None


# ============================================================================
# Browse
# ============================================================================

class HierarchyItem(BaseModel):
    """One child in a browse listing."""

    number: str
    name: Optional[str] = None
    count: int = Field(0, description="Sections under this entry (1 for leaves)")
    parent: Optional[str] = None


class HierarchyResponse(BaseModel):
    """Children of one node in the corpus hierarchy."""

    family: str
    parent: Optional[str] = None
    items: list[HierarchyItem] = Field(default_factory=list)


# ============================================================================
# Search
# ============================================================================

class SearchResultItem(BaseModel):
    """A single ranked search hit."""

    family: str
    citation: str
    title_name: Optional[str] = None
    chapter_name: Optional[str] = None
    section_name: Optional[str] = None
    snippet: str = Field(..., description="Matched excerpt with <b> highlights")
    score: float = Field(..., description="Relevance (higher is better)")


class SearchResponse(BaseModel):
    """Merged search results across all families."""

    query: str
    limit: int
    total: int
    results: list[SearchResultItem] = Field(default_factory=list)


# ============================================================================
# Service
# ============================================================================

class StatsResponse(BaseModel):
    """Corpus statistics."""

    rcw_count: int = Field(..., description="RCW sections stored")
    wac_count: int = Field(..., description="WAC sections stored")
    court_rules_count: int = Field(..., description="Court rules stored")
    rule_set_counts: dict[str, int] = Field(default_factory=dict)
    last_update: str = Field(..., description="Last crawl stamp or 'Unknown'")
    version: Optional[str] = Field(None, description="Schema version")


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    store_loaded: bool = Field(..., description="Whether the law store is open")


class ErrorResponse(BaseModel):
    """Response schema for error responses."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
