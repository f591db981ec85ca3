"""
API route definitions for the Washington Law API.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import Settings, get_settings
from ..models import Family, LegalSection, RuleDocument, RuleSet
from ..retrieval import QueryEngine
from .dependencies import get_engine, is_loaded
from .schemas import (
    ErrorResponse,
    HealthResponse,
    HierarchyItem,
    HierarchyResponse,
    RuleResponse,
    SearchResponse,
    SearchResultItem,
    SectionResponse,
    StatsResponse,
    StatuteParam,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ERRORS = {
    404: {"model": ErrorResponse, "description": "Not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=500,
        detail={"error": "query_error", "message": str(e)}
    )


def _not_found(message: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"error": "not_found", "message": message}
    )


def _section_response(family: Family, section: LegalSection) -> SectionResponse:
    return SectionResponse(family=family.value, **{
        k: v for k, v in section.to_dict().items() if k != "created_at"
    })


def _rule_response(rule: RuleDocument) -> RuleResponse:
    return RuleResponse(citation=rule.citation, **rule.to_dict())


def _hierarchy_response(family: Family, parent: Optional[str], entries) -> HierarchyResponse:
    return HierarchyResponse(
        family=family.value,
        parent=parent,
        items=[
            HierarchyItem(number=e.number, name=e.name, count=e.count, parent=e.parent)
            for e in entries
        ],
    )


# ============================================================================
# SERVICE ENDPOINTS
# ============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the service is healthy and the store is open."
)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)]
) -> HealthResponse:
    """Check service health status."""
    loaded = is_loaded()
    return HealthResponse(
        status="healthy" if loaded else "initializing",
        version=settings.app_version,
        store_loaded=loaded,
    )


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses=ERRORS,
    summary="Corpus Statistics",
    description="Per-family record counts and the last update stamp."
)
async def get_stats(engine: QueryEngine = Depends(get_engine)) -> StatsResponse:
    try:
        stats = engine.get_statistics()
    except Exception as e:
        raise _server_error("getting stats", e)
    return StatsResponse(**stats.to_dict())


# ============================================================================
# SEARCH
# ============================================================================

@router.get(
    "/search",
    response_model=SearchResponse,
    responses=ERRORS,
    summary="Full-text Search",
    description="""
Ranked search across RCW, WAC and court rules.

Each family contributes at most a third of `limit`; the merged hits are sorted
by relevance and truncated to `limit`.
"""
)
async def search_laws(
    query: Annotated[str, Query(min_length=1, description="Search terms (FTS5 syntax allowed)")],
    limit: Annotated[Optional[int], Query(ge=1, le=100)] = None,
    engine: QueryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> SearchResponse:
    limit = limit or settings.search_default_limit
    try:
        results = engine.search(query, limit=limit)
    except Exception as e:
        raise _server_error("searching", e)

    return SearchResponse(
        query=query,
        limit=limit,
        total=len(results),
        results=[SearchResultItem(**r.to_dict()) for r in results],
    )


# ============================================================================
# COURT RULES
# ============================================================================

@router.get(
    "/rules",
    response_model=HierarchyResponse,
    responses=ERRORS,
    summary="List Court Rules",
    description="Rules in numeric order, optionally filtered to one rule set."
)
async def list_rules(
    rule_set: Optional[RuleSet] = None,
    engine: QueryEngine = Depends(get_engine),
) -> HierarchyResponse:
    try:
        entries = engine.list_rules(rule_set)
    except Exception as e:
        raise _server_error("listing rules", e)
    return _hierarchy_response(Family.COURT_RULES, rule_set.value if rule_set else None, entries)


@router.get(
    "/rules/{rule_set}/{rule_number}",
    response_model=RuleResponse,
    responses=ERRORS,
    summary="Get Court Rule",
    description="Look up a rule; a bare number such as `60` also finds `60.0`."
)
async def get_rule(
    rule_set: RuleSet,
    rule_number: str,
    engine: QueryEngine = Depends(get_engine),
) -> RuleResponse:
    try:
        rule = engine.get_rule(rule_set, rule_number)
    except Exception as e:
        raise _server_error(f"getting {rule_set.value} {rule_number}", e)
    if rule is None:
        raise _not_found(f"{rule_set.value} {rule_number} not found")
    return _rule_response(rule)


# ============================================================================
# STATUTES (RCW / WAC)
# ============================================================================

@router.get(
    "/{family}/titles",
    response_model=HierarchyResponse,
    responses=ERRORS,
    summary="List Titles",
)
async def list_titles(
    family: StatuteParam,
    engine: QueryEngine = Depends(get_engine),
) -> HierarchyResponse:
    try:
        entries = engine.list_titles(family.family)
    except Exception as e:
        raise _server_error(f"listing {family.value} titles", e)
    return _hierarchy_response(family.family, None, entries)


@router.get(
    "/{family}/titles/{title_num}/chapters",
    response_model=HierarchyResponse,
    responses=ERRORS,
    summary="List Chapters in a Title",
)
async def list_chapters(
    family: StatuteParam,
    title_num: str,
    engine: QueryEngine = Depends(get_engine),
) -> HierarchyResponse:
    try:
        entries = engine.list_chapters(family.family, title_num)
    except Exception as e:
        raise _server_error(f"listing chapters of {family.value} {title_num}", e)
    return _hierarchy_response(family.family, title_num, entries)


@router.get(
    "/{family}/chapters/{chapter_num}/sections",
    response_model=HierarchyResponse,
    responses=ERRORS,
    summary="List Sections in a Chapter",
)
async def list_sections(
    family: StatuteParam,
    chapter_num: str,
    engine: QueryEngine = Depends(get_engine),
) -> HierarchyResponse:
    try:
        entries = engine.list_sections(family.family, chapter_num)
    except Exception as e:
        raise _server_error(f"listing sections of {family.value} {chapter_num}", e)
    return _hierarchy_response(family.family, chapter_num, entries)


@router.get(
    "/{family}/{citation}",
    response_model=SectionResponse,
    responses=ERRORS,
    summary="Get Section by Citation",
)
async def get_section(
    family: StatuteParam,
    citation: str,
    engine: QueryEngine = Depends(get_engine),
) -> SectionResponse:
    try:
        section = engine.get_section(family.family, citation)
    except Exception as e:
        raise _server_error(f"getting {family.value} {citation}", e)
    if section is None:
        raise _not_found(f"{family.value.upper()} {citation} not found")
    return _section_response(family.family, section)
