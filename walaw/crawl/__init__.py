"""
Crawling of the remote legal sources into the document store.

- families: Per-family strategies (RCW/WAC statutes, court rule sets)
- orchestrator: Generic discovery -> fetch -> extract -> persist pipeline
"""

from .families import (
    CrawlGroup,
    CrawlItem,
    FamilyStrategy,
    RuleSetFamily,
    StatuteFamily,
    rule_identifiers,
)
from .orchestrator import CrawlOrchestrator, CrawlReport, ITEM_ERRORS

__all__ = [
    "CrawlGroup",
    "CrawlItem",
    "FamilyStrategy",
    "RuleSetFamily",
    "StatuteFamily",
    "rule_identifiers",
    "CrawlOrchestrator",
    "CrawlReport",
    "ITEM_ERRORS",
]
