"""
Core legal record data models.

This module defines the persisted units of the corpus:
- LegalSection: Statute (RCW) or administrative-code (WAC) section
- RuleDocument: Court rule within a rule set (IRLJ, CRLJ, RALJ, RPC)
- CrawlProgress: Progress ledger entry for one crawl grouping
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Family(str, Enum):
    """Document families, each backed by its own table and search index."""
    RCW = "RCW"
    WAC = "WAC"
    COURT_RULES = "COURT_RULES"

    @property
    def table(self) -> str:
        return self.value.lower()

    @property
    def fts_table(self) -> str:
        return f"{self.table}_fts"

    @property
    def is_statute(self) -> bool:
        return self in (Family.RCW, Family.WAC)


class RuleSet(str, Enum):
    """Court rule sets ingested from the courts site."""
    IRLJ = "IRLJ"
    CRLJ = "CRLJ"
    RALJ = "RALJ"
    RPC = "RPC"


class CrawlStatus(str, Enum):
    """Status of a crawl grouping in the progress ledger."""
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class LegalSection:
    """A statute or administrative-code section, keyed by citation."""
    citation: str
    title_num: str
    chapter_num: str
    section_num: str
    full_text: str
    title_name: Optional[str] = None
    chapter_name: Optional[str] = None
    section_name: Optional[str] = None
    effective_date: Optional[str] = None
    last_amended: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "citation": self.citation,
            "title_num": self.title_num,
            "chapter_num": self.chapter_num,
            "section_num": self.section_num,
            "title_name": self.title_name,
            "chapter_name": self.chapter_name,
            "section_name": self.section_name,
            "full_text": self.full_text,
            "effective_date": self.effective_date,
            "last_amended": self.last_amended,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row) -> "LegalSection":
        return cls(
            citation=row["citation"],
            title_num=row["title_num"],
            chapter_num=row["chapter_num"],
            section_num=row["section_num"],
            full_text=row["full_text"],
            title_name=row["title_name"],
            chapter_name=row["chapter_name"],
            section_name=row["section_name"],
            effective_date=row["effective_date"],
            last_amended=row["last_amended"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


@dataclass
class RuleDocument:
    """A court rule, keyed by (rule_set, rule_number)."""
    rule_set: str
    rule_number: str
    full_text: str
    rule_name: Optional[str] = None
    effective_date: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def citation(self) -> str:
        return f"{self.rule_set} {self.rule_number}"

    def to_dict(self) -> dict:
        return {
            "rule_set": self.rule_set,
            "rule_number": self.rule_number,
            "rule_name": self.rule_name,
            "full_text": self.full_text,
            "effective_date": self.effective_date,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_row(cls, row) -> "RuleDocument":
        return cls(
            rule_set=row["rule_set"],
            rule_number=row["rule_number"],
            rule_name=row["rule_name"],
            full_text=row["full_text"],
            effective_date=row["effective_date"],
            updated_at=row["updated_at"],
        )


@dataclass
class CrawlProgress:
    """Progress ledger entry for one (family, unit) pair."""
    family: str
    unit: str
    status: CrawlStatus
    error_message: Optional[str] = None
    updated_at: Optional[str] = None
