"""
Per-family crawl strategies.

A strategy tells the generic orchestrator three things about one family:
- which listing pages to walk (``groups``)
- how to read child items off a listing (``discover``)
- how to turn a fetched item into a record and persist it (``extract``, ``persist``)

Strategies:
- StatuteFamily: RCW and WAC (index -> title -> chapter -> section pages)
- RuleSetFamily: court rule sets (one listing per rule set, PDF or HTML items)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, Iterable, Optional, Union

from ..citations import (
    RULE_SETS,
    citation_sort_key,
    dedupe_first,
    find_chapters,
    find_rule_candidates,
    find_sections,
    find_titles,
    parse_citation,
    rule_sort_key,
    separator_for,
)
from ..citations.discovery import CitationLink
from ..citations.rules import default_rule_name
from ..config import Settings, get_settings
from ..models import Family, LegalSection, RuleDocument, RuleSet
from ..parsers import (
    ExtractionError,
    HtmlExtractor,
    PdfExtractor,
    extract_effective_date,
    extract_last_amended,
    page_title_label,
    rule_name_from_text,
)
from ..sources import FetchError, SourceClient
from ..storage import DocumentStore

logger = logging.getLogger(__name__)

Record = Union[LegalSection, RuleDocument]


@dataclass
class CrawlItem:
    """One leaf unit to fetch (a section page, a rule PDF or rule page)."""
    key: str
    url: str
    format: str = "html"
    name: Optional[str] = None
    context: dict = field(default_factory=dict)


@dataclass
class CrawlGroup:
    """One listing page whose children are crawled together.

    ``error`` is set when the group could not even be reached; the
    orchestrator records it and moves on.
    """
    unit: str
    listing_url: str
    context: dict = field(default_factory=dict)
    error: Optional[str] = None


class FamilyStrategy(ABC):
    """Family-specific knowledge plugged into the generic crawl pipeline."""

    family: Family

    @abstractmethod
    def groups(self, client: SourceClient) -> AsyncIterator[CrawlGroup]:
        ...

    @abstractmethod
    def discover(self, html: str, group: CrawlGroup) -> list[CrawlItem]:
        ...

    @abstractmethod
    def extract(self, item: CrawlItem, payload: Union[str, bytes]) -> Record:
        ...

    @abstractmethod
    def persist(self, store: DocumentStore, record: Record) -> int:
        ...


class StatuteFamily(FamilyStrategy):
    """RCW / WAC: ``default.aspx?cite=`` pages, three-level hierarchy."""

    def __init__(
        self,
        family: Family,
        settings: Optional[Settings] = None,
        titles: Optional[Iterable[str]] = None,
    ):
        if not family.is_statute:
            raise ValueError(f"{family.value} is not a statute family")
        self.family = family
        self.settings = settings or get_settings()
        self.separator = separator_for(family)
        self.titles = [t.strip().upper() for t in titles] if titles else None
        self.html = HtmlExtractor()

    @property
    def base_url(self) -> str:
        if self.family is Family.RCW:
            return self.settings.rcw_base_url
        return self.settings.wac_base_url

    def cite_url(self, cite: str) -> str:
        return f"{self.base_url}default.aspx?cite={cite}"

    async def _title_links(self, client: SourceClient) -> list[CitationLink]:
        index_html = await client.fetch_text(self.base_url)
        links = find_titles(index_html, self.base_url, self.separator)
        logger.info(f"[CRAWL] {self.family.value}: {len(links)} titles on index")
        if self.titles is None:
            return links

        by_title = {str(link.citation): link for link in links}
        selected = []
        for title in self.titles:
            link = by_title.get(title)
            if link is None:
                # Requested but not on the index: crawl it without a name
                link = CitationLink(
                    citation=parse_citation(title, self.separator),
                    url=self.cite_url(title),
                )
            selected.append(link)
        return selected

    async def groups(self, client: SourceClient) -> AsyncIterator[CrawlGroup]:
        """Yield one group per chapter, fetching title pages lazily."""
        for title in await self._title_links(client):
            title_num = str(title.citation)
            try:
                title_html = await client.fetch_text(title.url)
            except FetchError as e:
                yield CrawlGroup(unit=title_num, listing_url=title.url, error=str(e))
                continue

            chapters = find_chapters(title_html, title.url, title_num, self.separator)
            chapters.sort(key=lambda c: citation_sort_key(str(c.citation), self.separator))
            logger.info(f"[CRAWL] {self.family.value} Title {title_num}: {len(chapters)} chapters")

            for chapter in chapters:
                yield CrawlGroup(
                    unit=str(chapter.citation),
                    listing_url=chapter.url,
                    context={
                        "title_num": title_num,
                        "title_name": title.name,
                        "chapter_num": str(chapter.citation),
                        "chapter_name": chapter.name,
                    },
                )

    def discover(self, html: str, group: CrawlGroup) -> list[CrawlItem]:
        chapter_num = group.context["chapter_num"]
        links = find_sections(html, group.listing_url, chapter_num, self.separator)
        items = [
            CrawlItem(key=str(link.citation), url=link.url, name=link.name, context=group.context)
            for link in links
        ]
        items.sort(key=lambda i: citation_sort_key(i.key, self.separator))
        return items

    def extract(self, item: CrawlItem, payload: Union[str, bytes]) -> LegalSection:
        citation = parse_citation(item.key, self.separator)
        tag = self.family.value
        doc = self.html.extract(payload, tag, [item.key])

        return LegalSection(
            citation=str(citation),
            title_num=citation.title,
            chapter_num=citation.chapter,
            section_num=citation.section_num,
            title_name=item.context.get("title_name"),
            chapter_name=item.context.get("chapter_name"),
            section_name=item.name or page_title_label(doc.page_title, tag, item.key),
            full_text=doc.text,
            effective_date=extract_effective_date(doc.text),
            last_amended=extract_last_amended(doc.text),
        )

    def persist(self, store: DocumentStore, record: LegalSection) -> int:
        return store.upsert_section(self.family, record)


def rule_identifiers(rule_number: str) -> list[str]:
    """Spellings a rule heading may use (``60.0`` is printed as ``60``)."""
    identifiers = [rule_number]
    if rule_number.endswith(".0"):
        identifiers.append(rule_number[:-2])
    return identifiers


class RuleSetFamily(FamilyStrategy):
    """Court rules: one listing page per rule set, items are PDFs or display pages."""

    family = Family.COURT_RULES

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rule_sets: Optional[Iterable[Union[RuleSet, str]]] = None,
    ):
        self.settings = settings or get_settings()
        if rule_sets:
            self.rule_sets = [RuleSet(str(getattr(s, "value", s)).upper()) for s in rule_sets]
        else:
            self.rule_sets = list(RuleSet)
        self.html = HtmlExtractor()
        self.pdf = PdfExtractor(body_start_window=self.settings.pdf_body_start_window)

    def listing_url(self, rule_set: RuleSet) -> str:
        spec = RULE_SETS[rule_set]
        base = self.settings.court_rules_base_url.rstrip("/")
        return f"{base}/court_rules/?fa=court_rules.list&group={spec.group}&set={rule_set.value}"

    async def groups(self, client: SourceClient) -> AsyncIterator[CrawlGroup]:
        for rule_set in self.rule_sets:
            yield CrawlGroup(
                unit=rule_set.value,
                listing_url=self.listing_url(rule_set),
                context={"rule_set": rule_set},
            )

    def discover(self, html: str, group: CrawlGroup) -> list[CrawlItem]:
        rule_set = group.context["rule_set"]
        candidates = find_rule_candidates(html, group.listing_url, rule_set)
        items = [
            CrawlItem(
                key=c.rule_number,
                url=c.url,
                format=c.format,
                name=c.name,
                context={"rule_set": rule_set},
            )
            for c in candidates
        ]
        items = dedupe_first(items, key=lambda i: i.key)
        items.sort(key=lambda i: rule_sort_key(i.key))
        logger.info(f"[CRAWL] {rule_set.value}: {len(items)} rules on listing")
        return items

    def extract(self, item: CrawlItem, payload: Union[str, bytes]) -> RuleDocument:
        rule_set: RuleSet = item.context["rule_set"]
        identifiers = rule_identifiers(item.key)

        if item.format == "pdf":
            if not isinstance(payload, bytes):
                raise ExtractionError(f"{rule_set.value} {item.key}: expected PDF bytes")
            doc = self.pdf.extract(payload, rule_set.value, identifiers)
        else:
            doc = self.html.extract(payload, rule_set.value, identifiers)

        name = item.name or default_rule_name(item.key)
        if name == default_rule_name(item.key):
            name = rule_name_from_text(doc.text, rule_set.value, identifiers) or name

        return RuleDocument(
            rule_set=rule_set.value,
            rule_number=item.key,
            rule_name=name,
            full_text=doc.text,
            effective_date=doc.effective_date,
        )

    def persist(self, store: DocumentStore, record: RuleDocument) -> int:
        return store.upsert_rule(record)
