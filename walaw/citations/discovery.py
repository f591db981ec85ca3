"""
Discovery of child identifiers on listing pages.

Listing pages embed children either as anchors carrying a ``cite=`` query
parameter (statute and administrative-code indexes) or as links to rule
documents (PDF filenames or ``court_rules.display`` pages). Every finder
returns candidates in page order, deduplicated on the canonical identifier
with the first occurrence kept.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, TypeVar
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup

from ..models import RuleSet
from .dotted import CitationError, DottedCitation, parse_citation
from .rules import (
    FILENAME_PATTERN,
    default_rule_name,
    parse_rule_anchor,
    parse_rule_filename,
    parse_rule_number,
    rule_display_name,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LinkRef:
    """An anchor resolved against the page it was found on."""
    url: str
    text: str
    context: Optional[str] = None


@dataclass
class CitationLink:
    """A statute/admin-code child discovered on a listing page."""
    citation: DottedCitation
    url: str
    name: Optional[str] = None


@dataclass
class RuleCandidate:
    """A court rule discovered on a rule-set listing page."""
    rule_set: RuleSet
    rule_number: str
    url: str
    name: str
    format: str  # "pdf" or "html"


def extract_links(html: str, page_url: str) -> list[LinkRef]:
    """Collect every ``<a href>`` on a page as absolute URLs.

    The text of the next table cell (if the anchor sits in one) is kept as
    ``context``; index pages put display names there.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith(("#", "javascript:", "mailto:")):
            continue
        try:
            url = urljoin(page_url, href)
        except ValueError as e:
            logger.debug(f"[CRAWL] Ignoring malformed href {href!r} on {page_url}: {e}")
            continue
        context = None
        cell = anchor.find_parent("td")
        if cell is not None:
            sibling = cell.find_next_sibling("td")
            if sibling is not None:
                context = " ".join(sibling.get_text(" ").split()) or None
        links.append(LinkRef(
            url=url,
            text=" ".join(anchor.get_text(" ").split()),
            context=context,
        ))
    return links


def _query_params(url: str) -> dict[str, list[str]]:
    params = parse_qs(urlparse(url).query)
    return {key.lower(): values for key, values in params.items()}


def cite_param(url: str) -> Optional[str]:
    """Value of the ``cite`` query parameter, or None (PDF views excluded)."""
    params = _query_params(url)
    if params.get("pdf", [""])[0].lower() == "true":
        return None
    values = params.get("cite")
    if not values:
        return None
    return values[0].strip() or None


def dedupe_first(items: Iterable[T], key: Callable[[T], object]) -> list[T]:
    """Keep the first item for each key, preserving encounter order."""
    seen = set()
    result = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        result.append(item)
    return result


def _link_name(link: LinkRef, cite: str) -> Optional[str]:
    """Display name from anchor text, minus any echo of the cite itself."""
    text = link.text
    pattern = re.compile(
        rf"^(?:(?:title|chapter|RCW|WAC)\s+)*{re.escape(cite)}(?:\s+(?:RCW|WAC))?\s*[-–—:.]?\s*",
        re.IGNORECASE
    )
    name = pattern.sub("", text).strip()
    if not name and link.context:
        name = link.context.strip()
    return name or None


def find_citations(
    html: str,
    page_url: str,
    separator: str = ".",
    depth: int = 1,
    parent: Optional[str] = None,
) -> list[CitationLink]:
    """Find children at a given depth, optionally restricted to one parent.

    Args:
        html: Listing page markup
        page_url: URL the page was fetched from (for resolving relative hrefs)
        separator: Citation separator for the family
        depth: 1 for titles, 2 for chapters, 3 for sections
        parent: Required prefix cite (title for chapters, chapter for sections)

    Returns:
        Deduplicated CitationLinks in page order
    """
    parent_cite = parse_citation(parent, separator) if parent is not None else None
    found = []
    for link in extract_links(html, page_url):
        raw = cite_param(link.url)
        if raw is None:
            continue
        try:
            citation = parse_citation(raw, separator)
        except CitationError:
            logger.debug(f"[CRAWL] Ignoring malformed cite {raw!r} on {page_url}")
            continue
        if citation.depth != depth:
            continue
        if parent_cite is not None:
            if citation.segments[:parent_cite.depth] != parent_cite.segments:
                continue
        found.append(CitationLink(
            citation=citation,
            url=link.url,
            name=_link_name(link, str(citation)),
        ))
    return dedupe_first(found, key=lambda c: str(c.citation))


def find_titles(html: str, page_url: str, separator: str = ".") -> list[CitationLink]:
    return find_citations(html, page_url, separator, depth=1)


def find_chapters(html: str, page_url: str, title: str, separator: str = ".") -> list[CitationLink]:
    return find_citations(html, page_url, separator, depth=2, parent=title)


def find_sections(html: str, page_url: str, chapter: str, separator: str = ".") -> list[CitationLink]:
    return find_citations(html, page_url, separator, depth=3, parent=chapter)


def _rule_from_link(link: LinkRef, rule_set: RuleSet) -> Optional[RuleCandidate]:
    path = urlparse(link.url).path
    if FILENAME_PATTERN.search(path):
        try:
            number = str(parse_rule_filename(path, rule_set))
        except CitationError:
            return None
        return RuleCandidate(
            rule_set=rule_set,
            rule_number=number,
            url=link.url,
            name=rule_display_name(link.text, rule_set, number),
            format="pdf",
        )

    if "court_rules.display" not in link.url.lower():
        return None

    try:
        parsed, name = parse_rule_anchor(link.text, rule_set)
        number = str(parsed)
    except CitationError:
        # Anchor text without "<SET> <number>": fall back to the ruleid param
        # (e.g. "crlj60" or "gaRPC1.7") and keep the text as the name.
        rule_id = _query_params(link.url).get("ruleid", [""])[0]
        rule_id = re.sub(rf"^(?:[a-z]+?)?{rule_set.value}", "", rule_id, flags=re.IGNORECASE)
        try:
            number = str(parse_rule_number(rule_id, rule_set))
        except CitationError:
            return None
        name = link.text

    return RuleCandidate(
        rule_set=rule_set,
        rule_number=number,
        url=link.url,
        name=name or default_rule_name(number),
        format="html",
    )


def find_rule_candidates(html: str, page_url: str, rule_set: RuleSet) -> list[RuleCandidate]:
    """Find rule documents (PDF or HTML) linked from a rule-set listing.

    Candidates are deduplicated on the canonical rule number, first one wins.
    """
    found = []
    for link in extract_links(html, page_url):
        candidate = _rule_from_link(link, rule_set)
        if candidate is not None:
            found.append(candidate)
    unique = dedupe_first(found, key=lambda c: c.rule_number)
    if len(unique) < len(found):
        logger.debug(f"[CRAWL] {rule_set.value}: dropped {len(found) - len(unique)} duplicate rule links")
    return unique
