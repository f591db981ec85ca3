"""
HTML detail-page extractor.

Produces normalized body text from an RCW/WAC section page or a court rule
display page: navigation chrome is dropped, a content region is picked by an
ordered list of selectors (first non-empty wins, whole page last), the body
start is located, and known site boilerplate is stripped.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .text import locate_body_start, normalize_whitespace, strip_boilerplate

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a fetched document cannot be turned into text."""


@dataclass
class ExtractedDocument:
    """Text extracted from one fetched document."""
    text: str
    page_title: Optional[str] = None
    selector: Optional[str] = None
    effective_date: Optional[str] = None


class HtmlExtractor:
    """Extract body text from legal detail pages."""

    REMOVE_SELECTORS = (
        "script, style, noscript, nav, header, footer, "
        ".navigation, .breadcrumb, .footer, .header, .menu"
    )

    # Most specific container first; body is the last resort
    CONTENT_SELECTORS = [
        "#contentWrapper",
        ".rule-content",
        ".content",
        "#content",
        ".main-content",
        "main",
        "article",
        "body",
    ]

    BLOCK_TAGS = [
        "p", "div", "li", "tr", "table", "section", "blockquote",
        "h1", "h2", "h3", "h4", "h5", "h6",
    ]

    def extract(
        self,
        html: str,
        tag: str,
        identifiers: Iterable[str] = (),
    ) -> ExtractedDocument:
        """Extract normalized body text.

        Args:
            html: Page markup
            tag: Family or rule-set tag used to find the body start
            identifiers: Accepted spellings of the unit's identifier

        Returns:
            ExtractedDocument (text may be empty; callers decide what to do)

        Raises:
            ExtractionError: If the markup is empty or rejected by the parser
        """
        if not html or not html.strip():
            raise ExtractionError("Empty HTML document")
        try:
            soup = BeautifulSoup(html, "html.parser")
        except ParserRejectedMarkup as e:
            raise ExtractionError(f"Unparseable HTML: {e}") from e

        page_title = None
        if soup.title is not None:
            page_title = " ".join(soup.title.get_text(" ").split()) or None

        for element in soup.select(self.REMOVE_SELECTORS):
            element.decompose()
        if soup.title is not None:
            soup.title.decompose()

        for br in soup.find_all("br"):
            br.replace_with("\n")
        for block in soup.find_all(self.BLOCK_TAGS):
            block.append("\n")

        text, selector = self._select_content(soup)
        text = normalize_whitespace(text)
        text = locate_body_start(text, tag, identifiers)
        text = strip_boilerplate(text)

        logger.debug(f"[EXTRACT] {tag}: content from {selector or 'full page'} ({len(text)} chars)")
        return ExtractedDocument(text=text, page_title=page_title, selector=selector)

    def _select_content(self, soup: BeautifulSoup) -> tuple[str, Optional[str]]:
        for selector in self.CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            text = element.get_text()
            if text.strip():
                return text, selector
        # Fragments without any matching container
        return soup.get_text(), None


def page_title_label(page_title: Optional[str], tag: str, cite: str) -> Optional[str]:
    """Turn a page ``<title>`` into a display label.

    ``"RCW 46.61.502: Driving under the influence."`` -> ``"Driving under the influence."``
    ``"Chapter 46.61 RCW: Rules of the road"`` -> ``"Rules of the road"``
    """
    if not page_title:
        return None
    label = re.sub(
        rf"^{re.escape(tag)}\s+{re.escape(cite)}\s*[:—–-]?\s*", "", page_title, flags=re.IGNORECASE
    )
    label = re.sub(
        rf"^Chapter\s+\S+\s+{re.escape(tag)}\s*[:—–-]?\s*", "", label, flags=re.IGNORECASE
    )
    return label.strip() or None
