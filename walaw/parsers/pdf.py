"""
PDF extractor for court rule documents.

Court rule PDFs carry one rule each. Text is read page by page in layout order
(words sorted top-to-bottom, left-to-right), page texts are joined with
newlines, and then:
- the body start is only accepted near the top of the document
- page numbers, "Effective m/d/y" footers and [Reserved] placeholders are stripped
"""

import logging
import re
from typing import Iterable, Optional

import fitz  # PyMuPDF

from .html import ExtractedDocument, ExtractionError
from .text import (
    extract_effective_footer,
    locate_body_start,
    normalize_whitespace,
    strip_pdf_artifacts,
)

logger = logging.getLogger(__name__)


class PdfExtractor:
    """Extract body text from rule PDFs."""

    def __init__(self, body_start_window: int = 100):
        self.body_start_window = body_start_window

    def read_pages(self, data: bytes) -> list[str]:
        """Decode each page to a single line of space-separated words.

        Raises:
            ExtractionError: If the bytes are not a readable PDF
        """
        if not data:
            raise ExtractionError("Empty PDF document")
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise ExtractionError(f"Undecodable PDF: {e}") from e
        if doc.page_count == 0:
            doc.close()
            raise ExtractionError("PDF has no pages")

        pages_text = []
        try:
            for page in doc:
                words = page.get_text("words", sort=True)
                pages_text.append(" ".join(w[4] for w in words))
        except (RuntimeError, ValueError) as e:
            raise ExtractionError(f"Failed reading PDF page: {e}") from e
        finally:
            doc.close()
        return pages_text

    def extract(
        self,
        data: bytes,
        tag: str,
        identifiers: Iterable[str] = (),
    ) -> ExtractedDocument:
        """Extract normalized body text from PDF bytes.

        Args:
            data: Raw PDF bytes
            tag: Rule-set tag used to find the body start ("RALJ")
            identifiers: Accepted spellings of the rule number

        Returns:
            ExtractedDocument with the cleaned text
        """
        pages_text = self.read_pages(data)
        text = normalize_whitespace("\n".join(pages_text))
        effective_date = extract_effective_footer(text)
        text = locate_body_start(text, tag, identifiers, window=self.body_start_window)
        text = strip_pdf_artifacts(text)

        logger.debug(f"[EXTRACT] {tag}: {len(pages_text)} PDF pages, {len(text)} chars")
        return ExtractedDocument(text=text, effective_date=effective_date)


def rule_name_from_text(text: str, tag: str, identifiers: Iterable[str]) -> Optional[str]:
    """First capitalised phrase after ``"<TAG> <number>"`` in the body, if any."""
    alternatives = "|".join(re.escape(i) for i in identifiers if i)
    if not alternatives or not text:
        return None
    pattern = re.compile(
        rf"{re.escape(tag)}\s+(?:{alternatives})(?![\d.]*\d)\s*[-–]?\s*((?-i:[A-Z])[^.\n]+)",
        re.IGNORECASE
    )
    match = pattern.search(text)
    if not match:
        return None
    return match.group(1).strip() or None
