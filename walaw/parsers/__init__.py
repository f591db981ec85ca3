"""
Text extraction for fetched legal documents.

- text: Shared whitespace, body-start and boilerplate cleanup
- html: Detail-page extractor (statute sections, rule display pages)
- pdf: Rule PDF extractor (PyMuPDF)
"""

from .html import ExtractedDocument, ExtractionError, HtmlExtractor, page_title_label
from .pdf import PdfExtractor, rule_name_from_text
from .text import (
    normalize_whitespace,
    locate_body_start,
    strip_boilerplate,
    strip_pdf_artifacts,
    extract_effective_date,
    extract_last_amended,
    extract_effective_footer,
    is_near_empty,
)

__all__ = [
    "ExtractedDocument",
    "ExtractionError",
    "HtmlExtractor",
    "page_title_label",
    "PdfExtractor",
    "rule_name_from_text",
    "normalize_whitespace",
    "locate_body_start",
    "strip_boilerplate",
    "strip_pdf_artifacts",
    "extract_effective_date",
    "extract_last_amended",
    "extract_effective_footer",
    "is_near_empty",
]
