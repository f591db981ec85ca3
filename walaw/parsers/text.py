"""
Plain-text cleanup shared by the HTML and PDF extractors.

This module handles:
- Whitespace normalization (horizontal runs collapsed, paragraph breaks kept)
- Locating the start of the body ("<TAG> <identifier>")
- Stripping site boilerplate and PDF footers
- Session-law annotation lookup for effective dates
"""

import re
from typing import Iterable, Optional

# Site banner, search box and prev/next chapter markers
BOILERPLATE_PATTERNS = [
    re.compile(r"Washington State Courts.*?Court Rules"),
    re.compile(r"Search Court Rules.*?Search"),
    re.compile(r"Menu Website Search.*?PDF"),
    re.compile(r"Beginning of Chapter.*?>>"),
    re.compile(r"<<.*?>>"),
]

PDF_FOOTER_PATTERNS = [
    re.compile(r"Page \d+ of \d+", re.IGNORECASE),
    re.compile(r"Effective \d+/\d+/\d+", re.IGNORECASE),
    re.compile(r"\[[^\[\]]*?Reserved\]", re.IGNORECASE),
]

EFFECTIVE_FOOTER_PATTERN = re.compile(r"Effective (\d+/\d+/\d+)", re.IGNORECASE)

# [2011 c 336 § 1; 1998 c 41 § 2.]
SESSION_LAW_PATTERN = re.compile(r"\[(\d{4}) c \d+ § \d+(?:; )?([^\]]*)\]")

_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_BLANK_RUNS = re.compile(r"\n{3,}")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs while keeping paragraph structure.

    Horizontal whitespace becomes a single space, ``\\r\\n`` becomes ``\\n``,
    and three or more newlines become one blank line.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _BLANK_RUNS.sub("\n\n", text)
    return text.strip()


def body_start_pattern(tag: str, identifiers: Iterable[str]) -> re.Pattern:
    """Pattern for ``"<TAG> <identifier>"`` not followed by more digits."""
    alternatives = "|".join(re.escape(i) for i in identifiers if i)
    return re.compile(rf"{re.escape(tag)}\s+(?:{alternatives})(?![\d.]*\d)", re.IGNORECASE)


def locate_body_start(
    text: str,
    tag: str,
    identifiers: Iterable[str],
    window: Optional[int] = None,
) -> str:
    """Drop everything before the first ``"<TAG> <identifier>"`` heading.

    Args:
        text: Normalized text
        tag: Family or rule-set tag ("RCW", "CRLJ", ...)
        identifiers: Accepted spellings of the identifier ("60.0", "60")
        window: When given, only a match starting before this offset counts

    Returns:
        The text from the match on, or the input unchanged if no usable match
    """
    identifiers = list(identifiers)
    if not text or not identifiers:
        return text
    match = body_start_pattern(tag, identifiers).search(text)
    if match is None or match.start() == 0:
        return text
    if window is not None and match.start() >= window:
        return text
    return text[match.start():]


def strip_boilerplate(text: str) -> str:
    for pattern in BOILERPLATE_PATTERNS:
        text = pattern.sub("", text)
    return normalize_whitespace(text)


def strip_pdf_artifacts(text: str) -> str:
    """Remove page numbers, "Effective m/d/y" footers and [Reserved] placeholders."""
    for pattern in PDF_FOOTER_PATTERNS:
        text = pattern.sub("", text)
    return normalize_whitespace(text)


def extract_effective_date(text: str) -> Optional[str]:
    """First session-law annotation in the body, bracket to bracket."""
    match = SESSION_LAW_PATTERN.search(text or "")
    if not match:
        return None
    return match.group(0)


def extract_last_amended(text: str) -> Optional[str]:
    """Year of the most recent session law (the annotation lists newest first)."""
    match = SESSION_LAW_PATTERN.search(text or "")
    if not match:
        return None
    return match.group(1)


def extract_effective_footer(text: str) -> Optional[str]:
    """Date of the first "Effective m/d/y" footer, before footers are stripped."""
    match = EFFECTIVE_FOOTER_PATTERN.search(text or "")
    return match.group(1) if match else None


def is_near_empty(text: str, min_length: int) -> bool:
    return len((text or "").strip()) < min_length
