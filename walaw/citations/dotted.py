"""
Hierarchical citation grammar for statutes (RCW) and administrative code (WAC).

Grammar (separator is ``.`` for RCW and ``-`` for WAC)::

    citation := segment [SEP segment [SEP segment]]
    segment  := DIGITS [LETTER]

A three-segment cite ``A.B.C`` is a section; its chapter is ``A.B`` and its
title is ``A``. Letter suffixes (``9A``, ``43.21C``) are normalized to upper case.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..models import Family


class CitationError(ValueError):
    """Raised when a raw artifact does not match a citation grammar."""


SEGMENT_PATTERN = re.compile(r"^(\d+)([A-Za-z]?)$")

SEPARATORS = {
    Family.RCW: ".",
    Family.WAC: "-",
}


def separator_for(family: Family) -> str:
    """Return the segment separator used by a statute family."""
    try:
        return SEPARATORS[family]
    except KeyError:
        raise CitationError(f"{family.value} does not use hierarchical citations")


@dataclass(frozen=True)
class DottedCitation:
    """A parsed title / chapter / section citation."""
    segments: tuple[str, ...]
    separator: str = "."

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def title(self) -> str:
        return self.segments[0]

    @property
    def chapter(self) -> Optional[str]:
        if self.depth < 2:
            return None
        return self.separator.join(self.segments[:2])

    @property
    def section(self) -> Optional[str]:
        if self.depth < 3:
            return None
        return str(self)

    @property
    def section_num(self) -> Optional[str]:
        """Last segment of a section cite (``502`` in ``46.61.502``)."""
        if self.depth < 3:
            return None
        return self.segments[-1]

    def sort_key(self) -> tuple:
        return tuple(segment_sort_key(s) for s in self.segments)

    def __str__(self) -> str:
        return self.separator.join(self.segments)


def _normalize_segment(segment: str) -> Optional[str]:
    match = SEGMENT_PATTERN.match(segment.strip())
    if not match:
        return None
    digits, suffix = match.groups()
    return f"{digits}{suffix.upper()}"


def parse_citation(raw: str, separator: str = ".") -> DottedCitation:
    """Parse a raw cite into its segments.

    Args:
        raw: Cite text such as ``"46.61.502"`` or ``"296-24"``
        separator: Segment separator for the family

    Returns:
        DottedCitation with one to three segments

    Raises:
        CitationError: If the cite does not match the grammar
    """
    if raw is None:
        raise CitationError("Empty citation")
    text = raw.strip()
    if not text:
        raise CitationError("Empty citation")

    parts = text.split(separator)
    if len(parts) > 3:
        raise CitationError(f"Too many segments in citation: {raw!r}")

    segments = []
    for part in parts:
        segment = _normalize_segment(part)
        if segment is None:
            raise CitationError(f"Malformed citation segment {part!r} in {raw!r}")
        segments.append(segment)

    return DottedCitation(segments=tuple(segments), separator=separator)


def title_of(citation: str, separator: str = ".") -> str:
    return parse_citation(citation, separator).title


def chapter_of(citation: str, separator: str = ".") -> Optional[str]:
    return parse_citation(citation, separator).chapter


def segment_sort_key(segment: str) -> tuple[int, str]:
    """Sort key casting the numeric part to int (``9`` < ``9A`` < ``46``)."""
    match = SEGMENT_PATTERN.match(segment.strip())
    if not match:
        return (10**9, segment)
    return (int(match.group(1)), match.group(2).upper())


def citation_sort_key(citation: str, separator: str = ".") -> tuple:
    """Numeric-aware sort key for a cite; malformed cites sort last."""
    try:
        return (0, parse_citation(citation, separator).sort_key())
    except CitationError:
        return (1, (citation,))


def strip_family_prefix(raw: str, family: Family) -> str:
    """Drop a leading family tag (``"RCW 46.61.502"`` -> ``"46.61.502"``)."""
    text = raw.strip()
    prefix = re.compile(rf"^{family.value}\s+", re.IGNORECASE)
    return prefix.sub("", text)
