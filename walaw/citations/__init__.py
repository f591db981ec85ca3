"""
Citation normalization.

- dotted: Hierarchical RCW/WAC citation grammar and sort keys
- rules: Court rule numbering grammar (per rule-set numbering scheme)
- discovery: Listing-page link discovery with first-wins deduplication
"""

from .dotted import (
    CitationError,
    DottedCitation,
    parse_citation,
    title_of,
    chapter_of,
    separator_for,
    citation_sort_key,
    strip_family_prefix,
)

from .rules import (
    NumberingScheme,
    RuleNumber,
    RuleSetSpec,
    RULE_SETS,
    get_rule_set_spec,
    parse_rule_filename,
    parse_rule_number,
    canonical_rule_number,
    rule_sort_key,
)

from .discovery import (
    CitationLink,
    RuleCandidate,
    find_titles,
    find_chapters,
    find_sections,
    find_rule_candidates,
    dedupe_first,
)

__all__ = [
    # Dotted citations
    "CitationError",
    "DottedCitation",
    "parse_citation",
    "title_of",
    "chapter_of",
    "separator_for",
    "citation_sort_key",
    "strip_family_prefix",
    # Rule numbers
    "NumberingScheme",
    "RuleNumber",
    "RuleSetSpec",
    "RULE_SETS",
    "get_rule_set_spec",
    "parse_rule_filename",
    "parse_rule_number",
    "canonical_rule_number",
    "rule_sort_key",
    # Discovery
    "CitationLink",
    "RuleCandidate",
    "find_titles",
    "find_chapters",
    "find_sections",
    "find_rule_candidates",
    "dedupe_first",
]
