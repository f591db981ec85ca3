"""
Court rule numbering grammar.

Rule numbers reach us in two shapes:

1. Page-derived, from listing anchor text such as ``"CRLJ 60 Relief From Judgment"``
   or ``"RPC 1.7 - Conflict of Interest"``.
2. File-derived, from fixed-width PDF filenames such as ``CLJ_RALJ_01_01_00.pdf``
   encoding ``(major, minor, sub)``.

Both are reduced to one canonical string ``major.minor[suffix]``. The minor part
is always present (``60`` becomes ``60.0``). The sub-part suffix depends on the
rule set's numbering scheme:

======== ====================================================
DECIMAL  sub 0 -> no suffix, sub n -> ``.n``   (``1.1.2``)
LETTER   sub 0 -> no suffix, sub n -> n-th letter (``1.7a``)
======== ====================================================

Precedence when parsing a page-derived number: an explicit third dotted part
wins over a trailing letter; a bare major number gets minor ``0``.
"""

import re
from dataclasses import dataclass
from enum import Enum

from ..models import RuleSet
from .dotted import CitationError


class NumberingScheme(str, Enum):
    """How a non-zero sub-part is rendered in a canonical rule number."""
    DECIMAL = "decimal"
    LETTER = "letter"


@dataclass(frozen=True)
class RuleSetSpec:
    """Static description of one court rule set."""
    rule_set: RuleSet
    group: str
    file_prefix: str
    scheme: NumberingScheme
    description: str


RULE_SETS: dict[RuleSet, RuleSetSpec] = {
    RuleSet.IRLJ: RuleSetSpec(
        rule_set=RuleSet.IRLJ,
        group="clj",
        file_prefix="CLJ",
        scheme=NumberingScheme.DECIMAL,
        description="Infraction Rules for Courts of Limited Jurisdiction",
    ),
    RuleSet.CRLJ: RuleSetSpec(
        rule_set=RuleSet.CRLJ,
        group="clj",
        file_prefix="CLJ",
        scheme=NumberingScheme.DECIMAL,
        description="Civil Rules for Courts of Limited Jurisdiction",
    ),
    RuleSet.RALJ: RuleSetSpec(
        rule_set=RuleSet.RALJ,
        group="clj",
        file_prefix="CLJ",
        scheme=NumberingScheme.DECIMAL,
        description="Rules for Appeal of Decisions of Courts of Limited Jurisdiction",
    ),
    RuleSet.RPC: RuleSetSpec(
        rule_set=RuleSet.RPC,
        group="ga",
        file_prefix="GA",
        scheme=NumberingScheme.LETTER,
        description="Rules of Professional Conduct",
    ),
}


FILENAME_PATTERN = re.compile(
    r"(?P<prefix>[A-Z]+)_(?P<set>[A-Z]+)_(?P<major>\d+)_(?P<minor>\d+)_(?P<sub>\d+)\.pdf",
    re.IGNORECASE
)

NUMBER_PATTERN = re.compile(
    r"^(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<sub>\d+)|(?P<letter>[A-Za-z]))?$"
)


def get_rule_set_spec(rule_set: RuleSet | str) -> RuleSetSpec:
    try:
        return RULE_SETS[RuleSet(str(getattr(rule_set, "value", rule_set)).upper())]
    except ValueError:
        raise CitationError(f"Unknown rule set: {rule_set}")


def _letter_for(sub: int) -> str:
    if not 1 <= sub <= 26:
        raise CitationError(f"Sub-part {sub} cannot be rendered as a letter")
    return chr(ord("a") + sub - 1)


@dataclass(frozen=True)
class RuleNumber:
    """A parsed rule number in a specific numbering scheme."""
    major: int
    minor: int
    sub: int = 0
    scheme: NumberingScheme = NumberingScheme.DECIMAL

    def sort_key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.sub)

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}"
        if self.sub == 0:
            return base
        if self.scheme is NumberingScheme.LETTER:
            return base + _letter_for(self.sub)
        return f"{base}.{self.sub}"


def parse_rule_filename(filename: str, rule_set: RuleSet | str) -> RuleNumber:
    """Parse a fixed-width rule PDF filename (or an href ending in one).

    Args:
        filename: e.g. ``"../court_rules/pdf/RALJ/CLJ_RALJ_01_01_00.pdf"``
        rule_set: Rule set the listing belongs to

    Returns:
        RuleNumber in the rule set's numbering scheme

    Raises:
        CitationError: If no filename match, or it belongs to another rule set
    """
    spec = get_rule_set_spec(rule_set)
    match = FILENAME_PATTERN.search(filename or "")
    if not match:
        raise CitationError(f"Not a rule PDF filename: {filename!r}")
    if match.group("set").upper() != spec.rule_set.value:
        raise CitationError(
            f"Filename {filename!r} belongs to {match.group('set').upper()}, not {spec.rule_set.value}"
        )
    number = RuleNumber(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        sub=int(match.group("sub")),
        scheme=spec.scheme,
    )
    # Render once so an out-of-range letter sub-part fails here
    str(number)
    return number


def parse_rule_number(raw: str, rule_set: RuleSet | str) -> RuleNumber:
    """Parse a page-derived rule number such as ``"60"``, ``"1.7A"`` or ``"1.1.2"``."""
    spec = get_rule_set_spec(rule_set)
    text = (raw or "").strip().rstrip(".")
    match = NUMBER_PATTERN.match(text)
    if not match:
        raise CitationError(f"Malformed rule number: {raw!r}")

    sub = 0
    if match.group("sub") is not None:
        sub = int(match.group("sub"))
    elif match.group("letter"):
        sub = ord(match.group("letter").lower()) - ord("a") + 1

    number = RuleNumber(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        sub=sub,
        scheme=spec.scheme,
    )
    str(number)
    return number


def canonical_rule_number(raw: str, rule_set: RuleSet | str) -> str:
    return str(parse_rule_number(raw, rule_set))


def rule_sort_key(rule_number: str) -> tuple:
    """Scheme-agnostic numeric sort key; malformed numbers sort last."""
    match = NUMBER_PATTERN.match((rule_number or "").strip())
    if not match:
        return (10**9, 0, 0, rule_number)
    if match.group("sub") is not None:
        sub = int(match.group("sub"))
    elif match.group("letter"):
        sub = ord(match.group("letter").lower()) - ord("a") + 1
    else:
        sub = 0
    return (int(match.group("major")), int(match.group("minor") or 0), sub, "")


def anchor_pattern(rule_set: RuleSet | str) -> re.Pattern:
    """``"<SET> <number> [-] <name>"`` as found in listing anchor text."""
    spec = get_rule_set_spec(rule_set)
    return re.compile(
        rf"^\s*{spec.rule_set.value}\s+(?P<number>\d+(?:\.\d+)*[A-Za-z]?)\s*[-–—:]?\s*(?P<name>.*)$",
        re.IGNORECASE | re.DOTALL
    )


def parse_rule_anchor(text: str, rule_set: RuleSet | str) -> tuple[RuleNumber, str]:
    """Split anchor text into a rule number and display name.

    Returns:
        (RuleNumber, name) where name may be empty

    Raises:
        CitationError: If the text does not start with ``"<SET> <number>"``
    """
    spec = get_rule_set_spec(rule_set)
    match = anchor_pattern(spec.rule_set).match(text or "")
    if not match:
        raise CitationError(f"Anchor text does not name a {spec.rule_set.value} rule: {text!r}")
    number = parse_rule_number(match.group("number"), rule_set)
    name = " ".join(match.group("name").split())
    return number, name


def rule_display_name(anchor_text: str, rule_set: RuleSet | str, rule_number: str) -> str:
    """Display name from anchor text, defaulting to ``"Rule <number>"``."""
    try:
        _, name = parse_rule_anchor(anchor_text, rule_set)
    except CitationError:
        name = " ".join((anchor_text or "").split())
        # Bare filenames and "PDF" links carry no usable name
        if FILENAME_PATTERN.search(name) or name.upper() in ("PDF", ""):
            name = ""
    return name or default_rule_name(rule_number)


def default_rule_name(rule_number: str) -> str:
    return f"Rule {rule_number}"
