"""Ordered match rules for resolving a prerequisite clause to a course code.

Each rule is a named strategy ``(query, index) -> code | None``. The
resolver tries ``DEFAULT_RULES`` in order and the first rule that returns
a code wins, so rules further down only see clauses every earlier rule
rejected. New heuristics are appended to the table; a custom table can be
passed to the resolver to run a subset.
"""

from collections.abc import Callable
from dataclasses import dataclass
import re

from catalog_reconciler.prerequisites.matching import (
    CourseIndex,
    PrerequisiteQuery,
    normalize_for_matching,
)

# Containment needles shorter than this match too much ("1", "ap")
MIN_CONTAINMENT_LENGTH = 3

# Significant words are longer than this; a clause needs at least two
MIN_WORD_LENGTH = 2
MIN_OVERLAP_WORDS = 2

# "Journalism 3", "Spanish II"; numerals are uppercase so "Intro to Video" keeps its words
_BASE_NAME = re.compile(r"^([A-Za-z\s]+?)\s+(?:\d+|[IVX]+)$")

RuleFunction = Callable[[PrerequisiteQuery, CourseIndex], str | None]


@dataclass(frozen=True)
class MatchRule:
    """A named prerequisite matching strategy.

    Attributes:
        name: Identifier used in statistics and logs.
        apply: Returns the matched course code, or None.
        description: One-line summary for reports.
    """

    name: str
    apply: RuleFunction
    description: str = ""

    def __call__(self, query: PrerequisiteQuery, index: CourseIndex) -> str | None:
        return self.apply(query, index)


def match_existing_code(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """The clause is already a catalog code."""
    return query.raw if index.has_code(query.raw) else None


def match_exact_name(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """The clause is exactly a catalog course name."""
    return index.code_for_name(query.text)


def match_case_insensitive_name(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """The clause equals a catalog course name ignoring case."""
    for entry in index.entries:
        if entry.lower == query.lower:
            return entry.code
    return None


def match_normalized_name(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """The clause equals a catalog course name after normalization."""
    if not query.normalized:
        return None
    for entry in index.entries:
        if entry.normalized == query.normalized:
            return entry.code
    return None


def _find_containing(index: CourseIndex, needles: list[str]) -> str | None:
    """First entry whose name contains a needle, in parentheses or plainly."""
    needles = [needle for needle in needles if needle]
    if not needles:
        return None

    for entry in index.entries:
        for needle in needles:
            if f"({needle})" in entry.lower:
                return entry.code
        for needle in needles:
            if len(needle) < MIN_CONTAINMENT_LENGTH:
                continue
            if needle in entry.normalized or needle in entry.lower:
                return entry.code
    return None


def match_containment(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """Normalized prefix in either direction, or the clause inside a name.

    ``"Algebra 1"`` matches ``"Algebra 1 Honors"``; ``"Athletics 1"``
    matches ``"Off Campus PE (Athletics 1)"``.
    """
    prereq = query.normalized
    if len(prereq) >= MIN_CONTAINMENT_LENGTH:
        for entry in index.entries:
            if not entry.normalized:
                continue
            if entry.normalized.startswith(prereq) or prereq.startswith(entry.normalized):
                return entry.code

    return _find_containing(index, [query.lower, prereq])


def match_abbreviation_expansion(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """Expand known shorthand (``ASL``, ``Engl``) and retry containment."""
    prereq = query.normalized

    # "Principles of Arts, Audio/Video Technology, and Communications" is
    # spelled many ways; accept any name about arts and audio or video
    if "principles" in prereq and "arts" in prereq and ("audio" in prereq or "video" in prereq):
        for entry in index.entries:
            name = entry.normalized
            if "arts" in name and ("audio" in name or "video" in name):
                return entry.code

    if query.expanded == prereq:
        return None
    return _find_containing(index, [query.expanded])


def match_base_name(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """Drop a trailing sequence number and retry containment.

    ``"Journalism 3"`` matches the first course named like ``"Journalism ..."``.
    """
    match = _BASE_NAME.match(query.text)
    if not match:
        return None

    base = normalize_for_matching(match.group(1))
    if len(base) < MIN_CONTAINMENT_LENGTH:
        return None

    for entry in index.entries:
        if base in entry.normalized:
            return entry.code
    return None


def match_word_overlap(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """Every significant word of the clause appears in a course name."""
    words = [word for word in query.normalized.split() if len(word) > MIN_WORD_LENGTH]
    if len(words) < MIN_OVERLAP_WORDS:
        return None

    for entry in index.entries:
        if all(word in entry.normalized for word in words):
            return entry.code
    return None


def match_prefix(query: PrerequisiteQuery, index: CourseIndex) -> str | None:
    """Raw prefix in either direction, case-sensitive first."""
    for entry in index.entries:
        if entry.name.startswith(query.text) or query.text.startswith(entry.name):
            return entry.code

    for entry in index.entries:
        if entry.lower.startswith(query.lower) or query.lower.startswith(entry.lower):
            return entry.code
    return None


# Rules accepted on a whole compound string before it is split
WHOLE_STRING_RULES: tuple[MatchRule, ...] = (
    MatchRule("existing_code", match_existing_code, "already a catalog course code"),
    MatchRule("exact_name", match_exact_name, "exact course name"),
    MatchRule("case_insensitive_name", match_case_insensitive_name, "course name ignoring case"),
)

DEFAULT_RULES: tuple[MatchRule, ...] = (
    *WHOLE_STRING_RULES,
    MatchRule("normalized_name", match_normalized_name, "course name after normalization"),
    MatchRule("containment", match_containment, "prefix or substring of a course name"),
    MatchRule(
        "abbreviation_expansion",
        match_abbreviation_expansion,
        "known shorthand expanded, then containment",
    ),
    MatchRule("base_name", match_base_name, "sequence number dropped, then containment"),
    MatchRule("word_overlap", match_word_overlap, "all significant words in a course name"),
    MatchRule("prefix", match_prefix, "raw prefix in either direction"),
)


def get_rule(name: str, rules: tuple[MatchRule, ...] = DEFAULT_RULES) -> MatchRule:
    """Look up a rule by name.

    Raises:
        KeyError: If no rule has that name.
    """
    for rule in rules:
        if rule.name == name:
            return rule
    raise KeyError(name)
