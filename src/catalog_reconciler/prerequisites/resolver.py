"""Prerequisite resolution.

Rewrites each course's free-text ``prerequisite`` into catalog course
codes. Compound text is split on ``" or "`` and ``" and "``/``" & "``
first; every clause is then matched against the catalog by the ordered
rule table in ``rules.py``. Clauses no rule can match are kept verbatim
and counted for the unmatched report.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
import re
from typing import TYPE_CHECKING

from rapidfuzz import fuzz, process
import structlog

from catalog_reconciler.normalization.fields import NA, is_na
from catalog_reconciler.prerequisites.matching import (
    CourseIndex,
    PrerequisiteQuery,
    has_qualifying_text,
    is_bare_numeral,
    normalize_for_matching,
    strip_corequisite_prefix,
)
from catalog_reconciler.prerequisites.rules import (
    DEFAULT_RULES,
    WHOLE_STRING_RULES,
    MatchRule,
)

if TYPE_CHECKING:
    from catalog_reconciler.models.course import Course

logger = structlog.get_logger(__name__)

_OR_SEPARATOR = re.compile(r"\s+or\s+", re.IGNORECASE)
_AND_SEPARATOR = re.compile(r"\s+(?:and|&)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class RuleMatch:
    """A clause resolved to a course code by a named rule."""

    code: str
    rule: str


@dataclass(frozen=True)
class UnmatchedPrerequisite:
    """One line of the unmatched-prerequisite report.

    Attributes:
        text: The clause as written.
        count: Number of times it was seen.
        suggestion: Closest catalog course name, if any.
        score: Similarity of the suggestion (0-100).
    """

    text: str
    count: int
    suggestion: str | None = None
    score: float = 0.0


@dataclass
class ResolutionStats:
    """Statistics about a prerequisite resolution run.

    Attributes:
        total: Courses examined.
        updated: Courses whose prerequisite text changed.
        unchanged: Courses whose prerequisite text was kept.
        already_codes: Prerequisites that were already course codes.
        rule_hits: Clauses resolved, per rule name.
        unmatched: Clauses no rule could resolve, with occurrence counts.
    """

    total: int = 0
    updated: int = 0
    unchanged: int = 0
    already_codes: int = 0
    rule_hits: Counter[str] = field(default_factory=Counter)
    unmatched: Counter[str] = field(default_factory=Counter)

    def top_unmatched(self, limit: int = 20) -> list[tuple[str, int]]:
        """Most frequent unmatched clauses, ties in first-seen order."""
        return self.unmatched.most_common(limit)


def match_clause(
    clause: str,
    index: CourseIndex,
    rules: Sequence[MatchRule] = DEFAULT_RULES,
) -> RuleMatch | None:
    """Resolve one prerequisite clause, reporting which rule matched.

    Args:
        clause: A single course reference.
        index: Catalog lookup index.
        rules: Rules to try, in order.

    Returns:
        The match, or None for ``"n/a"``, bare numerals and unmatched text.
    """
    text = strip_corequisite_prefix(clause)
    if is_na(text):
        return None
    if is_bare_numeral(text) and not index.has_code(text):
        return None

    query = PrerequisiteQuery.from_text(text)
    for rule in rules:
        code = rule(query, index)
        if code is not None:
            return RuleMatch(code=code, rule=rule.name)
    return None


def find_course_code(
    clause: str,
    index: CourseIndex,
    rules: Sequence[MatchRule] = DEFAULT_RULES,
) -> str | None:
    """Resolve one prerequisite clause to a course code.

    Resolving a catalog code returns it unchanged.

    Args:
        clause: A single course reference.
        index: Catalog lookup index.
        rules: Rules to try, in order.

    Returns:
        The course code, or None when the clause cannot be resolved.

    Example:
        >>> find_course_code("Algebra I", index)
        '0310'
    """
    match = match_clause(clause, index, rules)
    return match.code if match else None


def _resolve_part(
    part: str,
    index: CourseIndex,
    rules: Sequence[MatchRule],
    stats: ResolutionStats | None,
) -> str | None:
    match = match_clause(part, index, rules)
    if match is None:
        if stats is not None:
            stats.unmatched[part] += 1
        return None
    if stats is not None:
        stats.rule_hits[match.rule] += 1
    return match.code


def convert_prerequisite(
    prerequisite: str,
    index: CourseIndex,
    rules: Sequence[MatchRule] = DEFAULT_RULES,
    stats: ResolutionStats | None = None,
) -> str:
    """Rewrite prerequisite text into course codes.

    - ``"n/a"``/empty → ``"n/a"``
    - whole text matching a code or a course name → that code
    - ``"A or B"`` → each clause resolved, bare numerals dropped, rejoined with ``" or "``
    - ``"A and B"``/``"A & B"`` → each clause resolved; credit-hour or grade-level
      clauses kept verbatim; joined with ``" or "`` when every clause became a
      code, else ``" and "``
    - anything else → resolved as one clause

    Unresolved clauses are kept as written.

    Args:
        prerequisite: The course's prerequisite text.
        index: Catalog lookup index.
        rules: Rules to try, in order.
        stats: Optional statistics updated in place.

    Returns:
        The rewritten prerequisite.

    Example:
        >>> convert_prerequisite("Algebra 1 or Geometry", index)
        '0310 or 0330'
    """
    if is_na(prerequisite):
        return NA

    text = strip_corequisite_prefix(prerequisite)
    if is_na(text):
        return NA

    whole = match_clause(text, index, WHOLE_STRING_RULES)
    if whole is not None:
        if stats is not None:
            stats.rule_hits[whole.rule] += 1
        return whole.code

    if _OR_SEPARATOR.search(text):
        converted: list[str] = []
        for part in (p.strip() for p in _OR_SEPARATOR.split(text)):
            if not part or (is_bare_numeral(part) and not index.has_code(part)):
                continue
            code = _resolve_part(part, index, rules, stats)
            converted.append(code or part)
        if converted:
            return " or ".join(converted)

    if _AND_SEPARATOR.search(text):
        converted = []
        qualified = False
        for part in (p.strip() for p in _AND_SEPARATOR.split(text)):
            if not part:
                continue
            if has_qualifying_text(part):
                converted.append(part)
                qualified = True
                continue
            code = _resolve_part(part, index, rules, stats)
            converted.append(code or part)
        if converted:
            all_codes = all(index.has_code(part) for part in converted)
            separator = " or " if all_codes and not qualified else " and "
            return separator.join(converted)

    code = _resolve_part(text, index, rules, stats)
    return code or text


def resolve_prerequisites(
    courses: Sequence["Course"],
    rules: Sequence[MatchRule] = DEFAULT_RULES,
    index: CourseIndex | None = None,
) -> tuple[list["Course"], ResolutionStats]:
    """Resolve the prerequisite of every course against the catalog.

    The index is built from ``courses`` unless one is given.

    Args:
        courses: Catalog courses; also the lookup universe.
        rules: Rules to try, in order.
        index: Optional prebuilt lookup index.

    Returns:
        Tuple of (courses with resolved prerequisites, statistics).
    """
    index = index if index is not None else CourseIndex.from_courses(courses)
    stats = ResolutionStats(total=len(courses))
    result = []

    logger.info("Resolving prerequisites", courses=len(courses), names=len(index))

    for course in courses:
        original = course.prerequisite
        if index.is_code_list(original):
            stats.already_codes += 1

        converted = convert_prerequisite(original, index, rules, stats)
        if converted != original:
            course = course.model_copy(update={"prerequisite": converted})
            stats.updated += 1
        else:
            stats.unchanged += 1
        result.append(course)

    logger.info(
        "Prerequisite resolution complete",
        updated=stats.updated,
        unchanged=stats.unchanged,
        already_codes=stats.already_codes,
        unmatched=len(stats.unmatched),
    )
    return result, stats


def build_unmatched_report(
    stats: ResolutionStats,
    index: CourseIndex,
    limit: int = 20,
) -> list[UnmatchedPrerequisite]:
    """Rank unmatched clauses and suggest the closest course name for each.

    Suggestions are for manual follow-up only and never change the catalog.

    Args:
        stats: Statistics from ``resolve_prerequisites``.
        index: Catalog lookup index.
        limit: Maximum number of entries.

    Returns:
        Report entries, most frequent first.
    """
    choices = {entry.normalized: entry.name for entry in index.entries if entry.normalized}
    report = []

    for text, count in stats.top_unmatched(limit):
        match = process.extractOne(
            normalize_for_matching(text),
            list(choices),
            scorer=fuzz.ratio,
        )
        if match:
            report.append(UnmatchedPrerequisite(text, count, choices[match[0]], match[1]))
        else:
            report.append(UnmatchedPrerequisite(text, count))

    if len(stats.unmatched) > limit:
        logger.warning(
            "Unmatched prerequisites truncated",
            shown=limit,
            total=len(stats.unmatched),
        )
    return report
