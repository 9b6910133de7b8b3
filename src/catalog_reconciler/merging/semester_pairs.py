"""Semester-pair consolidation.

Many full-year courses are catalogued as two half-year entries whose codes
differ only by a trailing ``A``/``B`` (``0100A``/``0100B``). This module
fuses each complete pair into one entry keyed by the base code (``0100``).

Every catalog entry is classified into exactly one group member variant:

- ``CompletePair``: first A and first B for a base code → one consolidated course
- ``PartialPair``: only an A or only a B exists → kept under its own code
- ``Unpaired``: code has no A/B suffix → kept
- ``DuplicateMember``: a second (third, ...) A or B for a base code → kept,
  with a warning, since it cannot be told which duplicate is authoritative
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
import re

import structlog

from catalog_reconciler.models.course import SCALAR_TEXT_FIELDS, Course
from catalog_reconciler.normalization.fields import coalesce, union_preserving_order
from catalog_reconciler.normalization.schools import merge_school_names

logger = structlog.get_logger(__name__)

FULL_YEAR_TERM = "Semester 1-Semester 2"

_SUFFIX_PATTERN = re.compile(r"^(.+)([AB])$")

# " A (High School Credit)" → " (High School Credit)"
_SPACED_MARKER = re.compile(r"\s+[AB](\s*\(.*\))?$")
# "Decathlon 2A" → "Decathlon 2"; only after a digit or lowercase letter so
# all-caps words ending in A/B ("USA") are left alone
_ABUTTING_MARKER = re.compile(r"([0-9a-z])[AB](\s*\(.*\))?$")
# "Spanish IIA" → "Spanish II"; only for entries coded as a semester half so
# unpaired names such as "Biology IB" keep their letters
_ROMAN_ABUTTING_MARKER = re.compile(r"(\b[IVX]+|[0-9a-z])[AB](\s*\(.*\))?$")

# Fields consolidated with "A unless n/a, else B"; term is replaced outright
_PAIR_TEXT_FIELDS = tuple(name for name in SCALAR_TEXT_FIELDS if name != "term")


def split_semester_code(course_code: str) -> tuple[str, str] | None:
    """Split a course code into (base code, suffix).

    Example:
        >>> split_semester_code("0100A")
        ('0100', 'A')
        >>> split_semester_code("0100") is None
        True
    """
    match = _SUFFIX_PATTERN.match(course_code)
    if not match:
        return None
    return match.group(1), match.group(2)


def strip_semester_marker(course_name: str, semester_half: bool = False) -> str:
    """Remove a trailing A/B semester marker from a course name.

    A trailing parenthetical is preserved. When ``semester_half`` is set
    (the course code ends in A or B), a marker directly after a Roman
    numeral is removed as well.

    Example:
        >>> strip_semester_marker("Art 1 A (High School Credit)")
        'Art 1 (High School Credit)'
        >>> strip_semester_marker("Academic Decathlon 2A")
        'Academic Decathlon 2'
        >>> strip_semester_marker("Spanish IIA", semester_half=True)
        'Spanish II'
    """
    stripped = _SPACED_MARKER.sub(r"\1", course_name)
    if stripped == course_name:
        abutting = _ROMAN_ABUTTING_MARKER if semester_half else _ABUTTING_MARKER
        stripped = abutting.sub(r"\1\2", course_name)
    return stripped.strip() or course_name


# -----------------------------------------------------------------------------
# Group member variants
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CompletePair:
    """First A and first B entries sharing a base code."""

    base_code: str
    a: Course
    b: Course


@dataclass(frozen=True)
class PartialPair:
    """An A or B entry kept under its own code.

    ``collided`` is set when both halves exist but the base code is already
    used by another catalog entry.
    """

    base_code: str
    course: Course
    collided: bool = False


@dataclass(frozen=True)
class Unpaired:
    """An entry whose code carries no semester suffix."""

    course: Course


@dataclass(frozen=True)
class DuplicateMember:
    """An extra entry with the same base code and suffix as an earlier one."""

    base_code: str
    suffix: str
    course: Course


GroupMember = CompletePair | PartialPair | Unpaired | DuplicateMember


@dataclass
class _SemesterGroup:
    base_code: str
    a: Course | None = None
    b: Course | None = None
    extras: list[tuple[str, Course]] = field(default_factory=list)


@dataclass
class CollapseStats:
    """Statistics about a pair-collapse run.

    Attributes:
        before: Courses before collapsing.
        after: Courses after collapsing.
        collapsed_pairs: Complete pairs fused into one entry.
        partial_pairs: A-only or B-only entries kept as-is.
        untouched: Entries without a semester suffix.
        duplicates: Extra same-suffix entries kept separately.
        code_collisions: Complete pairs not fused because the base code was taken.
        renamed: Entries whose name lost a semester marker.
    """

    before: int = 0
    after: int = 0
    collapsed_pairs: int = 0
    partial_pairs: int = 0
    untouched: int = 0
    duplicates: int = 0
    code_collisions: int = 0
    renamed: int = 0


def classify_semester_groups(courses: Sequence[Course]) -> list[GroupMember]:
    """Classify every course into one group member variant.

    Output order follows the first appearance of each base code (or of the
    course itself, for unpaired entries). Complete pairs whose base code is
    already used by another catalog entry are demoted to two partials.

    Args:
        courses: Catalog courses.

    Returns:
        One variant per output entry.
    """
    existing_codes = {course.course_code for course in courses}
    slots: list[_SemesterGroup | Unpaired] = []
    groups: dict[str, _SemesterGroup] = {}

    for course in courses:
        parts = split_semester_code(course.course_code)
        if parts is None:
            slots.append(Unpaired(course))
            continue

        base_code, suffix = parts
        group = groups.get(base_code)
        if group is None:
            group = _SemesterGroup(base_code)
            groups[base_code] = group
            slots.append(group)

        slot_name = "a" if suffix == "A" else "b"
        if getattr(group, slot_name) is None:
            setattr(group, slot_name, course)
        else:
            logger.warning(
                "Multiple semester entries for base code",
                base_code=base_code,
                suffix=suffix,
                course_code=course.course_code,
            )
            group.extras.append((suffix, course))

    members: list[GroupMember] = []
    for slot in slots:
        if isinstance(slot, Unpaired):
            members.append(slot)
            continue

        if slot.a is not None and slot.b is not None:
            if slot.base_code in existing_codes:
                logger.warning(
                    "Base code already in catalog, keeping semester entries separate",
                    base_code=slot.base_code,
                )
                members.append(PartialPair(slot.base_code, slot.a, collided=True))
                members.append(PartialPair(slot.base_code, slot.b, collided=True))
            else:
                members.append(CompletePair(slot.base_code, slot.a, slot.b))
        else:
            for half in (slot.a, slot.b):
                if half is not None:
                    members.append(PartialPair(slot.base_code, half))

        members.extend(DuplicateMember(slot.base_code, suffix, c) for suffix, c in slot.extras)

    return members


def consolidate_pair(a: Course, b: Course, base_code: str) -> Course:
    """Fuse an A and a B course into one full-year course.

    Args:
        a: First-semester course.
        b: Second-semester course.
        base_code: Code for the consolidated course.

    Returns:
        The consolidated course. Its GPA is A's; the GPA pass re-derives it.
    """
    update = {name: coalesce(getattr(a, name), getattr(b, name)) for name in _PAIR_TEXT_FIELDS}
    return a.model_copy(
        update={
            **update,
            "course_code": base_code,
            "course_name": strip_semester_marker(a.course_name, semester_half=True),
            "credits": a.credits + b.credits,
            "term": FULL_YEAR_TERM,
            "gpa": a.gpa,
            "tags": union_preserving_order(a.tags, b.tags),
            "schools": merge_school_names(a.schools, b.schools),
            "eligible_grades": union_preserving_order(a.eligible_grades, b.eligible_grades),
        }
    )


def _with_stripped_name(
    course: Course, stats: CollapseStats, semester_half: bool = False
) -> Course:
    name = strip_semester_marker(course.course_name, semester_half)
    if name == course.course_name:
        return course
    stats.renamed += 1
    return course.model_copy(update={"course_name": name})


def collapse_semester_pairs(courses: Sequence[Course]) -> tuple[list[Course], CollapseStats]:
    """Collapse A/B semester pairs across a catalog.

    Output size is ``len(courses) - stats.collapsed_pairs``.

    Args:
        courses: Merged catalog courses.

    Returns:
        Tuple of (new course list, statistics).
    """
    stats = CollapseStats(before=len(courses))
    result: list[Course] = []

    for member in classify_semester_groups(courses):
        if isinstance(member, CompletePair):
            result.append(consolidate_pair(member.a, member.b, member.base_code))
            stats.collapsed_pairs += 1
        elif isinstance(member, PartialPair):
            result.append(_with_stripped_name(member.course, stats, semester_half=True))
            stats.partial_pairs += 1
            if member.collided and member.course.course_code.endswith("A"):
                stats.code_collisions += 1
        elif isinstance(member, DuplicateMember):
            result.append(_with_stripped_name(member.course, stats, semester_half=True))
            stats.duplicates += 1
        else:
            result.append(_with_stripped_name(member.course, stats))
            stats.untouched += 1

    stats.after = len(result)
    logger.info(
        "Semester pair collapse complete",
        before=stats.before,
        after=stats.after,
        collapsed=stats.collapsed_pairs,
        partial=stats.partial_pairs,
        duplicates=stats.duplicates,
    )
    return result, stats
