"""School-name canonicalization.

The same school shows up as ``"Seven Lakes High School"`` in page content
and as ``"SevenLakesHighSchool"`` in file names. Two names are the same
school iff they match after whitespace removal and lowercasing; when both
forms are present the spaced form is kept.
"""

from collections.abc import Iterable, Mapping, Sequence
import re
from typing import Any

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def normalize_school_name(name: str) -> str:
    """Return the equivalence key for a school name.

    Args:
        name: School name in any format.

    Returns:
        The name with all whitespace removed, lowercased.

    Example:
        >>> normalize_school_name("Adams Junior High")
        'adamsjuniorhigh'
    """
    return _WHITESPACE.sub("", name).lower()


def names_are_equivalent(name1: str, name2: str) -> bool:
    """Check if two school names denote the same school."""
    return normalize_school_name(name1) == normalize_school_name(name2)


def school_name_to_slug(name: str) -> str:
    """Convert a school name into its compact, filesystem-safe form.

    Example:
        >>> school_name_to_slug("Seven Lakes High School")
        'SevenLakesHighSchool'
    """
    return _NON_ALNUM.sub("", _WHITESPACE.sub("", name))


def _is_spaced(name: str) -> bool:
    return " " in name


def find_canonical_name(key: str, candidates: Iterable[str]) -> str | None:
    """Find the best-formatted candidate equivalent to ``key``.

    Args:
        key: Equivalence key, as returned by ``normalize_school_name``.
        candidates: Names to search, in order.

    Returns:
        The first equivalent candidate containing a space, else the first
        equivalent candidate, else None.
    """
    first_match = None
    for candidate in candidates:
        if normalize_school_name(candidate) != key:
            continue
        if _is_spaced(candidate):
            return candidate
        if first_match is None:
            first_match = candidate
    return first_match


def merge_school_names(existing: Sequence[str], incoming: Iterable[str]) -> list[str]:
    """Union two school lists under normalized-name equivalence.

    A new name equivalent to an existing one replaces it in place when the
    new name contains a space and the existing one does not. Otherwise the
    existing entry is kept.

    Args:
        existing: Current school list.
        incoming: Names to merge in.

    Returns:
        A new list without normalized duplicates.
    """
    result = list(existing)
    for school in incoming:
        school = school.strip()
        if not school:
            continue
        key = normalize_school_name(school)
        index = next(
            (i for i, current in enumerate(result) if normalize_school_name(current) == key),
            None,
        )
        if index is None:
            result.append(school)
        elif _is_spaced(school) and not _is_spaced(result[index]):
            result[index] = school
    return result


def dedupe_school_names(schools: Iterable[str]) -> list[str]:
    """Collapse normalized duplicates within a single school list."""
    return merge_school_names([], schools)


def resolve_source_school(
    declared: str,
    courses: Iterable[Mapping[str, Any]],
) -> str:
    """Determine the canonical school name for a source document.

    Names taken from file names are compact slugs. When the declared name
    has no space, the courses' own ``schools`` arrays are searched for an
    equivalent spaced form.

    Args:
        declared: School name from the document or its file name.
        courses: Course entries of the document.

    Returns:
        The best available form of the school name.
    """
    declared = declared.strip()
    if not declared or _is_spaced(declared):
        return declared

    key = normalize_school_name(declared)
    fallback = None
    for course in courses:
        schools = course.get("schools")
        if not isinstance(schools, list) or not schools:
            continue
        canonical = find_canonical_name(key, (s for s in schools if isinstance(s, str)))
        if canonical and _is_spaced(canonical):
            return canonical
        if canonical and fallback is None:
            fallback = canonical
    return fallback or declared
