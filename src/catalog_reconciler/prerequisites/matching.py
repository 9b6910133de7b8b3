"""Text normalization and the course lookup index used for matching.

Course names in prerequisite text rarely match catalog names exactly:
they use Roman numerals, drop semester markers, carry typos or virtual
delivery suffixes. ``normalize_for_matching`` maps both sides into one
comparable form.
"""

from collections.abc import Iterable
from dataclasses import dataclass
import re
from typing import TYPE_CHECKING

from catalog_reconciler.normalization.fields import is_na

if TYPE_CHECKING:
    from catalog_reconciler.models.course import Course

# Known misspellings found in catalog prerequisite text
TYPO_CORRECTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"caclulus", re.IGNORECASE), "calculus"),
    (re.compile(r"amination", re.IGNORECASE), "animation"),
)

# Standalone Roman numerals, case-sensitive so the word "i" is not touched
ROMAN_NUMERALS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bI\b"), "1"),
    (re.compile(r"\bII\b"), "2"),
    (re.compile(r"\bIII\b"), "3"),
    (re.compile(r"\bIV\b"), "4"),
)

# Shorthand → full course-name fragment, applied to normalized text.
# Only the first matching entry is substituted.
ABBREVIATIONS: tuple[tuple[str, str], ...] = (
    ("asl", "american sign language"),
    ("engl", "english"),
    ("advanced placement language and composition", "ap english language"),
    ("ap language and composition", "ap english language"),
    ("cisco network engineering", "network engineering"),
    ("network engineering i/lab", "network engineering 1"),
    ("network engineering i lab", "network engineering 1"),
)

_KAP_MARKER = re.compile(r"\s*\(KAP\)", re.IGNORECASE)
_PARENTHETICAL = re.compile(r"\s*\(.*?\)")
_LEADING_ASTERISK = re.compile(r"^\*")
_VIRTUAL_SUFFIX = re.compile(r"\s*-\s*(VirSup|VirInstDay|SummerVir).*$", re.IGNORECASE)
_SEMESTER_MARKER = re.compile(r"\s+[AB]\s*$", re.IGNORECASE)
_AMPERSAND = re.compile(r"\s*&\s*")
_WHITESPACE = re.compile(r"\s+")
_LAB_SUFFIX = re.compile(r"/lab", re.IGNORECASE)
_SLASH = re.compile(r"/\s*")

_COREQUISITE_PREFIX = re.compile(r"^corequisite:\s*", re.IGNORECASE)
_BARE_NUMBER = re.compile(r"^\d+$")
_BARE_ROMAN = re.compile(r"^[IVX]+$", re.IGNORECASE)

# Credit-hour and grade-level phrases ("2 credits of", "of high school")
QUALIFYING_TEXT = re.compile(
    r"\d+\s*(credit|credits|hours?)\s*(of|in)|of\s+(high\s+school|college)",
    re.IGNORECASE,
)


def fix_typos(text: str) -> str:
    """Correct known misspellings of course names."""
    for pattern, replacement in TYPO_CORRECTIONS:
        text = pattern.sub(replacement, text)
    return text


def normalize_for_matching(name: str) -> str:
    """Normalize a course name or prerequisite for comparison.

    Steps, in order: typo correction, Roman numerals I-IV to digits,
    ``(KAP)`` kept as `` KAP``, other parentheticals removed, leading ``*``
    removed, virtual delivery suffixes removed, trailing `` A``/`` B``
    removed, ``&`` to ``and``, whitespace collapsed, lowercased.

    Args:
        name: Course name or prerequisite text.

    Returns:
        The comparable form.

    Example:
        >>> normalize_for_matching("Algebra I A")
        'algebra 1'
        >>> normalize_for_matching("Chemistry (KAP) - VirSup")
        'chemistry kap'
    """
    normalized = fix_typos(name.strip())

    for pattern, digit in ROMAN_NUMERALS:
        normalized = pattern.sub(digit, normalized)

    normalized = _KAP_MARKER.sub(" KAP", normalized)
    normalized = _PARENTHETICAL.sub("", normalized)
    normalized = _LEADING_ASTERISK.sub("", normalized)
    normalized = _VIRTUAL_SUFFIX.sub("", normalized)
    normalized = _SEMESTER_MARKER.sub("", normalized)
    normalized = _AMPERSAND.sub(" and ", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()

    return normalized.lower()


def expand_abbreviations(normalized: str) -> str:
    """Expand shorthand in normalized prerequisite text.

    ``/lab`` is dropped and other slashes become spaces before the
    abbreviation table is consulted.

    Example:
        >>> expand_abbreviations("asl 2")
        'american sign language 2'
    """
    expanded = _LAB_SUFFIX.sub("", normalized)
    expanded = _SLASH.sub(" ", expanded)

    for abbreviation, full in ABBREVIATIONS:
        if abbreviation in expanded:
            expanded = expanded.replace(abbreviation, full, 1)
            break

    # "Presentation I" is the short form of this engineering course
    if "presentation" in normalized and "1" in normalized:
        expanded = "engineering design and presentation"

    return expanded


def strip_corequisite_prefix(text: str) -> str:
    """Remove a mislabelled ``"Corequisite:"`` prefix."""
    return _COREQUISITE_PREFIX.sub("", text.strip()).strip()


def is_bare_numeral(text: str) -> bool:
    """Check for a standalone number or Roman numeral such as ``"3"`` or ``"II"``."""
    text = text.strip()
    return bool(_BARE_NUMBER.match(text) or _BARE_ROMAN.match(text))


def has_qualifying_text(text: str) -> bool:
    """Check for credit-hour or grade-level phrases that are not course names."""
    return bool(QUALIFYING_TEXT.search(text))


@dataclass(frozen=True)
class PrerequisiteQuery:
    """One prerequisite clause prepared for matching.

    Attributes:
        raw: The clause as written, trimmed.
        text: The clause with typos corrected.
        lower: ``text`` lowercased.
        normalized: ``normalize_for_matching(text)``.
        expanded: ``normalized`` with abbreviations expanded.
    """

    raw: str
    text: str
    lower: str
    normalized: str
    expanded: str

    @classmethod
    def from_text(cls, clause: str) -> "PrerequisiteQuery":
        """Prepare a clause for matching."""
        raw = clause.strip()
        text = fix_typos(raw)
        normalized = normalize_for_matching(text)
        return cls(
            raw=raw,
            text=text,
            lower=text.lower(),
            normalized=normalized,
            expanded=expand_abbreviations(normalized),
        )


@dataclass(frozen=True)
class IndexedName:
    """A catalog course name with its precomputed comparison forms."""

    name: str
    code: str
    lower: str
    normalized: str


class CourseIndex:
    """Lookup universe for prerequisite matching.

    Holds every course code and a name → code map in which the first code
    seen for a distinct (trimmed) name wins. Iteration over ``entries``
    follows catalog order, which is the tie-break for every rule.

    Example:
        >>> index = CourseIndex.from_courses(catalog.courses)
        >>> index.code_for_name("Algebra 1")
        '0310'
    """

    def __init__(self, pairs: Iterable[tuple[str, str]]) -> None:
        """Build the index.

        Args:
            pairs: ``(course_code, course_name)`` pairs in catalog order.
        """
        codes: set[str] = set()
        names: dict[str, str] = {}

        for raw_code, raw_name in pairs:
            code = (raw_code or "").strip()
            name = (raw_name or "").strip()
            if code:
                codes.add(code)
            if code and name and name not in names:
                names[name] = code

        self._codes = frozenset(codes)
        self._names = names
        self._entries = tuple(
            IndexedName(
                name=name,
                code=code,
                lower=name.lower(),
                normalized=normalize_for_matching(name),
            )
            for name, code in names.items()
        )

    @classmethod
    def from_courses(cls, courses: Iterable["Course"]) -> "CourseIndex":
        """Build the index from catalog courses."""
        return cls((course.course_code, course.course_name) for course in courses)

    @property
    def codes(self) -> frozenset[str]:
        """All course codes in the catalog."""
        return self._codes

    @property
    def entries(self) -> tuple[IndexedName, ...]:
        """Distinct course names in catalog order."""
        return self._entries

    @property
    def names(self) -> list[str]:
        """Distinct course names in catalog order."""
        return list(self._names)

    def __len__(self) -> int:
        return len(self._entries)

    def has_code(self, text: str) -> bool:
        """Check whether text is exactly a catalog course code."""
        return text.strip() in self._codes

    def code_for_name(self, name: str) -> str | None:
        """Return the code for an exact (trimmed) course name."""
        return self._names.get(name.strip())

    def is_code_list(self, text: str) -> bool:
        """Check whether text is a code or an ``" or "``-joined list of codes."""
        if is_na(text):
            return False
        parts = re.split(r"\s+or\s+", text.strip(), flags=re.IGNORECASE)
        return all(self.has_code(part) for part in parts)
