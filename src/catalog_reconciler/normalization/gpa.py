"""Grade-point classification.

The GPA stored on a course is a cache of ``calculate_gpa(name, tags)``.
It is re-derived in a separate, idempotent pass so that any change to a
course name or tag list (merge, pair collapse) is reflected.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from catalog_reconciler.models.course import Course

logger = structlog.get_logger(__name__)

GPA_ADVANCED = 5.0
GPA_DUAL_CREDIT = 4.5
GPA_REGULAR = 4.0

GPA_VALUES: frozenset[float] = frozenset({GPA_REGULAR, GPA_DUAL_CREDIT, GPA_ADVANCED})

ADVANCED_MARKERS = ("AP", "KAP")
DUAL_CREDIT_NAME_MARKER = "DUAL CREDIT"
DUAL_CREDIT_TAG = "DC"


def calculate_gpa(course_name: str, tags: Iterable[str]) -> float:
    """Calculate the grade-point scale for a course.

    - AP or KAP in the name or tags → 5.0
    - "Dual Credit" in the name or a "DC" tag → 4.5
    - everything else → 4.0

    Name checks are substring checks on the upper-cased name; tag checks
    are case-insensitive membership tests.

    Args:
        course_name: Course display name.
        tags: Course tags.

    Returns:
        One of 4.0, 4.5 or 5.0.

    Example:
        >>> calculate_gpa("AP Dual Credit Seminar", ["DC"])
        5.0
    """
    name_upper = (course_name or "").upper()
    tags_upper = {tag.upper() for tag in tags}

    if any(marker in name_upper for marker in ADVANCED_MARKERS) or any(
        marker in tags_upper for marker in ADVANCED_MARKERS
    ):
        return GPA_ADVANCED

    if DUAL_CREDIT_NAME_MARKER in name_upper or DUAL_CREDIT_TAG in tags_upper:
        return GPA_DUAL_CREDIT

    return GPA_REGULAR


@dataclass
class GpaStats:
    """Outcome of a GPA assignment pass.

    Attributes:
        total: Courses examined.
        updated: Courses whose stored GPA changed.
        distribution: Number of courses per GPA value.
    """

    total: int = 0
    updated: int = 0
    distribution: Counter[float] = field(default_factory=Counter)

    @property
    def unchanged(self) -> int:
        """Courses whose stored GPA was already correct."""
        return self.total - self.updated


def assign_gpa(courses: Sequence["Course"]) -> tuple[list["Course"], GpaStats]:
    """Re-derive the GPA of every course.

    Running this twice yields the same catalog as running it once.

    Args:
        courses: Courses to classify.

    Returns:
        Tuple of (courses with GPA set, statistics).
    """
    stats = GpaStats(total=len(courses))
    result = []

    for course in courses:
        gpa = calculate_gpa(course.course_name, course.tags)
        if course.gpa != gpa:
            course = course.model_copy(update={"gpa": gpa})
            stats.updated += 1
        stats.distribution[gpa] += 1
        result.append(course)

    logger.info(
        "GPA assignment complete",
        total=stats.total,
        updated=stats.updated,
        distribution=dict(stats.distribution),
    )
    return result, stats
