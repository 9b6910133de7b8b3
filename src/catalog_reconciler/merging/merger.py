"""Cross-source catalog merging.

Folds per-source (per-school) course collections into one map keyed by
``course_code``. The fold is a pure reducer::

    merged = merge_sources([source_a, source_b, ...])
    # == reduce(merge_source, sources, {})

Scalar conflicts are resolved by "first informative value wins" in source
order, so callers must pass sources in a fixed order (the pipeline uses
lexical file-name order) to get reproducible output.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError
import structlog

from catalog_reconciler.exceptions import SchemaViolationError
from catalog_reconciler.models.course import Course, create_course
from catalog_reconciler.normalization.fields import (
    coalesce,
    union_preserving_order,
)
from catalog_reconciler.normalization.gpa import calculate_gpa
from catalog_reconciler.normalization.schools import (
    merge_school_names,
    resolve_source_school,
)
from catalog_reconciler.validation.schema import format_validation_errors

logger = structlog.get_logger(__name__)

# Text fields where an informative existing value wins over an incoming one
MERGED_TEXT_FIELDS: tuple[str, ...] = (
    "course_name",
    "subject",
    "term",
    "prerequisite",
    "corequisite",
    "enrollment_notes",
    "course_description",
)


@dataclass(frozen=True)
class SourceDocument:
    """One per-source document awaiting merge.

    Attributes:
        name: Identifier used in logs (usually the file name).
        data: The parsed document, expected shape ``{source, courses}``.
    """

    name: str
    data: Mapping[str, Any]

    @classmethod
    def from_path(cls, path: Path, data: Mapping[str, Any]) -> "SourceDocument":
        """Create a source document named after its file."""
        return cls(name=path.name, data=data)

    @property
    def declared_school(self) -> str:
        """School name from the document, or derived from its name.

        ``courses.katyisd.SevenLakesHighSchool.json`` → ``SevenLakesHighSchool``.
        """
        source = self.data.get("source")
        if isinstance(source, Mapping) and isinstance(source.get("school"), str):
            return source["school"]
        stem = self.name[: -len(".json")] if self.name.lower().endswith(".json") else self.name
        return stem.split(".")[-1]


@dataclass
class MergeStats:
    """Statistics about a merge run.

    Attributes:
        sources_merged: Names of sources folded into the catalog.
        sources_skipped: Names of sources skipped as malformed.
        rows_seen: Course entries read across all merged sources.
        rows_without_code: Entries skipped for lacking a course code.
        schools_defaulted: Entries whose missing schools list was defaulted.
        inserted: Entries that introduced a new course code.
        merged: Entries folded into an existing course code.
    """

    sources_merged: list[str] = field(default_factory=list)
    sources_skipped: list[str] = field(default_factory=list)
    rows_seen: int = 0
    rows_without_code: int = 0
    schools_defaulted: int = 0
    inserted: int = 0
    merged: int = 0


def merge_course(existing: Course, incoming: Course) -> Course:
    """Merge an incoming course into an existing one with the same code.

    - text fields: existing wins if informative, else incoming
    - credits: existing wins unless it is zero
    - tags, eligible grades: case-sensitive union
    - schools: union under normalized-name equivalence
    - gpa: re-derived from the merged name and tags

    Args:
        existing: Course already in the accumulator.
        incoming: Course contributed by the current source.

    Returns:
        The merged course (a new object).
    """
    update: dict[str, Any] = {
        name: coalesce(getattr(existing, name), getattr(incoming, name))
        for name in MERGED_TEXT_FIELDS
    }
    update["credits"] = existing.credits or incoming.credits
    update["tags"] = union_preserving_order(existing.tags, incoming.tags)
    update["eligible_grades"] = union_preserving_order(
        existing.eligible_grades, incoming.eligible_grades
    )
    update["schools"] = merge_school_names(existing.schools, incoming.schools)
    update["gpa"] = calculate_gpa(update["course_name"], update["tags"])

    return existing.model_copy(update=update)


def _course_from_entry(
    entry: Mapping[str, Any],
    school: str,
    source_name: str,
    stats: MergeStats,
) -> Course | None:
    """Normalize one course entry of a source document.

    Returns None for entries without a course code.
    """
    code = entry.get("courseCode")
    if not isinstance(code, str) or not code.strip():
        stats.rows_without_code += 1
        logger.warning("Skipping course without courseCode", source=source_name)
        return None

    record = dict(entry)
    if not isinstance(record.get("schools"), list):
        record["schools"] = []
        stats.schools_defaulted += 1

    try:
        course = create_course(record)
    except ValidationError as e:
        issues = [f"{source_name} [{code}] {issue}" for issue in format_validation_errors(e)]
        raise SchemaViolationError(issues) from e

    if school:
        course = course.model_copy(
            update={"schools": merge_school_names(course.schools, [school])}
        )
    return course


def merge_source(
    accumulator: Mapping[str, Course],
    source: SourceDocument,
    stats: MergeStats | None = None,
) -> dict[str, Course]:
    """Fold one source document into the accumulated catalog.

    A document without a ``courses`` array is skipped with a warning.

    Args:
        accumulator: Courses merged so far, keyed by course code.
        source: The next source document.
        stats: Optional statistics object updated in place.

    Returns:
        A new mapping; the accumulator is not modified.

    Raises:
        SchemaViolationError: If a course entry cannot be normalized.
    """
    stats = stats if stats is not None else MergeStats()
    result = dict(accumulator)

    courses = source.data.get("courses") if isinstance(source.data, Mapping) else None
    if not isinstance(courses, list):
        logger.warning("Skipping source without courses array", source=source.name)
        stats.sources_skipped.append(source.name)
        return result

    entries = [entry for entry in courses if isinstance(entry, Mapping)]
    school = resolve_source_school(source.declared_school, entries)
    logger.info("Merging source", source=source.name, school=school, courses=len(entries))

    for entry in entries:
        stats.rows_seen += 1
        course = _course_from_entry(entry, school, source.name, stats)
        if course is None:
            continue

        existing = result.get(course.course_code)
        if existing is None:
            result[course.course_code] = course
            stats.inserted += 1
        else:
            result[course.course_code] = merge_course(existing, course)
            stats.merged += 1

    stats.sources_merged.append(source.name)
    return result


def merge_sources(
    sources: Iterable[SourceDocument],
    initial: Mapping[str, Course] | None = None,
) -> tuple[dict[str, Course], MergeStats]:
    """Merge source documents in the order given.

    Args:
        sources: Source documents, in a fixed reproducible order.
        initial: Optional courses to start from.

    Returns:
        Tuple of (courses keyed by code in first-seen order, statistics).
    """
    stats = MergeStats()
    merged: dict[str, Course] = dict(initial or {})

    for source in sources:
        merged = merge_source(merged, source, stats)

    logger.info(
        "Merge complete",
        sources=len(stats.sources_merged),
        skipped=len(stats.sources_skipped),
        rows=stats.rows_seen,
        unique_courses=len(merged),
    )
    return merged, stats
