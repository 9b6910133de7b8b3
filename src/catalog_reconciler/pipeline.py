"""Pipeline orchestration.

Sequences the reconciliation stages against files on disk:

1. merge: fold per-source files into the district catalog
2. collapse-ab: consolidate A/B semester pairs
3. gpa: re-derive every course's GPA
4. prerequisites: resolve prerequisite names to course codes

Each run reads its input once, transforms it in memory and writes the
catalog once. A fatal error aborts the run before anything is written.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
import structlog

from catalog_reconciler.catalog_io import (
    discover_source_files,
    load_catalog,
    load_source_documents,
    read_json,
    save_catalog,
    save_source_document,
)
from catalog_reconciler.config import PipelineConfig
from catalog_reconciler.exceptions import MissingInputError
from catalog_reconciler.merging.merger import (
    MergeStats,
    SourceDocument,
    merge_source,
    merge_sources,
)
from catalog_reconciler.merging.semester_pairs import CollapseStats, collapse_semester_pairs
from catalog_reconciler.models.course import CourseCatalog
from catalog_reconciler.normalization.gpa import GpaStats, assign_gpa
from catalog_reconciler.normalization.schools import school_name_to_slug
from catalog_reconciler.prerequisites.matching import CourseIndex
from catalog_reconciler.prerequisites.resolver import (
    ResolutionStats,
    UnmatchedPrerequisite,
    build_unmatched_report,
    resolve_prerequisites,
)
from catalog_reconciler.validation.reporter import RunReport
from catalog_reconciler.validation.schema import validate_catalog

console = Console()
logger = structlog.get_logger(__name__)

STEPS: tuple[str, ...] = ("all", "merge", "collapse-ab", "gpa", "prerequisites")


def _with_courses(catalog: CourseCatalog, courses: Sequence[Any]) -> CourseCatalog:
    return catalog.model_copy(update={"courses": list(courses)})


# =============================================================================
# Stages
# =============================================================================


def merge_stage(config: PipelineConfig) -> tuple[CourseCatalog, MergeStats]:
    """Merge every per-source file into a new district catalog.

    Args:
        config: Pipeline configuration.

    Returns:
        Tuple of (merged catalog, statistics).

    Raises:
        ConfigError: If district or source URL is missing.
        MissingInputError: If there are no per-source files or no courses.
        SchemaViolationError: If the merged catalog fails validation.
    """
    config.require_source()

    console.print("\n[bold cyan]Merging per-source files...[/]")
    paths = discover_source_files(config.sources_dir, config.source_glob)
    console.print(f"  Found {len(paths)} per-source files")
    for path in paths:
        console.print(f"    - {path.name}")

    merged, stats = merge_sources(load_source_documents(paths))
    if not merged:
        raise MissingInputError(config.sources_dir, "ingest", "no courses in per-source files")

    catalog = validate_catalog(
        {
            "source": {"district": config.district, "url": config.source_url},
            "courses": [course.to_document() for course in merged.values()],
        }
    )

    console.print(f"  Raw course rows read: {stats.rows_seen}")
    console.print(f"  Unique courses by code: {len(catalog.courses)}")
    if stats.sources_skipped:
        console.print(f"  [yellow]Skipped {len(stats.sources_skipped)} malformed source(s)[/]")
    return catalog, stats


def collapse_stage(catalog: CourseCatalog) -> tuple[CourseCatalog, CollapseStats]:
    """Consolidate A/B semester pairs."""
    console.print("\n[bold cyan]Collapsing A/B semester pairs...[/]")
    courses, stats = collapse_semester_pairs(catalog.courses)

    console.print(f"  Courses: {stats.before} → {stats.after}")
    console.print(f"  Pairs collapsed: {stats.collapsed_pairs}")
    console.print(f"  Partial pairs kept: {stats.partial_pairs}")
    if stats.duplicates:
        console.print(f"  [yellow]Duplicate semester entries kept: {stats.duplicates}[/]")
    return _with_courses(catalog, courses), stats


def gpa_stage(catalog: CourseCatalog) -> tuple[CourseCatalog, GpaStats]:
    """Re-derive the GPA of every course."""
    console.print("\n[bold cyan]Assigning GPA values...[/]")
    courses, stats = assign_gpa(catalog.courses)

    console.print(f"  Updated {stats.updated} courses ({stats.unchanged} unchanged)")
    for value, count in sorted(stats.distribution.items()):
        console.print(f"    GPA {value}: {count} courses")
    return _with_courses(catalog, courses), stats


def prerequisites_stage(
    catalog: CourseCatalog,
    report_limit: int = 20,
) -> tuple[CourseCatalog, ResolutionStats, list[UnmatchedPrerequisite]]:
    """Resolve prerequisite names to course codes.

    Args:
        catalog: Catalog to resolve; also the lookup universe.
        report_limit: Number of unmatched prerequisites to report.

    Returns:
        Tuple of (catalog, statistics, ranked unmatched prerequisites).
    """
    console.print("\n[bold cyan]Resolving prerequisites...[/]")
    index = CourseIndex.from_courses(catalog.courses)
    console.print(f"  Built mapping for {len(index)} unique course names")

    courses, stats = resolve_prerequisites(catalog.courses, index=index)
    unmatched = build_unmatched_report(stats, index, limit=report_limit)

    console.print(f"  Updated {stats.updated} prerequisites")
    console.print(f"  Unchanged {stats.unchanged} prerequisites")
    if stats.already_codes:
        console.print(f"  Already course codes: {stats.already_codes}")

    if unmatched:
        console.print(
            f"\n  [yellow]Found {len(stats.unmatched)} unmatched prerequisites:[/]"
        )
        for entry in unmatched:
            plural = "s" if entry.count > 1 else ""
            hint = f" [dim](closest: {entry.suggestion})[/]" if entry.suggestion else ""
            console.print(f'    "{entry.text}" ({entry.count} occurrence{plural}){hint}')
        if len(stats.unmatched) > len(unmatched):
            console.print(f"    ... and {len(stats.unmatched) - len(unmatched)} more")

    return _with_courses(catalog, courses), stats, unmatched


# =============================================================================
# Runner
# =============================================================================


def run_pipeline(config: PipelineConfig, step: str = "all") -> RunReport:
    """Run one pipeline step, or all of them, against files on disk.

    ``all`` runs every stage in memory and writes the catalog once.
    Single stages after ``merge`` read the existing catalog.

    Args:
        config: Pipeline configuration.
        step: One of ``STEPS``.

    Returns:
        Report of the run.

    Raises:
        ValueError: If the step is unknown.
        ReconcilerError: On any fatal error; nothing is written.
    """
    if step not in STEPS:
        msg = f"Unknown step {step!r}; expected one of {', '.join(STEPS)}"
        raise ValueError(msg)

    logger.info("Starting pipeline", step=step, catalog=str(config.catalog_path))
    report = RunReport(step=step, catalog_path=config.catalog_path)

    if step in ("all", "merge"):
        catalog, report.merge = merge_stage(config)
    else:
        console.print(f"Reading {config.catalog_path}...")
        catalog = load_catalog(config.catalog_path, stage="merge")

    if step in ("all", "collapse-ab"):
        catalog, report.collapse = collapse_stage(catalog)

    if step in ("all", "gpa"):
        catalog, report.gpa = gpa_stage(catalog)

    if step in ("all", "prerequisites"):
        catalog, report.prerequisites, report.unmatched = prerequisites_stage(
            catalog, config.unmatched_report_limit
        )

    console.print("\nValidating catalog...")
    saved = save_catalog(catalog, config.catalog_path)
    report.total_courses = len(saved.courses)
    console.print("[green]✓ Validation passed[/]")

    if config.report_path is not None:
        report.save(config.report_path)
        console.print(f"  Report: {config.report_path}")

    console.print("\n[bold green]✓ Pipeline complete![/]")
    console.print(f"  Output file: {config.catalog_path}")
    console.print(f"  Total courses: {report.total_courses}")

    logger.info("Pipeline complete", step=step, courses=report.total_courses)
    return report


# =============================================================================
# Ingestion
# =============================================================================


def _read_records(path: Path) -> list[Mapping[str, Any]]:
    """Read raw records from a JSON array or a ``{courses: [...]}`` document."""
    data = read_json(path, "extract")
    if isinstance(data, Mapping):
        data = data.get("courses")
    if not isinstance(data, list):
        raise MissingInputError(path, "extract", "expected a list of course records")
    return [record for record in data if isinstance(record, Mapping)]


def _load_existing_source(target: Path) -> dict:
    """Merge a school's current per-source file, refusing to replace a broken one."""
    data = read_json(target, "ingest")
    if not isinstance(data, Mapping) or not isinstance(data.get("courses"), list):
        raise MissingInputError(target, "ingest", "existing per-source file has no courses list")
    return merge_source({}, SourceDocument.from_path(target, data))


def ingest_raw_records(
    records_path: Path,
    school: str,
    config: PipelineConfig,
) -> tuple[Path, MergeStats]:
    """Turn one school's raw records into its per-source file.

    Records are normalized and merged into the school's existing per-source
    file, if there is one; courses already in the file keep their values
    and gain any missing information.

    Args:
        records_path: JSON file of raw records for the school.
        school: Display name of the school, e.g. "Seven Lakes High School".
        config: Pipeline configuration.

    Returns:
        Tuple of (per-source file written, statistics).

    Raises:
        MissingInputError: If the records file is missing or malformed, or the
            existing per-source file is unreadable.
        SchemaViolationError: If a record cannot be normalized.
    """
    school = school.strip()
    records = _read_records(records_path)

    target = config.source_file_for(school_name_to_slug(school))
    existing: dict = {}
    if target.is_file():
        existing = _load_existing_source(target)
        console.print(f"  Loaded {len(existing)} existing courses from {target}")

    incoming = SourceDocument(
        name=records_path.name,
        data={"source": {"school": school}, "courses": [dict(r) for r in records]},
    )
    stats = MergeStats()
    merged = merge_source(existing, incoming, stats)

    source: dict[str, Any] = {"school": school}
    if config.district:
        source["district"] = config.district
    if config.source_url:
        source["url"] = config.source_url

    document = {
        "source": source,
        "courses": [course.to_document() for course in merged.values()],
    }
    save_source_document(document, target)

    added = len(merged) - len(existing)
    console.print(f"[green]✓ Saved {len(merged)} courses for {school} ({added} new)[/]")
    logger.info("Ingested raw records", school=school, path=str(target), added=added)
    return target, stats

