"""Course Catalog Reconciler.

Reconciles independently extracted, per-school course collections into one
canonical, deduplicated district catalog: field normalization, merge by
course code, A/B semester-pair consolidation, GPA classification and
prerequisite name-to-code resolution.

Usage:
    from catalog_reconciler import PipelineConfig, run_pipeline

    # Full run (merge → collapse-ab → gpa → prerequisites)
    config = PipelineConfig.from_env()
    report = run_pipeline(config)

    # Single stage against an existing catalog
    report = run_pipeline(config, step="prerequisites")

    # In-memory use
    merged, stats = merge_sources(documents)
    courses, collapse_stats = collapse_semester_pairs(list(merged.values()))
"""

# =============================================================================
# CONFIGURATION & EXCEPTIONS
# =============================================================================
from .config import PipelineConfig
from .exceptions import (
    ConfigError,
    MissingInputError,
    ReconcilerError,
    SchemaViolationError,
)

# =============================================================================
# MERGING
# =============================================================================
from .merging import (
    CollapseStats,
    MergeStats,
    SourceDocument,
    collapse_semester_pairs,
    consolidate_pair,
    merge_course,
    merge_source,
    merge_sources,
)

# =============================================================================
# MODELS
# =============================================================================
from .models import CatalogSource, Course, CourseCatalog, RawRecord, create_course

# =============================================================================
# NORMALIZATION
# =============================================================================
from .normalization import (
    GpaStats,
    assign_gpa,
    calculate_gpa,
    clean_description,
    normalize_na,
    normalize_school_name,
    parse_credits,
    parse_grades,
)

# =============================================================================
# PIPELINE
# =============================================================================
from .pipeline import STEPS, ingest_raw_records, run_pipeline

# =============================================================================
# PREREQUISITES
# =============================================================================
from .prerequisites import (
    DEFAULT_RULES,
    CourseIndex,
    MatchRule,
    ResolutionStats,
    convert_prerequisite,
    find_course_code,
    resolve_prerequisites,
)

# =============================================================================
# VALIDATION
# =============================================================================
from .validation import RunReport, validate_catalog

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Configuration & exceptions
    "PipelineConfig",
    "ConfigError",
    "MissingInputError",
    "ReconcilerError",
    "SchemaViolationError",
    # Models
    "CatalogSource",
    "Course",
    "CourseCatalog",
    "RawRecord",
    "create_course",
    # Normalization
    "GpaStats",
    "assign_gpa",
    "calculate_gpa",
    "clean_description",
    "normalize_na",
    "normalize_school_name",
    "parse_credits",
    "parse_grades",
    # Merging
    "CollapseStats",
    "MergeStats",
    "SourceDocument",
    "collapse_semester_pairs",
    "consolidate_pair",
    "merge_course",
    "merge_source",
    "merge_sources",
    # Prerequisites
    "DEFAULT_RULES",
    "CourseIndex",
    "MatchRule",
    "ResolutionStats",
    "convert_prerequisite",
    "find_course_code",
    "resolve_prerequisites",
    # Pipeline
    "STEPS",
    "ingest_raw_records",
    "run_pipeline",
    # Validation
    "RunReport",
    "validate_catalog",
]
