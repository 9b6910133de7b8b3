"""Normalization of course fields, grade points and school names.

This package provides:
- Field normalization (``"n/a"`` sentinel, credits, grades, descriptions)
- GPA classification from course name and tags
- School-name equivalence and canonical-form selection
"""

from catalog_reconciler.normalization.fields import (
    NA,
    clean_description,
    coalesce,
    is_na,
    normalize_na,
    parse_credits,
    parse_grades,
    union_preserving_order,
)
from catalog_reconciler.normalization.gpa import (
    GPA_VALUES,
    GpaStats,
    assign_gpa,
    calculate_gpa,
)
from catalog_reconciler.normalization.schools import (
    dedupe_school_names,
    find_canonical_name,
    merge_school_names,
    names_are_equivalent,
    normalize_school_name,
    resolve_source_school,
    school_name_to_slug,
)

__all__ = [
    # Fields
    "NA",
    "clean_description",
    "coalesce",
    "is_na",
    "normalize_na",
    "parse_credits",
    "parse_grades",
    "union_preserving_order",
    # GPA
    "GPA_VALUES",
    "GpaStats",
    "assign_gpa",
    "calculate_gpa",
    # Schools
    "dedupe_school_names",
    "find_canonical_name",
    "merge_school_names",
    "names_are_equivalent",
    "normalize_school_name",
    "resolve_source_school",
    "school_name_to_slug",
]
