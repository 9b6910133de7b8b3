"""Prerequisite name-to-code resolution.

This package provides:
- Matching normalization and the catalog lookup index
- The ordered, named match rule table
- Compound-prerequisite conversion and whole-catalog resolution
"""

from catalog_reconciler.prerequisites.matching import (
    ABBREVIATIONS,
    TYPO_CORRECTIONS,
    CourseIndex,
    PrerequisiteQuery,
    expand_abbreviations,
    fix_typos,
    has_qualifying_text,
    is_bare_numeral,
    normalize_for_matching,
    strip_corequisite_prefix,
)
from catalog_reconciler.prerequisites.resolver import (
    ResolutionStats,
    RuleMatch,
    UnmatchedPrerequisite,
    build_unmatched_report,
    convert_prerequisite,
    find_course_code,
    match_clause,
    resolve_prerequisites,
)
from catalog_reconciler.prerequisites.rules import (
    DEFAULT_RULES,
    WHOLE_STRING_RULES,
    MatchRule,
    get_rule,
)

__all__ = [
    # Matching
    "ABBREVIATIONS",
    "TYPO_CORRECTIONS",
    "CourseIndex",
    "PrerequisiteQuery",
    "expand_abbreviations",
    "fix_typos",
    "has_qualifying_text",
    "is_bare_numeral",
    "normalize_for_matching",
    "strip_corequisite_prefix",
    # Rules
    "DEFAULT_RULES",
    "WHOLE_STRING_RULES",
    "MatchRule",
    "get_rule",
    # Resolver
    "ResolutionStats",
    "RuleMatch",
    "UnmatchedPrerequisite",
    "build_unmatched_report",
    "convert_prerequisite",
    "find_course_code",
    "match_clause",
    "resolve_prerequisites",
]
