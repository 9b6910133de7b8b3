"""Cross-source merging and semester-pair consolidation."""

from catalog_reconciler.merging.merger import (
    MERGED_TEXT_FIELDS,
    MergeStats,
    SourceDocument,
    merge_course,
    merge_source,
    merge_sources,
)
from catalog_reconciler.merging.semester_pairs import (
    FULL_YEAR_TERM,
    CollapseStats,
    CompletePair,
    DuplicateMember,
    GroupMember,
    PartialPair,
    Unpaired,
    classify_semester_groups,
    collapse_semester_pairs,
    consolidate_pair,
    split_semester_code,
    strip_semester_marker,
)

__all__ = [
    # Merger
    "MERGED_TEXT_FIELDS",
    "MergeStats",
    "SourceDocument",
    "merge_course",
    "merge_source",
    "merge_sources",
    # Semester pairs
    "FULL_YEAR_TERM",
    "CollapseStats",
    "CompletePair",
    "DuplicateMember",
    "GroupMember",
    "PartialPair",
    "Unpaired",
    "classify_semester_groups",
    "collapse_semester_pairs",
    "consolidate_pair",
    "split_semester_code",
    "strip_semester_marker",
]
