"""Tests for cross-source catalog merging.

This module tests the per-source fold, field-level conflict resolution
and school seeding from per-source documents.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from catalog_reconciler.catalog_io import load_source_documents
from catalog_reconciler.exceptions import SchemaViolationError
from catalog_reconciler.merging import (
    MergeStats,
    SourceDocument,
    merge_course,
    merge_source,
    merge_sources,
)
from tests.conftest import DISTRICT, SOURCE_URL, course_entry, make_course


def _document(name: str, *courses: dict, school: str | None = None) -> SourceDocument:
    source: dict = {"district": DISTRICT, "url": SOURCE_URL}
    if school:
        source["school"] = school
    return SourceDocument(name=name, data={"source": source, "courses": list(courses)})


class TestSourceDocument:
    """Tests for per-source document metadata."""

    def test_declared_school_from_source_block(self) -> None:
        """Test that an explicit school name wins."""
        document = _document("courses.katyisd.X.json", school="Katy High School")
        assert document.declared_school == "Katy High School"

    def test_declared_school_from_file_name(self) -> None:
        """Test that the last dotted segment of the file name is used."""
        document = _document("courses.katyisd.SevenLakesHighSchool.json")
        assert document.declared_school == "SevenLakesHighSchool"


class TestMergeCourse:
    """Tests for merging two courses with the same code."""

    def test_informative_existing_value_wins(self) -> None:
        """Test first-informative-value-wins for text fields."""
        existing = make_course("0310", "Algebra 1", subject="Math", term="n/a")
        incoming = make_course("0310", "Algebra I", subject="Mathematics", term="Semester 1")

        merged = merge_course(existing, incoming)

        assert merged.course_name == "Algebra 1"
        assert merged.subject == "Math"
        assert merged.term == "Semester 1"

    def test_zero_credits_are_replaced(self) -> None:
        """Test that zero credits take the incoming value."""
        existing = make_course("0310", "Algebra 1")
        incoming = make_course("0310", "Algebra 1", credits="1")

        assert merge_course(existing, incoming).credits == 1.0
        assert merge_course(incoming, existing).credits == 1.0

    def test_lists_are_unioned(self) -> None:
        """Test tag, grade and school unions."""
        existing = make_course(
            "0310", "Algebra 1", tags=["STEM"], eligibleGrades="9th", schools=["KatyHighSchool"]
        )
        incoming = make_course(
            "0310",
            "Algebra 1",
            tags=["STEM", "DC"],
            eligibleGrades="9th, 10th",
            schools=["Katy High School", "Tompkins High School"],
        )

        merged = merge_course(existing, incoming)

        assert merged.tags == ["STEM", "DC"]
        assert merged.eligible_grades == ["9th", "10th"]
        assert merged.schools == ["Katy High School", "Tompkins High School"]

    def test_gpa_follows_merged_tags(self) -> None:
        """Test that GPA is re-derived after tags are merged."""
        existing = make_course("2010", "Biology")
        incoming = make_course("2010", "Biology", tags=["DC"])

        assert merge_course(existing, incoming).gpa == 4.5


class TestMergeSource:
    """Tests for folding one source into the accumulator."""

    def test_accumulator_is_not_modified(self) -> None:
        """Test that the fold returns a new mapping."""
        accumulator = {"0310": make_course("0310", "Algebra 1")}
        document = _document("a.json", course_entry("0330", "Geometry"))

        result = merge_source(accumulator, document)

        assert list(accumulator) == ["0310"]
        assert list(result) == ["0310", "0330"]

    def test_source_without_courses_is_skipped(self) -> None:
        """Test that a malformed document contributes nothing."""
        stats = MergeStats()
        document = SourceDocument(name="broken.json", data={"source": {}, "courses": "oops"})

        result = merge_source({}, document, stats)

        assert result == {}
        assert stats.sources_skipped == ["broken.json"]
        assert stats.sources_merged == []

    def test_row_without_code_is_skipped(self) -> None:
        """Test that entries lacking a course code are dropped."""
        stats = MergeStats()
        document = _document(
            "a.json",
            {"courseName": "No Code"},
            {"courseCode": "  ", "courseName": "Blank Code"},
            course_entry("0310", "Algebra 1"),
        )

        result = merge_source({}, document, stats)

        assert list(result) == ["0310"]
        assert stats.rows_seen == 3
        assert stats.rows_without_code == 2

    def test_missing_schools_seeded_from_source(self) -> None:
        """Test that a course without schools gets the source school."""
        stats = MergeStats()
        document = _document("a.json", course_entry("0310", "Algebra 1"), school="Katy High School")

        result = merge_source({}, document, stats)

        assert result["0310"].schools == ["Katy High School"]
        assert stats.schools_defaulted == 1

    def test_invalid_entry_raises(self) -> None:
        """Test that an entry that cannot be normalized is fatal."""
        document = _document("a.json", course_entry("0310", "Algebra 1", tags="AP"))

        with pytest.raises(SchemaViolationError) as exc_info:
            merge_source({}, document)

        assert exc_info.value.issues
        assert exc_info.value.issues[0].startswith("a.json [0310]")


class TestMergeSources:
    """Tests for merging source files from disk."""

    def test_merges_fixture_sources(self, source_files: list[Path]) -> None:
        """Test the full fold over two per-source files."""
        merged, stats = merge_sources(load_source_documents(source_files))

        assert list(merged) == ["0100A", "0310", "0100B", "0320"]
        assert stats.rows_seen == 5
        assert stats.inserted == 4
        assert stats.merged == 1
        assert stats.schools_defaulted == 3
        assert len(stats.sources_merged) == 2

    def test_shared_course_is_coalesced(self, source_files: list[Path]) -> None:
        """Test that a course in both sources gains the later subject and school."""
        merged, _ = merge_sources(load_source_documents(source_files))

        algebra = merged["0310"]
        assert algebra.subject == "Math"
        assert algebra.credits == 1.0
        assert algebra.schools == ["Cinco Ranch High School", "Seven Lakes High School"]

    def test_compact_school_upgraded_from_course_data(self, source_files: list[Path]) -> None:
        """Test that the file-name slug resolves to the spaced school name."""
        merged, _ = merge_sources(load_source_documents(source_files))

        assert merged["0100A"].schools == ["Cinco Ranch High School"]

    def test_merge_is_idempotent(self, source_files: list[Path]) -> None:
        """Test that merging the same sources twice changes nothing."""
        documents = load_source_documents(source_files)

        once, _ = merge_sources(documents)
        twice, _ = merge_sources(documents, initial=once)

        assert twice == once

    def test_codes_are_unique(self, source_files: list[Path]) -> None:
        """Test one entry per course code."""
        merged, _ = merge_sources(load_source_documents(source_files))

        codes = [course.course_code for course in merged.values()]
        assert len(codes) == len(set(codes))
