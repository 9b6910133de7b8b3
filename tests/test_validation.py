"""Tests for the validation module.

This module tests catalog schema validation, issue formatting and the
markdown run report.
"""

from __future__ import annotations

from collections import Counter
import os
from pathlib import Path
from typing import Any

import pytest

from catalog_reconciler.exceptions import SchemaViolationError
from catalog_reconciler.merging import CollapseStats, MergeStats
from catalog_reconciler.normalization import GpaStats
from catalog_reconciler.prerequisites import ResolutionStats, UnmatchedPrerequisite
from catalog_reconciler.validation import RunReport, validate_catalog

# =============================================================================
# SCHEMA VALIDATION TESTS
# =============================================================================


class TestValidateCatalog:
    """Tests for validate_catalog."""

    def test_valid_document(self, catalog_document: dict[str, Any]) -> None:
        """Test that a well-formed catalog validates."""
        catalog = validate_catalog(catalog_document)

        assert len(catalog.courses) == len(catalog_document["courses"])
        assert catalog.source.district == "katy-isd"

    def test_accepts_model(self, catalog_document: dict[str, Any]) -> None:
        """Test that an already built catalog is revalidated."""
        catalog = validate_catalog(catalog_document)
        assert validate_catalog(catalog) == catalog

    def test_collects_every_issue(self, catalog_document: dict[str, Any]) -> None:
        """Test that all violations are reported at once."""
        catalog_document["courses"][0]["gpa"] = 3.0
        catalog_document["courses"][1]["credits"] = -1
        catalog_document["courses"][2]["subject"] = ""

        with pytest.raises(SchemaViolationError) as exc_info:
            validate_catalog(catalog_document)

        issues = exc_info.value.issues
        assert len(issues) == 3
        assert issues[0].startswith("courses[0:0310].gpa:")
        assert issues[1].startswith("courses[1:0330].credits:")
        assert issues[2].startswith("courses[2:0340].subject:")

    def test_duplicate_codes(self, catalog_document: dict[str, Any]) -> None:
        """Test that duplicate course codes are a violation."""
        catalog_document["courses"].append(dict(catalog_document["courses"][0]))

        with pytest.raises(SchemaViolationError, match="duplicate courseCode"):
            validate_catalog(catalog_document)

    def test_missing_source(self, catalog_document: dict[str, Any]) -> None:
        """Test that the source block is required."""
        del catalog_document["source"]

        with pytest.raises(SchemaViolationError) as exc_info:
            validate_catalog(catalog_document)

        assert exc_info.value.issues == ["source: Field required"]

    def test_message_previews_issues(self) -> None:
        """Test the exception message for long issue lists."""
        error = SchemaViolationError([f"courses[{i}].gpa: bad" for i in range(7)])

        assert "7 issue(s)" in str(error)
        assert "and 2 more" in str(error)


# =============================================================================
# RUN REPORT TESTS
# =============================================================================


@pytest.fixture
def full_report() -> RunReport:
    """Provide a report with statistics from every stage."""
    resolution = ResolutionStats(total=10, updated=4, unchanged=6, already_codes=2)
    resolution.rule_hits.update({"exact_name": 3, "containment": 1})
    resolution.unmatched.update({"Teacher approval": 2, "Band": 1})

    return RunReport(
        step="all",
        catalog_path=Path("output/catalog.json"),
        total_courses=10,
        merge=MergeStats(
            sources_merged=["a.json", "b.json"],
            sources_skipped=["broken.json"],
            rows_seen=14,
            inserted=11,
            merged=3,
        ),
        collapse=CollapseStats(before=11, after=10, collapsed_pairs=1, partial_pairs=2),
        gpa=GpaStats(total=10, updated=1, distribution=Counter({4.0: 8, 5.0: 2})),
        prerequisites=resolution,
        unmatched=[UnmatchedPrerequisite("Teacher approval", 2, "Theatre Arts", 61.5)],
    )


class TestRunReport:
    """Tests for RunReport."""

    def test_to_markdown_sections(self, full_report: RunReport) -> None:
        """Test that every stage has a section."""
        markdown = full_report.to_markdown()

        assert "# Catalog Reconciliation Report" in markdown
        assert "**Courses:** 10" in markdown
        assert "## Merge" in markdown
        assert "| Sources skipped | 1 |" in markdown
        assert "- `broken.json`" in markdown
        assert "## Semester Pairs" in markdown
        assert "| Pairs collapsed | 1 |" in markdown
        assert "| 5.0 | 2 |" in markdown
        assert "| exact_name | 3 |" in markdown

    def test_to_markdown_unmatched(self, full_report: RunReport) -> None:
        """Test the unmatched table and its overflow line."""
        markdown = full_report.to_markdown()

        assert "### ⚠️ Unmatched Prerequisites" in markdown
        assert "| Teacher approval | 2 | Theatre Arts | 62 |" in markdown
        assert "| ... | 1 more | ... | ... |" in markdown

    def test_sections_omitted_for_skipped_stages(self) -> None:
        """Test a single-stage report."""
        report = RunReport(step="gpa", gpa=GpaStats(total=1, distribution=Counter({4.0: 1})))
        markdown = report.to_markdown()

        assert "## GPA" in markdown
        assert "## Merge" not in markdown
        assert "Unmatched" not in markdown

    def test_save_archives_existing(self, tmp_path: Path, full_report: RunReport) -> None:
        """Test that a previous report is kept under a timestamped name."""
        path = tmp_path / "reports" / "run.md"
        path.parent.mkdir()
        path.write_text("old report", encoding="utf-8")
        os.utime(path, (0, 0))

        full_report.save(path)

        assert "Catalog Reconciliation Report" in path.read_text(encoding="utf-8")
        archived = tmp_path / "reports" / "run_1970-01-01T000000.md"
        assert archived.read_text(encoding="utf-8") == "old report"

    def test_save_creates_directories(self, tmp_path: Path, full_report: RunReport) -> None:
        """Test that missing parent directories are created."""
        path = tmp_path / "nested" / "dir" / "run.md"

        full_report.save(path)

        assert path.exists()
