"""Run report generation.

Renders the statistics collected by the pipeline stages as a markdown
document for manual follow-up on unmatched prerequisites and semester
duplicates.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from catalog_reconciler.merging.merger import MergeStats
    from catalog_reconciler.merging.semester_pairs import CollapseStats
    from catalog_reconciler.normalization.gpa import GpaStats
    from catalog_reconciler.prerequisites.resolver import (
        ResolutionStats,
        UnmatchedPrerequisite,
    )

logger = structlog.get_logger(__name__)


@dataclass
class RunReport:
    """Structured report of one pipeline run.

    Attributes:
        timestamp: When the run finished.
        step: Pipeline step that was run.
        catalog_path: Catalog file that was written.
        total_courses: Courses in the written catalog.
        merge: Merge statistics, if the merge stage ran.
        collapse: Pair-collapse statistics, if that stage ran.
        gpa: GPA statistics, if that stage ran.
        prerequisites: Resolution statistics, if that stage ran.
        unmatched: Ranked unmatched prerequisites with suggestions.
    """

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    step: str = "all"
    catalog_path: Path | None = None
    total_courses: int = 0
    merge: "MergeStats | None" = None
    collapse: "CollapseStats | None" = None
    gpa: "GpaStats | None" = None
    prerequisites: "ResolutionStats | None" = None
    unmatched: list["UnmatchedPrerequisite"] = field(default_factory=list)

    def to_markdown(self) -> str:
        """Generate markdown report.

        Returns:
            Markdown-formatted report string.
        """
        lines = [
            "# Catalog Reconciliation Report",
            "",
            f"**Generated:** {self.timestamp.isoformat()}",
            f"**Step:** {self.step}",
        ]
        if self.catalog_path is not None:
            lines.append(f"**Catalog:** `{self.catalog_path}`")
        lines.extend([f"**Courses:** {self.total_courses}", ""])

        if self.merge is not None:
            lines.extend(
                [
                    "## Merge",
                    "",
                    "| Metric | Count |",
                    "|--------|-------|",
                    f"| Sources merged | {len(self.merge.sources_merged)} |",
                    f"| Sources skipped | {len(self.merge.sources_skipped)} |",
                    f"| Rows seen | {self.merge.rows_seen} |",
                    f"| Rows without course code | {self.merge.rows_without_code} |",
                    f"| New courses | {self.merge.inserted} |",
                    f"| Merged into existing | {self.merge.merged} |",
                    "",
                ]
            )
            if self.merge.sources_skipped:
                lines.append("### ⚠️ Skipped Sources")
                lines.append("")
                lines.extend(f"- `{name}`" for name in self.merge.sources_skipped)
                lines.append("")

        if self.collapse is not None:
            lines.extend(
                [
                    "## Semester Pairs",
                    "",
                    "| Metric | Count |",
                    "|--------|-------|",
                    f"| Courses before | {self.collapse.before} |",
                    f"| Courses after | {self.collapse.after} |",
                    f"| Pairs collapsed | {self.collapse.collapsed_pairs} |",
                    f"| Partial pairs | {self.collapse.partial_pairs} |",
                    f"| Duplicate members | {self.collapse.duplicates} |",
                    f"| Base-code collisions | {self.collapse.code_collisions} |",
                    "",
                ]
            )

        if self.gpa is not None:
            lines.extend(["## GPA", "", "| GPA | Courses |", "|-----|---------|"])
            for value, count in sorted(self.gpa.distribution.items()):
                lines.append(f"| {value} | {count} |")
            lines.extend(["", f"Updated **{self.gpa.updated}** of {self.gpa.total} courses.", ""])

        if self.prerequisites is not None:
            stats = self.prerequisites
            lines.extend(
                [
                    "## Prerequisites",
                    "",
                    "| Metric | Count |",
                    "|--------|-------|",
                    f"| Updated | {stats.updated} |",
                    f"| Unchanged | {stats.unchanged} |",
                    f"| Already course codes | {stats.already_codes} |",
                    f"| Distinct unmatched | {len(stats.unmatched)} |",
                    "",
                ]
            )
            if stats.rule_hits:
                lines.extend(["### Rule Hits", "", "| Rule | Clauses |", "|------|---------|"])
                for rule, count in stats.rule_hits.most_common():
                    lines.append(f"| {rule} | {count} |")
                lines.append("")

        if self.unmatched:
            lines.extend(
                [
                    "### ⚠️ Unmatched Prerequisites",
                    "",
                    "| Prerequisite | Occurrences | Closest Course | Score |",
                    "|--------------|-------------|----------------|-------|",
                ]
            )
            for entry in self.unmatched:
                suggestion = entry.suggestion or "-"
                lines.append(f"| {entry.text} | {entry.count} | {suggestion} | {entry.score:.0f} |")
            if self.prerequisites is not None and len(self.prerequisites.unmatched) > len(
                self.unmatched
            ):
                remaining = len(self.prerequisites.unmatched) - len(self.unmatched)
                lines.append(f"| ... | {remaining} more | ... | ... |")
            lines.extend(["", "These prerequisites were kept as written.", ""])

        return "\n".join(lines)

    def save(self, filepath: Path) -> None:
        """Save report to file.

        Archives any existing report with its modification timestamp
        before writing the new one.

        Args:
            filepath: Path to save the report.
        """
        filepath.parent.mkdir(parents=True, exist_ok=True)
        if filepath.exists():
            self._archive_existing(filepath)
        filepath.write_text(self.to_markdown(), encoding="utf-8")
        logger.info("Saved run report", path=str(filepath))

    @staticmethod
    def _archive_existing(filepath: Path) -> Path:
        mtime = filepath.stat().st_mtime
        ts = datetime.fromtimestamp(mtime, tz=UTC).strftime("%Y-%m-%dT%H%M%S")
        archived = filepath.with_name(f"{filepath.stem}_{ts}{filepath.suffix}")
        filepath.rename(archived)
        logger.info("Archived previous report", path=str(archived))
        return archived
