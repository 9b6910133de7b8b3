#!/usr/bin/env python3
"""Quick-run script for the Course Catalog Reconciler.

This runs the complete 4-stage pipeline:
1. Merge per-school files into the district catalog
2. Collapse A/B semester pairs into full-year courses
3. Re-derive GPA values
4. Resolve prerequisite names to course codes

Usage:
    python run.py

    # Or with UV:
    uv run python run.py

    # Single step against an existing catalog:
    STEP=prerequisites python run.py
"""

import os
from pathlib import Path

# Add src to path for development
import sys

sys.path.insert(0, str(Path(__file__).parent / "src"))

from catalog_reconciler import PipelineConfig, run_pipeline


def main():
    """Run the pipeline with settings from the environment."""
    step = os.getenv("STEP", "all")

    config = PipelineConfig.from_env()
    config.report_path = config.catalog_path.with_name("reconciliation_report.md")

    report = run_pipeline(config, step=step)

    print(f"\n{'=' * 60}")
    print("PIPELINE SUMMARY")
    print(f"{'=' * 60}")
    print(f"Step: {report.step}")
    print(f"Total Courses: {report.total_courses}")
    if report.merge:
        print(f"Sources Merged: {len(report.merge.sources_merged)}")
    if report.collapse:
        print(f"Semester Pairs Collapsed: {report.collapse.collapsed_pairs}")
    if report.prerequisites:
        print(f"Prerequisites Updated: {report.prerequisites.updated}")
        print(f"Unmatched Prerequisites: {len(report.prerequisites.unmatched)}")
    print(f"\nCatalog saved to: {config.catalog_path}")
    print(f"Report saved to: {config.report_path}")


if __name__ == "__main__":
    main()
