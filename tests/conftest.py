"""Pytest configuration and shared test fixtures.

This module provides fixtures for testing the catalog reconciler,
including course factories, sample catalogs and per-source files on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from catalog_reconciler.config import PipelineConfig
from catalog_reconciler.models.course import Course, create_course

DISTRICT = "katy-isd"
SOURCE_URL = "https://app.schoolinks.com/course-catalog/katy-isd/course-offerings"

# =============================================================================
# COURSE FACTORIES
# =============================================================================


def course_entry(code: str, name: str, **fields: Any) -> dict[str, Any]:
    """Build a course entry in on-disk (camelCase) form.

    Args:
        code: Course code.
        name: Course name.
        **fields: Extra camelCase fields.

    Returns:
        A raw course dict.
    """
    return {"courseCode": code, "courseName": name, **fields}


def make_course(code: str, name: str, **fields: Any) -> Course:
    """Build a normalized Course from camelCase fields."""
    return create_course(course_entry(code, name, **fields))


def write_json(path: Path, data: Any) -> Path:
    """Write a JSON fixture file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# =============================================================================
# CATALOG FIXTURES
# =============================================================================


@pytest.fixture
def sample_courses() -> list[Course]:
    """Provide a small catalog covering the common prerequisite shapes.

    Returns:
        Courses in catalog order.
    """
    return [
        make_course("0310", "Algebra 1", subject="Math", credits="1"),
        make_course("0330", "Geometry", subject="Math", credits="1"),
        make_course("0340", "Algebra 2 (KAP)", subject="Math", tags=["KAP"]),
        make_course("0380", "AP Calculus AB", subject="Math", tags=["AP"]),
        make_course("1110", "American Sign Language 1"),
        make_course("1120", "American Sign Language 2", prerequisite="ASL 1"),
        make_course("4610", "Journalism", subject="English"),
        make_course("5010", "Off Campus PE (Athletics 1)"),
        make_course("6010", "Engineering Design and Presentation 1"),
        make_course("6020", "Principles of Arts, A/V Technology and Communications"),
        make_course("6030", "Audio Video Production 1"),
        make_course("7010", "Computer Science Principles"),
    ]


@pytest.fixture
def catalog_document(sample_courses: list[Course]) -> dict[str, Any]:
    """Provide a valid catalog in on-disk form."""
    return {
        "source": {"district": DISTRICT, "url": SOURCE_URL},
        "courses": [course.to_document() for course in sample_courses],
    }


# =============================================================================
# FILESYSTEM FIXTURES
# =============================================================================


@pytest.fixture
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    """Provide a configuration rooted in a temporary directory."""
    return PipelineConfig(
        district=DISTRICT,
        source_url=SOURCE_URL,
        catalog_path=tmp_path / "output" / "catalog.json",
        sources_dir=tmp_path / "output" / "schools",
    )


@pytest.fixture
def source_files(pipeline_config: PipelineConfig) -> list[Path]:
    """Write two per-source files that share and split semester courses.

    Returns:
        Paths of the files written, in lexical order.
    """
    sources_dir = pipeline_config.sources_dir
    cinco_ranch = write_json(
        sources_dir / "courses.katyisd.CincoRanchHighSchool.json",
        {
            "source": {"district": DISTRICT, "url": SOURCE_URL},
            "courses": [
                course_entry(
                    "0100A",
                    "Art 1 A (High School Credit)",
                    credits=0.5,
                    term="Semester 1",
                    courseDescription="n/a",
                    schools=["CincoRanchHighSchool"],
                ),
                course_entry(
                    "0310",
                    "Algebra 1",
                    credits=1,
                    subject="n/a",
                    schools=["Cinco Ranch High School"],
                ),
            ],
        },
    )
    seven_lakes = write_json(
        sources_dir / "courses.katyisd.SevenLakesHighSchool.json",
        {
            "source": {"school": "Seven Lakes High School"},
            "courses": [
                course_entry(
                    "0100B",
                    "Art 1 B (High School Credit)",
                    credits=0.5,
                    term="Semester 2",
                    courseDescription="Drawing and painting.",
                ),
                course_entry("0310", "Algebra 1", credits=1, subject="Math"),
                course_entry(
                    "0320",
                    "Geometry",
                    credits=1,
                    prerequisite="Algebra I",
                    subject="Math",
                ),
            ],
        },
    )
    return [cinco_ranch, seven_lakes]
