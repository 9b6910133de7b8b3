"""Pydantic models for the catalog reconciliation pipeline."""

from catalog_reconciler.models.course import (
    SCALAR_TEXT_FIELDS,
    CatalogSource,
    Course,
    CourseCatalog,
    RawRecord,
    create_course,
)

__all__ = [
    "SCALAR_TEXT_FIELDS",
    "CatalogSource",
    "Course",
    "CourseCatalog",
    "RawRecord",
    "create_course",
]
