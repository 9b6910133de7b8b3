"""Catalog validation and run reports.

This package provides:
- Structural validation that collects every violation
- Markdown reports of pipeline runs
"""

from catalog_reconciler.validation.reporter import RunReport
from catalog_reconciler.validation.schema import (
    format_validation_errors,
    validate_catalog,
)

__all__ = [
    # Schema
    "format_validation_errors",
    "validate_catalog",
    # Reporter
    "RunReport",
]
