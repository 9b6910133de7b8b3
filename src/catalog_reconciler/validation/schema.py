"""Structural validation of catalog documents.

Every violation is collected before failing so a broken catalog can be
fixed in one pass rather than one error at a time.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
import structlog

from catalog_reconciler.exceptions import SchemaViolationError
from catalog_reconciler.models.course import CourseCatalog

logger = structlog.get_logger(__name__)


def _format_location(loc: tuple[int | str, ...], data: Any) -> str:
    """Render a pydantic error location, naming courses by their code.

    ``("courses", 3, "gpa")`` → ``courses[3:0100A].gpa``
    """
    parts: list[str] = []
    for i, item in enumerate(loc):
        if isinstance(item, int):
            label = f"[{item}"
            if i > 0 and loc[i - 1] == "courses" and isinstance(data, Mapping):
                courses = data.get("courses")
                if isinstance(courses, list) and item < len(courses):
                    entry = courses[item]
                    if isinstance(entry, Mapping) and entry.get("courseCode"):
                        label += f":{entry['courseCode']}"
            parts.append(label + "]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts) or "<root>"


def format_validation_errors(error: ValidationError, data: Any = None) -> list[str]:
    """Flatten a pydantic ValidationError into ``"location: message"`` lines.

    Args:
        error: The validation error.
        data: The validated input, used to name courses by code.

    Returns:
        One line per violation.
    """
    return [
        f"{_format_location(tuple(detail['loc']), data)}: {detail['msg']}"
        for detail in error.errors()
    ]


def validate_catalog(data: Mapping[str, Any] | CourseCatalog) -> CourseCatalog:
    """Validate a catalog document.

    Args:
        data: Catalog in on-disk (camelCase) form, or an existing model.

    Returns:
        The validated catalog.

    Raises:
        SchemaViolationError: With every violation found.
    """
    if isinstance(data, CourseCatalog):
        data = data.to_document()

    try:
        catalog = CourseCatalog.model_validate(data)
    except ValidationError as e:
        issues = format_validation_errors(e, data)
        logger.error("Catalog validation failed", issues=len(issues))
        raise SchemaViolationError(issues) from e

    logger.debug("Catalog validation passed", courses=len(catalog.courses))
    return catalog
