"""Reading and writing catalog and per-source files.

The catalog is read once at the start of a stage and rewritten wholesale
at the end. Writes go to a temporary file that is renamed over the target,
so a failed run never leaves a truncated catalog behind.
"""

from collections.abc import Mapping
import json
import os
from pathlib import Path
from typing import Any

import structlog

from catalog_reconciler.exceptions import MissingInputError
from catalog_reconciler.merging.merger import SourceDocument
from catalog_reconciler.models.course import CourseCatalog
from catalog_reconciler.validation.schema import validate_catalog

logger = structlog.get_logger(__name__)


def read_json(path: Path, stage: str) -> Any:
    """Read a JSON file produced by an earlier stage.

    Args:
        path: File to read.
        stage: Stage that produces the file, named in the error.

    Returns:
        The parsed document.

    Raises:
        MissingInputError: If the file is missing or not valid JSON.
    """
    if not path.is_file():
        raise MissingInputError(path, stage)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MissingInputError(path, stage, f"unreadable JSON: {e}") from e


def write_json(data: Any, path: Path) -> None:
    """Write a JSON document atomically (2-space indent, UTF-8).

    Args:
        data: JSON-serializable document.
        path: Destination file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")

    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def load_catalog(path: Path, stage: str = "merge") -> CourseCatalog:
    """Load and validate the district catalog.

    Args:
        path: Catalog file.
        stage: Stage that produces the catalog, named in errors.

    Returns:
        The validated catalog.

    Raises:
        MissingInputError: If the catalog file is missing or unreadable.
        SchemaViolationError: If the catalog fails validation.
    """
    data = read_json(path, stage)
    catalog = validate_catalog(data)
    logger.info("Loaded catalog", path=str(path), courses=len(catalog.courses))
    return catalog


def save_catalog(catalog: CourseCatalog | Mapping[str, Any], path: Path) -> CourseCatalog:
    """Validate and write the district catalog.

    Nothing is written if validation fails.

    Args:
        catalog: Catalog model or on-disk document.
        path: Destination file.

    Returns:
        The validated catalog that was written.

    Raises:
        SchemaViolationError: If the catalog fails validation.
    """
    validated = validate_catalog(catalog)
    write_json(validated.to_document(), path)
    logger.info("Saved catalog", path=str(path), courses=len(validated.courses))
    return validated


def discover_source_files(directory: Path, pattern: str) -> list[Path]:
    """Find per-source files in lexical file-name order.

    Merge results depend on this order, so it must not vary between runs.

    Args:
        directory: Directory holding per-source files.
        pattern: Glob for per-source file names.

    Returns:
        Matching files sorted by name.

    Raises:
        MissingInputError: If the directory is missing or holds no sources.
    """
    if not directory.is_dir():
        raise MissingInputError(directory, "ingest")

    paths = sorted((p for p in directory.glob(pattern) if p.is_file()), key=lambda p: p.name)
    if not paths:
        raise MissingInputError(directory / pattern, "ingest", "no per-source files")

    logger.debug("Discovered source files", directory=str(directory), count=len(paths))
    return paths


def load_source_document(path: Path) -> SourceDocument:
    """Read one per-source file.

    A file that is not valid JSON yields an empty document, which the
    merger skips with a warning.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Unreadable source file", path=str(path), error=str(e))
        data = {}
    if not isinstance(data, Mapping):
        data = {}
    return SourceDocument.from_path(path, data)


def load_source_documents(paths: list[Path]) -> list[SourceDocument]:
    """Read per-source files, preserving the given order."""
    return [load_source_document(path) for path in paths]


def save_source_document(data: Mapping[str, Any], path: Path) -> None:
    """Write a per-source document atomically."""
    write_json(dict(data), path)
    logger.info("Saved source document", path=str(path), courses=len(data.get("courses", [])))
